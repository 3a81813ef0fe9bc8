# application/services/snapshot_builder.py
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from application.ports.http_client import HttpResponse
from domain.snapshot import ResponseSnapshot

DEFAULT_CONTENT_TYPE = "text/plain"
DEFAULT_CHARSET = "utf-8"

_CHARSET_RE = re.compile(r"charset\s*=\s*([^\s;]+)", re.I)


def _first_header(headers: List[Tuple[str, str]], name: str) -> Optional[str]:
    lowered = name.lower()
    for key, value in headers:
        if key.lower() == lowered:
            return value
    return None


def parse_content_length(raw: Optional[str]) -> Optional[int]:
    """Malformed or negative values are treated as absent."""
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 0 else None


def media_type(content_type: Optional[str]) -> str:
    if not content_type:
        return DEFAULT_CONTENT_TYPE
    return content_type.split(";", 1)[0].strip() or DEFAULT_CONTENT_TYPE


def decode_body(content: bytes, content_type: Optional[str]) -> str:
    """
    Decode with the Content-Type charset (utf-8 when absent).
    Undecodable bodies become "".
    """
    if not content:
        return ""
    charset = DEFAULT_CHARSET
    m = _CHARSET_RE.search(content_type or "")
    if m:
        charset = m.group(1).strip().strip('"').strip("'")
    try:
        return content.decode(charset)
    except (UnicodeDecodeError, LookupError):
        return ""


class SnapshotBuilder:
    def build(self, response: HttpResponse) -> ResponseSnapshot:
        headers = list(response.headers or [])
        content_type = _first_header(headers, "Content-Type")
        body = decode_body(response.content or b"", content_type)

        length = parse_content_length(_first_header(headers, "Content-Length"))
        if length is None:
            length = len(body.encode("utf-8"))

        return ResponseSnapshot(
            url=response.url,
            status=int(response.status),
            status_text=response.reason or "",
            content_type=media_type(content_type),
            headers=headers,
            body=body,
            length=length,
        )
