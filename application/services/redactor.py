# application/services/redactor.py
from __future__ import annotations

from typing import List, Tuple

SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "api-key",
    "x-auth-token",
}

MASK = "********"


def is_sensitive(name: str) -> bool:
    return name.strip().lower() in SENSITIVE_HEADERS


def mask_header(name: str, value: str) -> str:
    if is_sensitive(name) and value:
        return MASK
    return value


def mask_headers(pairs: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    return [(k, mask_header(k, v)) for k, v in (pairs or [])]
