# domain/location.py
"""
Location: one stored HTTP request specification.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from domain.ids import new_id

Pair = Tuple[str, str]


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"

    @classmethod
    def from_text(cls, text: Optional[str]) -> "Method":
        """Case-insensitive lookup; anything unrecognized falls back to GET."""
        normalized = (text or "").strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            return cls.GET


class ContentType(str, Enum):
    JSON = "Json"
    FORM_URL_ENCODED = "FormUrlEncoded"
    FORM_DATA = "FormData"

    @property
    def mime(self) -> str:
        return {
            ContentType.JSON: "application/json",
            ContentType.FORM_URL_ENCODED: "application/x-www-form-urlencoded",
            ContentType.FORM_DATA: "multipart/form-data",
        }[self]


def non_empty_pairs(pairs: List[Pair]) -> List[Pair]:
    """Rows with an empty key stay in storage but never go on the wire."""
    return [(k, v) for k, v in (pairs or []) if k]


@dataclass(eq=False)
class Location:
    id: str
    name: str
    url: str = ""
    method: Method = Method.GET
    params: List[Pair] = field(default_factory=list)
    body: str = ""
    form_params: List[Pair] = field(default_factory=list)
    header: List[Pair] = field(default_factory=list)
    content_type: ContentType = ContentType.JSON

    @classmethod
    def create(cls, name: str, url: str, method: Method = Method.GET) -> "Location":
        return cls(
            id=new_id(),
            name=name,
            url=url,
            method=method,
            header=[("", "")],
        )

    def copy(self) -> "Location":
        return copy.deepcopy(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
