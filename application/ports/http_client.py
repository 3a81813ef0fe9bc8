# application/ports/http_client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class TransportError(Exception):
    """Network-level failure: DNS, refused connection, timeout, TLS."""


class InvalidRequestError(Exception):
    """The outbound request could not be sent at all (bad or empty URL)."""


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    url: str
    params: List[Tuple[str, str]] = field(default_factory=list)
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: Optional[bytes] = None
    form: Optional[List[Tuple[str, str]]] = None       # x-www-form-urlencoded
    multipart: Optional[List[Tuple[str, str]]] = None  # multipart/form-data text fields


@dataclass(frozen=True)
class HttpResponse:
    status: int
    reason: str
    url: str
    headers: List[Tuple[str, str]]
    content: bytes = b""


class HttpClientPort(ABC):
    @abstractmethod
    def send(self, request: OutboundRequest) -> HttpResponse:
        """
        Perform one round-trip. Any HTTP status is a normal return value;
        raise TransportError / InvalidRequestError when no response exists.
        """
        ...

    def close(self) -> None:
        """Release pooled connections. Adapters without any keep the default."""
        return None
