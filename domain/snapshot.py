# domain/snapshot.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from domain.exceptions import ValidationError


@dataclass(frozen=True)
class ResponseSnapshot:
    url: str
    status: int
    status_text: str
    content_type: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: str = ""
    length: int = 0

    @property
    def size_kb(self) -> float:
        return self.length / 1000.0

    def pretty_body(self) -> str:
        if not self.body:
            return ""
        try:
            parsed = json.loads(self.body)
        except ValueError:
            return self.body
        return json.dumps(parsed, indent=2, ensure_ascii=False)


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    INVALID_REQUEST = "invalid_request"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class DispatchFailure:
    kind: FailureKind
    message: str = ""


@dataclass(frozen=True)
class DispatchResult:
    dispatch_id: str
    location_id: str
    sequence: int
    snapshot: Optional[ResponseSnapshot] = None
    failure: Optional[DispatchFailure] = None

    def __post_init__(self) -> None:
        if (self.snapshot is None) == (self.failure is None):
            raise ValidationError("DispatchResult needs exactly one of snapshot or failure")

    @property
    def ok(self) -> bool:
        return self.snapshot is not None

    @classmethod
    def succeeded(cls, dispatch_id: str, location_id: str, sequence: int, snapshot: ResponseSnapshot) -> "DispatchResult":
        return cls(dispatch_id=dispatch_id, location_id=location_id, sequence=sequence, snapshot=snapshot)

    @classmethod
    def failed(
        cls,
        dispatch_id: str,
        location_id: str,
        sequence: int,
        kind: FailureKind,
        message: str = "",
    ) -> "DispatchResult":
        return cls(
            dispatch_id=dispatch_id,
            location_id=location_id,
            sequence=sequence,
            failure=DispatchFailure(kind=kind, message=message),
        )


@dataclass(frozen=True)
class ResultSlot:
    """Last outcome seen for one Location."""
    sequence: int = -1
    snapshot: Optional[ResponseSnapshot] = None
    failure: Optional[DispatchFailure] = None
    dispatch_id: Optional[str] = None

    def apply(self, result: DispatchResult) -> "ResultSlot":
        if result.sequence < self.sequence:
            return self
        if result.ok:
            return ResultSlot(
                sequence=result.sequence,
                snapshot=result.snapshot,
                failure=None,
                dispatch_id=result.dispatch_id,
            )
        # a failed dispatch keeps the previous snapshot on display
        return ResultSlot(
            sequence=result.sequence,
            snapshot=self.snapshot,
            failure=result.failure,
            dispatch_id=result.dispatch_id,
        )
