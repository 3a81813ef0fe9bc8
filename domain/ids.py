# domain/ids.py
from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from domain.exceptions import ValidationError


def new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class DispatchId:
    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValidationError("Dispatch id must not be empty")

    @classmethod
    def generate(cls) -> "DispatchId":
        return cls(uuid4().hex)

    def __str__(self) -> str:
        return self.value
