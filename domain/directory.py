# domain/directory.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class Directory:
    id: str
    name: str
    parent: str = ""  # "" => root
    leaf: bool = False
    locations: List[str] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return not self.parent

    def holds(self, location_id: str) -> bool:
        return location_id in self.locations

    def release(self, location_id: str) -> bool:
        if location_id not in self.locations:
            return False
        self.locations = [i for i in self.locations if i != location_id]
        return True
