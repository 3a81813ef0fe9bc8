# domain/collection.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from domain.exceptions import LocationNotFoundError
from domain.location import Location, Method


@dataclass
class CollectionStore:
    """
    id -> Location mapping. Directories only reference ids held here.
    """
    buffers: Dict[str, Location] = field(default_factory=dict)

    def create(self, name: str, url: str, method: Method = Method.GET) -> Location:
        location = Location.create(name, url, method)
        self.insert(location.id, location)
        return location

    def insert(self, location_id: str, location: Location) -> None:
        self.buffers[location_id] = location

    def remove(self, location_id: str) -> Location:
        # does not touch directories; callers drop dangling references themselves
        location = self.buffers.pop(location_id, None)
        if location is None:
            raise LocationNotFoundError(location_id)
        return location

    def get(self, location_id: str) -> Location:
        location = self.buffers.get(location_id)
        if location is None:
            raise LocationNotFoundError(location_id)
        return location

    def find(self, location_id: str) -> Optional[Location]:
        return self.buffers.get(location_id)

    def ids(self) -> List[str]:
        return list(self.buffers.keys())

    def __contains__(self, location_id: object) -> bool:
        return location_id in self.buffers

    def __len__(self) -> int:
        return len(self.buffers)

    def __iter__(self) -> Iterator[Location]:
        return iter(list(self.buffers.values()))
