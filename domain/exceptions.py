# domain/exceptions.py
from __future__ import annotations


class DomainError(Exception):
    pass


class ValidationError(DomainError):
    pass


class LocationNotFoundError(DomainError):
    def __init__(self, location_id: str) -> None:
        super().__init__(f"Location not found: {location_id}")
        self.location_id = location_id


class DirectoryNotFoundError(DomainError):
    def __init__(self, directory_id: str) -> None:
        super().__init__(f"Directory not found: {directory_id}")
        self.directory_id = directory_id
