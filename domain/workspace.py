# domain/workspace.py
"""
Workspace aggregate: collection store, directory tree and tab layout.

Owned by the interactive session and mutated only from user actions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from domain.collection import CollectionStore
from domain.directory import Directory
from domain.exceptions import DirectoryNotFoundError, LocationNotFoundError
from domain.ids import new_id
from domain.location import Location, Method

DEFAULT_LOCATION_NAME = "Item get"
DEFAULT_LOCATION_URL = "https://httpbin.org/get"


@dataclass(frozen=True)
class ImportedCollection:
    directory: Directory
    locations: List[Location]
    children: List[Directory] = field(default_factory=list)

    @property
    def directories(self) -> List[Directory]:
        return [self.directory] + list(self.children)


@dataclass
class Workspace:
    collection: CollectionStore = field(default_factory=CollectionStore)
    directories: Dict[str, Directory] = field(default_factory=dict)
    open_tabs: List[str] = field(default_factory=list)
    active_location_id: Optional[str] = None

    # --- directories -------------------------------------------------

    def get_directory(self, directory_id: str) -> Directory:
        directory = self.directories.get(directory_id)
        if directory is None:
            raise DirectoryNotFoundError(directory_id)
        return directory

    def add_directory(self, name: Optional[str] = None, parent: str = "") -> Directory:
        if parent:
            self.get_directory(parent)
        directory = Directory(
            id=new_id(),
            name=name or f"new {len(self.directories)}",
            parent=parent,
        )
        self.directories[directory.id] = directory
        return directory

    def rename_directory(self, directory_id: str, name: str) -> Directory:
        directory = self.get_directory(directory_id)
        directory.name = name
        return directory

    def remove_directory(self, directory_id: str) -> Directory:
        """
        Drop the directory only. Its Locations stay in the collection store as
        orphans and its child directories move to the root.
        """
        directory = self.directories.pop(directory_id, None)
        if directory is None:
            raise DirectoryNotFoundError(directory_id)
        for child in self.directories.values():
            if child.parent == directory_id:
                child.parent = ""
        return directory

    def root_directories(self) -> List[Directory]:
        return [d for d in self.directories.values() if d.is_root]

    def children_of(self, directory_id: str) -> List[Directory]:
        return [d for d in self.directories.values() if d.parent == directory_id]

    # --- locations ---------------------------------------------------

    def add_location(
        self,
        directory_id: str,
        name: str = DEFAULT_LOCATION_NAME,
        url: str = DEFAULT_LOCATION_URL,
        method: Method = Method.GET,
    ) -> Location:
        directory = self.get_directory(directory_id)
        location = self.collection.create(name, url, method)
        directory.locations.append(location.id)
        return location

    def attach_location(self, directory_id: str, location_id: str) -> None:
        directory = self.get_directory(directory_id)
        if location_id not in self.collection:
            raise LocationNotFoundError(location_id)
        self._release_everywhere(location_id, keep=directory_id)
        if not directory.holds(location_id):
            directory.locations.append(location_id)

    def detach_location(self, directory_id: str, location_id: str) -> bool:
        return self.get_directory(directory_id).release(location_id)

    def delete_location(self, location_id: str) -> Location:
        location = self.collection.remove(location_id)
        self._release_everywhere(location_id)
        self.close_tab(location_id)
        return location

    def owner_of(self, location_id: str) -> Optional[Directory]:
        for directory in self.directories.values():
            if directory.holds(location_id):
                return directory
        return None

    def orphaned_location_ids(self) -> List[str]:
        owned = {i for d in self.directories.values() for i in d.locations}
        return [i for i in self.collection.ids() if i not in owned]

    def search(self, text: str) -> List[Location]:
        needle = (text or "").strip().lower()
        if not needle:
            return list(self.collection)
        return [loc for loc in self.collection if needle in loc.name.lower()]

    # --- tab layout --------------------------------------------------

    def open_location(self, location_id: str) -> Location:
        location = self.collection.get(location_id)
        if location_id not in self.open_tabs:
            self.open_tabs.append(location_id)
        self.active_location_id = location_id
        return location

    def close_tab(self, location_id: str) -> None:
        if location_id not in self.open_tabs:
            return
        index = self.open_tabs.index(location_id)
        self.open_tabs.remove(location_id)
        if self.active_location_id == location_id:
            if self.open_tabs:
                self.active_location_id = self.open_tabs[min(index, len(self.open_tabs) - 1)]
            else:
                self.active_location_id = None

    # --- import ------------------------------------------------------

    def merge_import(self, collections: List[ImportedCollection]) -> None:
        """
        Upsert imported directories and Locations. Same ids overwrite what was
        there before; nothing is deduplicated.
        """
        for imported in collections:
            for location in imported.locations:
                self.collection.insert(location.id, location)
            for directory in imported.directories:
                self.directories[directory.id] = directory
                for location_id in directory.locations:
                    self._release_everywhere(location_id, keep=directory.id)

    def _release_everywhere(self, location_id: str, keep: Optional[str] = None) -> None:
        for directory in self.directories.values():
            if directory.id != keep:
                directory.release(location_id)
