# infrastructure/workspace/codec.py
"""
Workspace <-> plain dict (JSON / YAML compatible).
"""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from domain.collection import CollectionStore
from domain.directory import Directory
from domain.location import ContentType, Location, Method
from domain.workspace import Workspace

FORMAT_VERSION = 1


class WorkspaceLoadError(Exception):
    pass


def _pairs_to_list(pairs: List[Tuple[str, str]]) -> List[List[str]]:
    return [[k, v] for k, v in pairs]


def _pairs_from_list(data: Any, where: str) -> List[Tuple[str, str]]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise WorkspaceLoadError(f"{where} must be a list of pairs")
    out: List[Tuple[str, str]] = []
    for row in data:
        if not isinstance(row, (list, tuple)) or len(row) != 2:
            raise WorkspaceLoadError(f"{where} contains an invalid pair: {row!r}")
        k, v = row
        out.append(("" if k is None else str(k), "" if v is None else str(v)))
    return out


def location_to_dict(location: Location) -> Dict[str, Any]:
    return {
        "id": location.id,
        "name": location.name,
        "url": location.url,
        "method": location.method.value,
        "params": _pairs_to_list(location.params),
        "body": location.body,
        "form_params": _pairs_to_list(location.form_params),
        "header": _pairs_to_list(location.header),
        "content_type": location.content_type.value,
    }


def location_from_dict(location_id: str, data: Dict[str, Any]) -> Location:
    if not isinstance(data, dict):
        raise WorkspaceLoadError(f"Location {location_id} must be a mapping")
    try:
        content_type = ContentType(data.get("content_type", ContentType.JSON.value))
    except ValueError as e:
        raise WorkspaceLoadError(f"Location {location_id} has unknown content_type") from e
    where = f"Location {location_id}"
    return Location(
        id=str(data.get("id") or location_id),
        name=str(data.get("name", "")),
        url=str(data.get("url", "")),
        method=Method.from_text(data.get("method")),
        params=_pairs_from_list(data.get("params"), f"{where}.params"),
        body=str(data.get("body") or ""),
        form_params=_pairs_from_list(data.get("form_params"), f"{where}.form_params"),
        header=_pairs_from_list(data.get("header"), f"{where}.header"),
        content_type=content_type,
    )


def directory_to_dict(directory: Directory) -> Dict[str, Any]:
    return {
        "id": directory.id,
        "name": directory.name,
        "parent": directory.parent,
        "leaf": directory.leaf,
        "locations": list(directory.locations),
    }


def directory_from_dict(directory_id: str, data: Dict[str, Any]) -> Directory:
    if not isinstance(data, dict):
        raise WorkspaceLoadError(f"Directory {directory_id} must be a mapping")
    locations = data.get("locations") or []
    if not isinstance(locations, list):
        raise WorkspaceLoadError(f"Directory {directory_id}.locations must be a list")
    return Directory(
        id=str(data.get("id") or directory_id),
        name=str(data.get("name", "")),
        parent=str(data.get("parent") or ""),
        leaf=bool(data.get("leaf", False)),
        locations=[str(i) for i in locations],
    )


def workspace_to_dict(workspace: Workspace) -> Dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "buffers": {
            location_id: location_to_dict(location)
            for location_id, location in workspace.collection.buffers.items()
        },
        "directory": {
            directory_id: directory_to_dict(directory)
            for directory_id, directory in workspace.directories.items()
        },
        "layout": {
            "open_tabs": list(workspace.open_tabs),
            "active": workspace.active_location_id,
        },
    }


def workspace_from_dict(data: Dict[str, Any]) -> Workspace:
    if not isinstance(data, dict):
        raise WorkspaceLoadError("Workspace document must be a mapping")

    buffers = data.get("buffers") or {}
    directories = data.get("directory") or {}
    layout = data.get("layout") or {}
    if not isinstance(buffers, dict) or not isinstance(directories, dict) or not isinstance(layout, dict):
        raise WorkspaceLoadError("Workspace document sections must be mappings")

    collection = CollectionStore()
    for location_id, raw in buffers.items():
        collection.insert(str(location_id), location_from_dict(str(location_id), raw))

    workspace = Workspace(collection=collection)
    for directory_id, raw in directories.items():
        workspace.directories[str(directory_id)] = directory_from_dict(str(directory_id), raw)

    # tabs pointing at deleted Locations are dropped on load
    workspace.open_tabs = [str(i) for i in (layout.get("open_tabs") or []) if str(i) in collection]
    active = layout.get("active")
    workspace.active_location_id = active if active in workspace.open_tabs else None
    return workspace
