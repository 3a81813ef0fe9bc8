# infrastructure/workspace/store_registry.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

from infrastructure.workspace.base_store import WorkspaceStoreBase
from infrastructure.workspace.codec import WorkspaceLoadError
from infrastructure.workspace.json_store import JsonWorkspaceStore
from infrastructure.workspace.yaml_store import YamlWorkspaceStore


class WorkspaceStoreRegistry:
    def __init__(self) -> None:
        self._factories: Dict[str, Callable[[Path], WorkspaceStoreBase]] = {
            ".yaml": YamlWorkspaceStore,
            ".yml": YamlWorkspaceStore,
            ".json": JsonWorkspaceStore,
        }

    def get_store(self, path: Path) -> WorkspaceStoreBase:
        ext = Path(path).suffix.lower()
        factory = self._factories.get(ext)
        if factory is None:
            raise WorkspaceLoadError(f"Unsupported workspace format: {ext}")
        return factory(Path(path))
