# infrastructure/workspace/base_store.py
from __future__ import annotations

import os
import tempfile
from abc import abstractmethod
from pathlib import Path
from typing import Any, Dict

from application.ports.workspace_store import WorkspaceStorePort
from domain.workspace import Workspace
from infrastructure.workspace.codec import WorkspaceLoadError, workspace_from_dict, workspace_to_dict


class WorkspaceStoreBase(WorkspaceStorePort):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Workspace:
        """A missing file is a fresh, empty workspace."""
        if not self.path.exists():
            return Workspace()
        try:
            data = self._read_file(self.path)
        except WorkspaceLoadError:
            raise
        except Exception as e:
            raise WorkspaceLoadError(f"Cannot read workspace file {self.path}: {e}") from e
        if data is None:
            return Workspace()
        return workspace_from_dict(data)

    def save(self, workspace: Workspace) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                self._write(handle, workspace_to_dict(workspace))
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @abstractmethod
    def _read_file(self, path: Path) -> Any:
        ...

    @abstractmethod
    def _write(self, handle, data: Dict[str, Any]) -> None:
        ...
