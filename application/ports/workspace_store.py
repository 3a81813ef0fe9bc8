# application/ports/workspace_store.py
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.workspace import Workspace


class WorkspaceStorePort(ABC):
    @abstractmethod
    def load(self) -> Workspace:
        ...

    @abstractmethod
    def save(self, workspace: Workspace) -> None:
        ...
