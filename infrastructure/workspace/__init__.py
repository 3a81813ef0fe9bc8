from infrastructure.workspace.base_store import WorkspaceStoreBase
from infrastructure.workspace.codec import WorkspaceLoadError
from infrastructure.workspace.json_store import JsonWorkspaceStore
from infrastructure.workspace.store_registry import WorkspaceStoreRegistry
from infrastructure.workspace.yaml_store import YamlWorkspaceStore

__all__ = [
    "WorkspaceLoadError",
    "WorkspaceStoreBase",
    "WorkspaceStoreRegistry",
    "YamlWorkspaceStore",
    "JsonWorkspaceStore",
]
