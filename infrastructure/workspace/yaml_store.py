# infrastructure/workspace/yaml_store.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from infrastructure.workspace.base_store import WorkspaceStoreBase


class YamlWorkspaceStore(WorkspaceStoreBase):
    def _read_file(self, path: Path) -> Any:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)

    def _write(self, handle, data: Dict[str, Any]) -> None:
        yaml.safe_dump(data, handle, allow_unicode=True, sort_keys=False)
