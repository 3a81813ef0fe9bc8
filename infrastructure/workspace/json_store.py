# infrastructure/workspace/json_store.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from infrastructure.workspace.base_store import WorkspaceStoreBase


class JsonWorkspaceStore(WorkspaceStoreBase):
    def _read_file(self, path: Path) -> Any:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def _write(self, handle, data: Dict[str, Any]) -> None:
        json.dump(data, handle, ensure_ascii=False, indent=2)
