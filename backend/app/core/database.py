"""JSON file persistence and request-scoped access to the shared components.

Both the inventory store and the material catalog are persisted as whole
JSON documents. Writes go to a temporary file that replaces the target, so a
crash mid-write never leaves a truncated document behind.
"""

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from backend.app.services.inventory_store import InventoryStore
    from backend.app.services.material_catalog import MaterialCatalog
    from backend.app.services.sync_scheduler import SyncScheduler
    from backend.app.services.tray_reconciler import TrayReconciler


def read_json(path: Path):
    """Load a JSON document. Raises FileNotFoundError if ``path`` is missing."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data) -> None:
    """Write ``data`` to ``path`` atomically. Errors propagate to the caller."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def get_store(request: Request) -> "InventoryStore":
    return request.app.state.store


def get_catalog(request: Request) -> "MaterialCatalog":
    return request.app.state.catalog


def get_reconciler(request: Request) -> "TrayReconciler":
    return request.app.state.reconciler


def get_scheduler(request: Request) -> "SyncScheduler":
    return request.app.state.scheduler
