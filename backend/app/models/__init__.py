from backend.app.models.ams_config import AMSConfig
from backend.app.models.catalog_entry import CatalogEntry
from backend.app.models.filament import FilamentRecord
from backend.app.models.tray import TraySnapshot
from backend.app.models.user import User

__all__ = [
    "AMSConfig",
    "CatalogEntry",
    "FilamentRecord",
    "TraySnapshot",
    "User",
]
