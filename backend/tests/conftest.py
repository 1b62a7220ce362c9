"""Shared test fixtures for SpoolSense backend tests."""

import atexit
import logging
import os
import shutil
import tempfile
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest

# IMPORTANT: Set environment variables BEFORE any app imports
# This must happen before settings/config are loaded
_test_data_dir = tempfile.mkdtemp(prefix="spoolsense_test_data_")
os.environ["LOG_TO_FILE"] = "false"
os.environ["DEBUG"] = "false"
os.environ["DATA_DIR"] = _test_data_dir
os.environ["SYNC_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient  # noqa: E402

# Ensure settings use our env vars
from backend.app.core.config import settings  # noqa: E402

settings.log_to_file = False


# Clean up temp directory when tests finish
def _cleanup_test_data_dir():
    shutil.rmtree(_test_data_dir, ignore_errors=True)


atexit.register(_cleanup_test_data_dir)

from backend.app.models.catalog_entry import CatalogEntry  # noqa: E402
from backend.app.services.inventory_store import InventoryStore  # noqa: E402
from backend.app.services.material_catalog import MaterialCatalog  # noqa: E402
from backend.app.services.sync_scheduler import SyncScheduler  # noqa: E402
from backend.app.services.tray_reconciler import TrayReconciler  # noqa: E402


# ============================================================================
# Core Components
# ============================================================================


@pytest.fixture
def store(tmp_path) -> InventoryStore:
    """Empty inventory store backed by a temporary file."""
    return InventoryStore.load(tmp_path / "database.json")


@pytest.fixture
def catalog_entries() -> list[CatalogEntry]:
    """A small slice of the Bambu reference dataset."""
    return [
        CatalogEntry(
            manufacturer="BambuLab",
            material_type="PLA",
            variation="Matte",
            display_name="Bambu PLA Matte",
            color_name="Ash Grey",
            color_rgb="#9A9A9A",
            eans=["6975337030123"],
        ),
        CatalogEntry(
            manufacturer="BambuLab",
            material_type="PLA",
            variation="Matte",
            display_name="Bambu PLA Matte",
            color_name="Charcoal",
            color_rgb="#000000",
        ),
        CatalogEntry(
            manufacturer="BambuLab",
            material_type="PLA",
            variation="Basic",
            display_name="Bambu PLA Basic",
            color_name="Jade White",
            color_rgb="#FFFFFF",
            eans=["6975337030000", "6975337030001"],
        ),
        CatalogEntry(
            manufacturer="BambuLab",
            material_type="PETG",
            variation="HF",
            display_name="Bambu PETG HF",
            color_name="Red",
            color_rgb="#C12E1F",
        ),
    ]


@pytest.fixture
def catalog(tmp_path, catalog_entries) -> MaterialCatalog:
    """Material catalog seeded with ``catalog_entries`` and saved to disk."""
    catalog = MaterialCatalog(tmp_path / "base_dados_completa.json", catalog_entries)
    catalog.save()
    return catalog


@pytest.fixture
def reconciler(store, catalog) -> TrayReconciler:
    return TrayReconciler(store, catalog)


@pytest.fixture
def mock_homeassistant():
    """Mock Home Assistant service with no trays loaded."""
    mock = MagicMock()
    mock.get_trays = AsyncMock(return_value=[])
    mock.get_tray = AsyncMock(return_value=None)
    mock.test_connection = AsyncMock(return_value={"success": True, "message": "API running.", "error": None})
    mock.list_tray_sensors = AsyncMock(
        return_value=[
            {
                "entity_id": "sensor.x1c_ams_1_tray_1",
                "friendly_name": "X1C AMS 1 Tray 1",
                "sensor": "sensor.x1c_ams_1",
                "tray": 1,
            }
        ]
    )
    return mock


@pytest.fixture
def scheduler(store, reconciler, mock_homeassistant) -> SyncScheduler:
    return SyncScheduler(store, reconciler, mock_homeassistant, interval=0.01)


@pytest.fixture
async def async_client(store, catalog, reconciler, scheduler) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client wired to the temporary components.

    The app lifespan is not run, so no background sync is started.
    """
    from backend.app.main import app

    app.state.store = store
    app.state.catalog = catalog
    app.state.reconciler = reconciler
    app.state.scheduler = scheduler

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# ============================================================================
# Test Data Factories
# ============================================================================


@pytest.fixture
def user_factory(store):
    """Factory to create test users."""
    _counter = [0]  # Use list to allow mutation in nested function

    def _create_user(**kwargs):
        _counter[0] += 1
        defaults = {
            "username": f"user{_counter[0]}",
            "email": f"user{_counter[0]}@example.com",
            "hass_url": "http://homeassistant.local:8123",
            "hass_token": "test-token",
        }
        defaults.update(kwargs)
        username = defaults.pop("username")
        return store.create_user(username, **defaults)

    return _create_user


@pytest.fixture
def filament_factory(store):
    """Factory to create test filament records."""

    def _create_filament(owner_id: str, **kwargs):
        defaults = {
            "material_type": "PLA",
            "manufacturer": "BambuLab",
            "display_name": "Bambu PLA Basic",
            "color_name": "Jade White",
            "color_rgb": "#FFFFFF",
            "remaining_percent": 100,
        }
        defaults.update(kwargs)
        return store.create(owner_id, **defaults)

    return _create_filament


# ============================================================================
# Log Capture Fixtures for Error Detection
# ============================================================================


class LogCapture(logging.Handler):
    """Handler that captures log records for testing."""

    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord):
        self.records.append(record)

    def clear(self):
        self.records.clear()

    def get_errors(self) -> list[logging.LogRecord]:
        """Get all ERROR and CRITICAL level records."""
        return [r for r in self.records if r.levelno >= logging.ERROR]

    def get_warnings(self) -> list[logging.LogRecord]:
        """Get all WARNING level records."""
        return [r for r in self.records if r.levelno == logging.WARNING]

    def has_errors(self) -> bool:
        return len(self.get_errors()) > 0

    def format_errors(self) -> str:
        """Format all errors as a string for assertion messages."""
        errors = self.get_errors()
        if not errors:
            return "No errors"
        formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")
        return "\n".join(formatter.format(r) for r in errors)


@pytest.fixture
def capture_logs():
    """Fixture that captures log output during a test.

    Usage:
        def test_something(capture_logs):
            some_function()
            assert not capture_logs.has_errors(), capture_logs.format_errors()
    """
    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    # Attach to root logger to capture all logs
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    yield handler

    root_logger.removeHandler(handler)


@pytest.fixture
def assert_no_log_errors(capture_logs):
    """Fixture that automatically asserts no errors were logged."""
    yield capture_logs

    errors = capture_logs.get_errors()
    if errors:
        pytest.fail(f"Unexpected log errors:\n{capture_logs.format_errors()}")
