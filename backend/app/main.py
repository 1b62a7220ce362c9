import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI

# Import settings first for logging configuration
from backend.app.core.config import settings as app_settings, APP_VERSION

# Configure logging based on settings
# DEBUG=true -> DEBUG level, else use LOG_LEVEL setting
log_level_str = "DEBUG" if app_settings.debug else app_settings.log_level.upper()
log_level = getattr(logging, log_level_str, logging.INFO)
log_format = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

# Create root logger
root_logger = logging.getLogger()
root_logger.setLevel(log_level)

# Console handler - always enabled
console_handler = logging.StreamHandler()
console_handler.setLevel(log_level)
console_handler.setFormatter(logging.Formatter(log_format))
root_logger.addHandler(console_handler)

# File handler - only in production or if explicitly enabled
if app_settings.log_to_file:
    log_file = app_settings.log_dir / "spoolsense.log"
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5*1024*1024,  # 5MB
        backupCount=3,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(file_handler)
    logging.info(f"Logging to file: {log_file}")

# Reduce noise from third-party libraries in production
if not app_settings.debug:
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

logging.info(f"SpoolSense starting - debug={app_settings.debug}, log_level={log_level_str}")

from backend.app.api.routes import ams_config, filaments, hass, materials, users
from backend.app.services.homeassistant import HomeAssistantService
from backend.app.services.inventory_store import InventoryStore
from backend.app.services.material_catalog import MaterialCatalog
from backend.app.services.sync_scheduler import SyncScheduler
from backend.app.services.tray_reconciler import TrayReconciler


def init_components(app: FastAPI) -> None:
    """Load the store and catalog and wire the sync components onto ``app.state``."""
    store = InventoryStore.load(app_settings.database_path)
    catalog = MaterialCatalog.load(
        app_settings.catalog_path,
        missing_ok=not app_settings.catalog_required,
        max_distance=app_settings.color_match_threshold,
    )
    reconciler = TrayReconciler(store, catalog, default_manufacturer=app_settings.default_manufacturer)
    homeassistant = HomeAssistantService(timeout=app_settings.hass_timeout)

    app.state.store = store
    app.state.catalog = catalog
    app.state.reconciler = reconciler
    app.state.scheduler = SyncScheduler(
        store, reconciler, homeassistant, interval=app_settings.sync_interval_seconds
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_components(app)

    # Start Home Assistant tray polling
    if app_settings.sync_enabled:
        app.state.scheduler.start()
    else:
        logging.info("Tray sync disabled")

    yield

    # Shutdown
    await app.state.scheduler.stop()


app = FastAPI(
    title=app_settings.app_name,
    description="Track filament spools and keep them in sync with Bambu Lab AMS trays",
    version=APP_VERSION,
    lifespan=lifespan,
)

# API routes
app.include_router(users.router, prefix=app_settings.api_prefix)
app.include_router(filaments.router, prefix=app_settings.api_prefix)
app.include_router(ams_config.router, prefix=app_settings.api_prefix)
app.include_router(hass.router, prefix=app_settings.api_prefix)
app.include_router(materials.router, prefix=app_settings.api_prefix)


@app.get("/")
async def root():
    return {
        "message": "SpoolSense API",
        "version": APP_VERSION,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
