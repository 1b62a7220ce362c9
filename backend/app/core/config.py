from pathlib import Path

from pydantic_settings import BaseSettings

# Application version - single source of truth
APP_VERSION = "0.3.2"

# Base directory for path calculations
_base_dir = Path(__file__).resolve().parent.parent.parent.parent


class Settings(BaseSettings):
    app_name: str = "SpoolSense"
    debug: bool = False  # Default to production mode

    # Paths
    base_dir: Path = _base_dir
    data_dir: Path = base_dir / "data"
    log_dir: Path = base_dir / "logs"
    database_file: str = "database.json"
    catalog_file: str = "base_dados_completa.json"

    # Start with an empty catalog when the reference dataset is missing
    catalog_required: bool = False

    # Logging
    log_level: str = "INFO"  # Override with LOG_LEVEL env var or DEBUG=true
    log_to_file: bool = True  # Set to false to disable file logging

    # API
    api_prefix: str = "/api/v1"

    # Home Assistant tray sync
    sync_enabled: bool = True
    sync_interval_seconds: float = 60.0
    hass_timeout: float = 10.0
    hass_url: str = ""  # Default URL for newly created users

    # Tray reconciliation
    color_match_threshold: float = 30.0
    default_manufacturer: str = "BambuLab"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.database_file

    @property
    def catalog_path(self) -> Path:
        return self.data_dir / self.catalog_file


settings = Settings()

# Ensure directories exist
settings.data_dir.mkdir(exist_ok=True)
if settings.log_to_file:
    settings.log_dir.mkdir(exist_ok=True)
