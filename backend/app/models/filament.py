import random
import string
import time
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone

from backend.app.core.colors import DEFAULT_COLOR, normalize_color

# Sentinel for "remaining percent unknown / not tracked"
REMAIN_UNKNOWN = -1


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_id(prefix: str) -> str:
    """Build a ``<prefix>-<epoch ms>-<9 random chars>`` identifier."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def is_depleted(remaining_percent: float) -> bool:
    """True when a tracked remaining percentage has reached zero."""
    return remaining_percent <= 0 and remaining_percent != REMAIN_UNKNOWN


@dataclass
class FilamentRecord:
    """One physical spool (or manual entry) owned by a user."""

    tag_id: str
    owner_id: str
    material_type: str = "Unknown"
    manufacturer: str = "Unknown"
    display_name: str = "Unknown"
    variation: str = ""
    color_name: str = ""
    color_rgb: str = DEFAULT_COLOR
    spool_size_grams: float = 1000
    remaining_percent: float = 0
    is_empty: bool = False
    is_sensor_tracked: bool = False
    serial_number: str | None = None
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self):
        self.color_rgb = normalize_color(self.color_rgb)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "FilamentRecord":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
