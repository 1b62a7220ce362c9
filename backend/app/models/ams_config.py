from dataclasses import asdict, dataclass, fields

# Number of trays per AMS unit type
AMS_TRAY_COUNTS: dict[str, int] = {
    "ams": 4,
    "ams2pro": 4,
    "amsht": 1,
    "amslite": 4,
}
DEFAULT_TRAY_COUNT = 4


def tray_count(ams_type: str) -> int:
    return AMS_TRAY_COUNTS.get(ams_type, DEFAULT_TRAY_COUNT)


@dataclass
class AMSConfig:
    """An AMS unit exposed to Home Assistant under a sensor entity prefix."""

    id: str
    name: str
    type: str
    sensor: str
    enabled: bool = True
    created_at: str = ""
    updated_at: str | None = None

    @property
    def tray_count(self) -> int:
        return tray_count(self.type)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AMSConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
