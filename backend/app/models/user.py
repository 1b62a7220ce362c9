from dataclasses import asdict, dataclass, fields

HASS_MODES = ("polling", "webhook", "disabled")


@dataclass
class User:
    """Inventory owner and their Home Assistant connection settings."""

    id: str
    username: str
    email: str = ""
    role: str = "user"
    hass_url: str = ""
    hass_token: str = ""
    hass_mode: str = "polling"
    tray_name: str = "tray"
    created_at: str = ""
    updated_at: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def polling_enabled(self) -> bool:
        return self.hass_mode == "polling"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
