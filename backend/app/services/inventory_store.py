"""JSON-file inventory store for users, filament records and AMS configurations.

Every mutation is written to disk before the call returns. Reads hand out
copies, so a caller holding a record never sees later changes to the store
and cannot change the store by mutating it.
"""

import copy
import logging
from dataclasses import fields as dataclass_fields
from pathlib import Path

from backend.app.core.colors import normalize_color
from backend.app.core.database import read_json, write_json
from backend.app.models.ams_config import AMSConfig, tray_count
from backend.app.models.filament import FilamentRecord, generate_id, utcnow_iso
from backend.app.models.user import User

logger = logging.getLogger(__name__)

# Fields that identify a record and cannot be changed through update()
_IMMUTABLE_FIELDS = {"tag_id", "owner_id", "created_at"}
_WRITABLE_FIELDS = {f.name for f in dataclass_fields(FilamentRecord)} - _IMMUTABLE_FIELDS - {"updated_at"}
# The only record field that may be cleared with None
_NULLABLE_FIELDS = {"serial_number"}


class InventoryStore:
    """Authoritative set of filament records keyed by tag."""

    def __init__(self, path: Path):
        self.path = path
        self._users: dict[str, User] = {}
        self._filaments: dict[str, FilamentRecord] = {}
        self._ams_configs: dict[str, list[AMSConfig]] = {}

    @classmethod
    def load(cls, path: Path) -> "InventoryStore":
        """Open the store at ``path``, creating an empty one if it does not exist."""
        store = cls(path)
        try:
            data = read_json(path)
        except FileNotFoundError:
            logger.info("No existing database found at %s, creating new one", path)
            store.save()
            return store

        store._users = {uid: User.from_dict(u) for uid, u in (data.get("users") or {}).items()}
        store._filaments = {tag: FilamentRecord.from_dict(f) for tag, f in (data.get("filaments") or {}).items()}
        store._ams_configs = {
            owner: [AMSConfig.from_dict(c) for c in configs]
            for owner, configs in (data.get("ams_configs") or {}).items()
        }
        logger.info(
            "Loaded %d users and %d filaments from %s", len(store._users), len(store._filaments), path.name
        )
        return store

    def save(self) -> None:
        write_json(
            self.path,
            {
                "users": {uid: u.to_dict() for uid, u in self._users.items()},
                "filaments": {tag: f.to_dict() for tag, f in self._filaments.items()},
                "ams_configs": {
                    owner: [c.to_dict() for c in configs] for owner, configs in self._ams_configs.items()
                },
            },
        )

    # -- Filaments -----------------------------------------------------------

    def get_all(self) -> list[FilamentRecord]:
        return [copy.copy(f) for f in self._filaments.values()]

    def get_by_owner(self, owner_id: str) -> list[FilamentRecord]:
        return [copy.copy(f) for f in self._filaments.values() if f.owner_id == owner_id]

    def get_by_tag(self, tag_id: str) -> FilamentRecord | None:
        record = self._filaments.get(tag_id)
        return copy.copy(record) if record else None

    def find_by_code(self, owner_id: str, code: str) -> FilamentRecord | None:
        """Find an owner's record whose tag or serial number equals ``code``."""
        for record in self._filaments.values():
            if record.owner_id == owner_id and (record.tag_id == code or record.serial_number == code):
                return copy.copy(record)
        return None

    def find_unassociated(
        self, owner_id: str, material_type: str, manufacturer: str, display_name: str, color_rgb: str
    ) -> FilamentRecord | None:
        """Find a manual record that a newly seen tagged spool can take over.

        The record must belong to ``owner_id``, have no serial number, not be
        sensor tracked and match all four descriptive fields.
        """
        color = normalize_color(color_rgb)
        for record in self._filaments.values():
            if (
                record.owner_id == owner_id
                and not record.serial_number
                and not record.is_sensor_tracked
                and record.material_type == material_type
                and record.manufacturer == manufacturer
                and record.display_name == display_name
                and record.color_rgb == color
            ):
                return copy.copy(record)
        return None

    def create(self, owner_id: str, **fields) -> FilamentRecord:
        """Add a record. A missing ``tag_id`` gets a synthesized manual tag."""
        tag_id = fields.pop("tag_id", None) or generate_id("manual")
        # Blank descriptive fields fall back to the record defaults
        values = {
            name: value
            for name, value in fields.items()
            if name in _WRITABLE_FIELDS and value is not None and value != ""
        }
        now = utcnow_iso()
        record = FilamentRecord(tag_id=tag_id, owner_id=owner_id, created_at=now, updated_at=now, **values)

        self._filaments[tag_id] = record
        self.save()
        logger.debug("Created filament %s for %s", tag_id, owner_id)
        return copy.copy(record)

    def update(self, tag_id: str, **patch) -> FilamentRecord | None:
        record = self._filaments.get(tag_id)
        if record is None:
            return None

        for name, value in patch.items():
            if name not in _WRITABLE_FIELDS:
                continue
            if value is None and name not in _NULLABLE_FIELDS:
                continue
            if name == "color_rgb":
                value = normalize_color(value)
            setattr(record, name, value)
        record.updated_at = utcnow_iso()

        self.save()
        return copy.copy(record)

    def delete(self, tag_id: str) -> bool:
        if tag_id not in self._filaments:
            return False
        del self._filaments[tag_id]
        self.save()
        logger.debug("Deleted filament %s", tag_id)
        return True

    # -- Users ---------------------------------------------------------------

    def list_users(self) -> list[User]:
        return [copy.copy(u) for u in self._users.values()]

    def get_user(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return copy.copy(user) if user else None

    def get_user_by_username(self, username: str) -> User | None:
        for user in self._users.values():
            if user.username == username:
                return copy.copy(user)
        return None

    def create_user(self, username: str, **fields) -> User:
        user_id = generate_id("user")
        fields.pop("id", None)
        user = User(id=user_id, username=username, created_at=utcnow_iso(), **fields)
        self._users[user_id] = user
        self.save()
        logger.info("Created user %s (%s)", username, user_id)
        return copy.copy(user)

    def update_user(self, user_id: str, **patch) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        for name, value in patch.items():
            if name in ("id", "created_at") or not hasattr(user, name):
                continue
            setattr(user, name, value)
        user.updated_at = utcnow_iso()
        self.save()
        return copy.copy(user)

    # -- AMS configurations --------------------------------------------------

    def get_ams_configs(self, owner_id: str) -> list[AMSConfig]:
        return [copy.copy(c) for c in self._ams_configs.get(owner_id, [])]

    def add_ams_config(self, owner_id: str, name: str, ams_type: str, sensor: str, enabled: bool = True) -> AMSConfig:
        config = AMSConfig(
            id=generate_id("ams"),
            name=name,
            type=ams_type,
            sensor=sensor,
            enabled=enabled,
            created_at=utcnow_iso(),
        )
        self._ams_configs.setdefault(owner_id, []).append(config)
        self.save()
        return copy.copy(config)

    def update_ams_config(self, owner_id: str, ams_id: str, **patch) -> AMSConfig | None:
        for config in self._ams_configs.get(owner_id, []):
            if config.id != ams_id:
                continue
            for name, value in patch.items():
                if name in ("id", "created_at") or not hasattr(config, name):
                    continue
                setattr(config, name, value)
            config.updated_at = utcnow_iso()
            self.save()
            return copy.copy(config)
        return None

    def delete_ams_config(self, owner_id: str, ams_id: str) -> bool:
        configs = self._ams_configs.get(owner_id, [])
        for i, config in enumerate(configs):
            if config.id == ams_id:
                del configs[i]
                self.save()
                return True
        return False

    @staticmethod
    def tray_count(ams_type: str) -> int:
        return tray_count(ams_type)
