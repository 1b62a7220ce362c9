"""Apply AMS tray snapshots to the filament inventory.

Each snapshot ends in exactly one action against the store:

- ``invalid``: empty or all-zero tag, nothing touched
- ``deleted`` / ``skipped``: the tray is empty or depleted; an existing record
  is removed, otherwise there is nothing to do
- ``updated``: the tag is known; only remaining/empty state is refreshed
- ``associated``: a manual record with the same description takes the tag
- ``created``: a new sensor-tracked record is added

Re-applying an unchanged snapshot only refreshes the remaining percentage.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum

from backend.app.core.colors import normalize_color
from backend.app.models.filament import FilamentRecord, is_depleted
from backend.app.models.tray import TraySnapshot, is_valid_tag
from backend.app.services.inventory_store import InventoryStore
from backend.app.services.material_catalog import MaterialCatalog

logger = logging.getLogger(__name__)

DEFAULT_SPOOL_SIZE = 1000


class ReconcileAction(str, Enum):
    DELETED = "deleted"
    SKIPPED = "skipped"
    UPDATED = "updated"
    ASSOCIATED = "associated"
    CREATED = "created"
    INVALID = "invalid"


@dataclass
class ReconcileResult:
    success: bool
    action: ReconcileAction
    tag_id: str | None = None
    message: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["action"] = self.action.value
        return data


@dataclass
class _ResolvedTray:
    """Snapshot with descriptive fields filled in from the catalog."""

    tag_id: str
    material_type: str
    manufacturer: str
    display_name: str
    color_name: str
    color_rgb: str
    remaining_percent: float
    is_empty: bool
    spool_size_grams: float


class TrayReconciler:
    def __init__(self, store: InventoryStore, catalog: MaterialCatalog, default_manufacturer: str = "BambuLab"):
        self.store = store
        self.catalog = catalog
        self.default_manufacturer = default_manufacturer

    def resolve(self, snapshot: TraySnapshot) -> _ResolvedTray:
        """Fill in manufacturer, material type and colour name.

        The catalog wins over the sensor for these fields; the sensor is only
        trusted for tag, colour, name and fill state.
        """
        entry = self.catalog.lookup_by_name_and_color(snapshot.display_name, snapshot.color_rgb)
        if entry:
            manufacturer = entry.manufacturer or snapshot.manufacturer or self.default_manufacturer
            material_type = entry.material_type or snapshot.material_type or "Unknown"
            color_name = entry.color_name
        else:
            manufacturer = snapshot.manufacturer or self.default_manufacturer
            material_type = snapshot.material_type or "Unknown"
            color_name = ""

        logger.debug(
            "Resolved tray %s: manufacturer=%r type=%r color_name=%r",
            snapshot.tag_id,
            manufacturer,
            material_type,
            color_name,
        )
        return _ResolvedTray(
            tag_id=snapshot.tag_id,
            material_type=material_type,
            manufacturer=manufacturer,
            display_name=snapshot.display_name,
            color_name=color_name,
            color_rgb=normalize_color(snapshot.color_rgb),
            remaining_percent=snapshot.remaining_percent,
            is_empty=snapshot.is_empty,
            spool_size_grams=snapshot.spool_size_grams or DEFAULT_SPOOL_SIZE,
        )

    def reconcile_one(self, owner_id: str, snapshot: TraySnapshot) -> ReconcileResult:
        """Apply one tray snapshot for ``owner_id``."""
        if not is_valid_tag(snapshot.tag_id):
            return ReconcileResult(False, ReconcileAction.INVALID, message="Invalid or empty tag_uid")

        tray = self.resolve(snapshot)
        tag_id = tray.tag_id

        # Depleted trays are never created or associated
        if tray.is_empty or is_depleted(tray.remaining_percent):
            if self.store.get_by_tag(tag_id):
                logger.info("Auto-deleting empty/depleted filament: %s", tag_id)
                self.store.delete(tag_id)
                return ReconcileResult(True, ReconcileAction.DELETED, tag_id)
            return ReconcileResult(True, ReconcileAction.SKIPPED, tag_id, message="Empty tray, nothing to delete")

        if self.store.get_by_tag(tag_id):
            self.store.update(
                tag_id,
                remaining_percent=tray.remaining_percent,
                is_empty=tray.is_empty,
                is_sensor_tracked=True,
            )
            return ReconcileResult(True, ReconcileAction.UPDATED, tag_id)

        manual = self.store.find_unassociated(
            owner_id,
            material_type=tray.material_type,
            manufacturer=tray.manufacturer,
            display_name=tray.display_name,
            color_rgb=tray.color_rgb,
        )
        if manual:
            self._associate(owner_id, manual, tray)
            return ReconcileResult(True, ReconcileAction.ASSOCIATED, tag_id)

        color_name = tray.color_name or self._borrow_color_name(owner_id, tray)
        self.store.create(
            owner_id,
            tag_id=tag_id,
            material_type=tray.material_type,
            manufacturer=tray.manufacturer,
            display_name=tray.display_name,
            color_name=color_name,
            color_rgb=tray.color_rgb,
            spool_size_grams=tray.spool_size_grams,
            remaining_percent=tray.remaining_percent,
            is_empty=tray.is_empty,
            is_sensor_tracked=True,
            serial_number=tag_id,
        )
        logger.info("Created tracked filament %s (%s %s)", tag_id, tray.display_name, color_name or tray.color_rgb)
        return ReconcileResult(True, ReconcileAction.CREATED, tag_id)

    def _associate(self, owner_id: str, manual: FilamentRecord, tray: _ResolvedTray) -> None:
        """Move a manual record onto the tray's tag.

        The tag is the store key, so the record is deleted and recreated
        rather than renamed.
        """
        logger.info("Associating serial %s to existing filament %s", tray.tag_id, manual.tag_id)
        carried = manual.to_dict()
        for key in ("tag_id", "owner_id", "created_at", "updated_at"):
            carried.pop(key)
        carried.update(
            serial_number=tray.tag_id,
            is_sensor_tracked=True,
            remaining_percent=tray.remaining_percent,
            is_empty=tray.is_empty,
        )
        self.store.delete(manual.tag_id)
        self.store.create(owner_id, tag_id=tray.tag_id, **carried)

    def _borrow_color_name(self, owner_id: str, tray: _ResolvedTray) -> str:
        """Colour name of an owner's record with the same colour, type, name and brand."""
        for record in self.store.get_by_owner(owner_id):
            if (
                record.color_name
                and record.color_rgb == tray.color_rgb
                and record.material_type == tray.material_type
                and record.display_name == tray.display_name
                and record.manufacturer == tray.manufacturer
            ):
                logger.info("Found colour name in user filaments: %r", record.color_name)
                return record.color_name
        return ""

    def cleanup_depleted(self, owner_id: str) -> list[str]:
        """Delete an owner's records whose tracked remaining percentage is zero.

        Catches depleted records that no tray reported this cycle. Returns the
        deleted tags.
        """
        deleted = []
        for record in self.store.get_by_owner(owner_id):
            if is_depleted(record.remaining_percent):
                logger.info("Auto-deleting depleted filament: %s", record.tag_id)
                self.store.delete(record.tag_id)
                deleted.append(record.tag_id)
        return deleted
