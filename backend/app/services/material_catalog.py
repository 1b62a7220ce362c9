"""Material catalog backed by the reference dataset (base_dados_completa.json).

The catalog maps product names and material types plus a colour to the
manufacturer, canonical name and colour name of a filament. Tray sync uses it
to fill in the descriptive fields an AMS sensor does not report reliably.
"""

import logging
from pathlib import Path

from backend.app.core.colors import DEFAULT_MAX_DISTANCE, find_closest, normalize_color
from backend.app.core.database import read_json, write_json
from backend.app.core.material_names import material_type_hint
from backend.app.models.catalog_entry import CatalogEntry

logger = logging.getLogger(__name__)


class CatalogNotFoundError(FileNotFoundError):
    """The reference dataset file does not exist."""


class CatalogEntryExistsError(ValueError):
    """An entry with the same descriptive tuple is already in the catalog."""


class CatalogEntryNotFoundError(LookupError):
    """No catalog entry matches the given fields."""


class MaterialCatalog:
    """In-memory material catalog persisted as a JSON array."""

    def __init__(self, path: Path, entries: list[CatalogEntry] | None = None, max_distance: float = DEFAULT_MAX_DISTANCE):
        self.path = path
        self.entries: list[CatalogEntry] = entries or []
        self.max_distance = max_distance

    @classmethod
    def load(cls, path: Path, missing_ok: bool = False, max_distance: float = DEFAULT_MAX_DISTANCE) -> "MaterialCatalog":
        """Read the dataset at ``path`` into a new catalog.

        A missing file raises CatalogNotFoundError unless ``missing_ok`` is set,
        in which case the catalog starts empty and every lookup misses.
        """
        try:
            raw = read_json(path)
        except FileNotFoundError:
            if not missing_ok:
                raise CatalogNotFoundError(f"Material catalog not found: {path}") from None
            logger.warning("Material catalog %s not found, starting with an empty catalog", path)
            raw = []

        entries = [CatalogEntry.from_dict(item) for item in raw if isinstance(item, dict)]
        logger.info("Loaded %d materials from %s", len(entries), path.name)
        return cls(path, entries, max_distance=max_distance)

    def save(self) -> None:
        write_json(self.path, [entry.to_dict() for entry in self.entries])
        logger.info("Saved %d materials to %s", len(self.entries), self.path.name)

    # -- Lookups -------------------------------------------------------------

    def lookup_by_name_and_color(self, display_name: str, color_rgb: str) -> CatalogEntry | None:
        """Find the entry for a product name and colour.

        Tries an exact colour match first, then the nearest colour among
        entries with the same name. Only when no entry carries that name at all
        does it fall back to a lookup by the material type found in the name.
        """
        color = normalize_color(color_rgb)
        same_name = [e for e in self.entries if e.display_name == display_name]

        for entry in same_name:
            if entry.color_rgb == color:
                logger.debug("Exact catalog match for %r %s: %r", display_name, color, entry.color_name)
                return entry

        if not same_name:
            logger.debug("No catalog entries named %r, trying by material type", display_name)
            return self.lookup_by_material_type_and_color(material_type_hint(display_name), color)

        return self._closest(same_name, color)

    def lookup_by_material_type_and_color(self, material_type: str, color_rgb: str) -> CatalogEntry | None:
        color = normalize_color(color_rgb)
        same_type = [e for e in self.entries if e.material_type == material_type]
        if not same_type:
            logger.debug("No catalog entries of type %r", material_type)
            return None

        for entry in same_type:
            if entry.color_rgb == color:
                return entry

        return self._closest(same_type, color)

    def _closest(self, candidates: list[CatalogEntry], color: str) -> CatalogEntry | None:
        index = find_closest(
            color,
            ((i, entry.color_rgb) for i, entry in enumerate(candidates)),
            max_distance=self.max_distance,
        )
        if index is None:
            logger.debug("No catalog colour within %.0f of %s", self.max_distance, color)
            return None
        return candidates[index]

    def find_by_ean(self, ean: str) -> CatalogEntry | None:
        for entry in self.entries:
            if ean in entry.eans:
                return entry
        return None

    def find_exact(self, manufacturer: str, material_type: str, display_name: str, color_name: str, color_rgb: str) -> CatalogEntry | None:
        key = (manufacturer, material_type, display_name, color_name, normalize_color(color_rgb))
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    # -- Listings ------------------------------------------------------------

    def all_entries(self) -> list[CatalogEntry]:
        return list(self.entries)

    def list_material_types(self) -> list[str]:
        return sorted({e.material_type for e in self.entries if e.material_type})

    def list_colors(self, material_type: str) -> list[dict]:
        """Colours for a material type, keeping the first entry per colour name."""
        colors = []
        seen: set[str] = set()
        for entry in self.entries:
            if entry.material_type != material_type or entry.color_name in seen:
                continue
            seen.add(entry.color_name)
            colors.append({"color_name": entry.color_name, "color_rgb": entry.color_rgb, "note": entry.note})
        return colors

    def list_variations(self, material_type: str) -> list[str]:
        """Distinct variations of Bambu entries of a material type."""
        return sorted(
            {
                e.variation
                for e in self.entries
                if e.variation and e.material_type == material_type and "bambu" in e.manufacturer.lower()
            }
        )

    # -- Mutations -----------------------------------------------------------

    def upsert_from_filament(
        self, manufacturer: str, material_type: str, display_name: str, color_name: str, color_rgb: str
    ) -> dict:
        """Record the colour of an edited filament in the catalog.

        Returns ``{"action": "exists" | "updated" | "created", "material": entry}``.
        """
        color = normalize_color(color_rgb)
        existing = self.find_exact(manufacturer, material_type, display_name, color_name, color)
        if existing:
            return {"action": "exists", "material": existing}

        for entry in self.entries:
            if (entry.manufacturer, entry.material_type, entry.display_name, entry.color_name) == (
                manufacturer,
                material_type,
                display_name,
                color_name,
            ):
                entry.color_rgb = color
                self.save()
                logger.info("Updated catalog colour: %s - %s -> %s", display_name, color_name, color)
                return {"action": "updated", "material": entry}

        entry = CatalogEntry(
            manufacturer=manufacturer,
            material_type=material_type,
            display_name=display_name,
            color_name=color_name,
            color_rgb=color,
            note="Custom",
        )
        self.entries.append(entry)
        self.save()
        logger.info("Created catalog entry: %s - %s", display_name, color_name)
        return {"action": "created", "material": entry}

    def add_ean(
        self, ean: str, manufacturer: str, material_type: str, display_name: str, color_name: str, color_rgb: str
    ) -> dict:
        """Attach a barcode to catalog data.

        An EAN already in the catalog overwrites its entry's fields. Otherwise
        the EAN joins the entry with the same descriptive tuple, or a new entry
        is created for it.
        """
        color = normalize_color(color_rgb)
        by_ean = self.find_by_ean(ean)
        if by_ean:
            by_ean.manufacturer = manufacturer
            by_ean.material_type = material_type
            by_ean.display_name = display_name
            by_ean.color_name = color_name
            by_ean.color_rgb = color
            self.save()
            logger.info("Updated catalog entry with EAN %s: %s - %s", ean, display_name, color_name)
            return {"action": "updated", "ean": ean}

        existing = self.find_exact(manufacturer, material_type, display_name, color_name, color)
        if existing:
            existing.add_ean(ean)
            self.save()
            logger.info("Added EAN %s to %s - %s", ean, display_name, color_name)
            return {"action": "ean_added", "ean": ean}

        self.entries.append(
            CatalogEntry(
                manufacturer=manufacturer,
                material_type=material_type,
                display_name=display_name,
                color_name=color_name,
                color_rgb=color,
                note="Custom",
                eans=[ean],
            )
        )
        self.save()
        logger.info("Created catalog entry with EAN %s: %s - %s", ean, display_name, color_name)
        return {"action": "created", "ean": ean}

    def add_custom_color(self, material_type: str, color_name: str, color_rgb: str) -> bool:
        """Add a custom Bambu colour for a material type. Returns False if present."""
        color = normalize_color(color_rgb)
        for entry in self.entries:
            if entry.material_type == material_type and entry.color_name == color_name and entry.color_rgb == color:
                return False

        self.entries.append(
            CatalogEntry(
                manufacturer="BambuLab",
                material_type=material_type,
                display_name=f"Bambu {material_type}",
                color_name=color_name,
                color_rgb=color,
                note="Custom",
            )
        )
        self.save()
        logger.info("Added custom colour: %s - %s", material_type, color_name)
        return True

    def add_entry(self, entry: CatalogEntry) -> CatalogEntry:
        if self.find_exact(*entry.key):
            raise CatalogEntryExistsError("Material already exists with the same properties")
        self.entries.append(entry)
        self.save()
        return entry

    def add_missing(self, entry: CatalogEntry) -> bool:
        """Add ``entry`` unless its descriptive tuple is already present."""
        if self.find_exact(*entry.key):
            return False
        self.entries.append(entry)
        self.save()
        logger.info("Added %s - %s to catalog from inventory", entry.display_name, entry.color_name)
        return True

    def update_entry(self, entry: CatalogEntry) -> CatalogEntry:
        """Replace the entry matched by manufacturer, material, name and colour name.

        Blank variation, note and EANs keep their previous values.
        """
        for i, current in enumerate(self.entries):
            if (current.manufacturer, current.material_type, current.display_name, current.color_name) == (
                entry.manufacturer,
                entry.material_type,
                entry.display_name,
                entry.color_name,
            ):
                entry.variation = entry.variation or current.variation
                entry.note = entry.note or current.note
                entry.eans = entry.eans or current.eans
                entry.extra = current.extra
                self.entries[i] = entry
                self.save()
                return entry
        raise CatalogEntryNotFoundError("Material not found")

    def delete_entry(self, manufacturer: str, material_type: str, display_name: str, color_name: str, color_rgb: str) -> None:
        entry = self.find_exact(manufacturer, material_type, display_name, color_name, color_rgb)
        if entry is None:
            raise CatalogEntryNotFoundError("Material not found")
        self.entries.remove(entry)
        self.save()

    def aggregate_duplicates(self) -> int:
        """Merge entries with an identical descriptive tuple, joining their EANs.

        The first entry of each group is kept. Returns the number of entries
        removed.
        """
        merged: dict[tuple, CatalogEntry] = {}
        for entry in self.entries:
            kept = merged.get(entry.key)
            if kept is None:
                merged[entry.key] = entry
                continue
            for ean in entry.eans:
                kept.add_ean(ean)

        removed = len(self.entries) - len(merged)
        if removed:
            self.entries = list(merged.values())
            self.save()
            logger.info("Merged %d duplicate catalog entries", removed)
        return removed
