"""Unit tests for the inventory and catalog data models."""

import pytest

from backend.app.models.ams_config import AMSConfig, tray_count
from backend.app.models.catalog_entry import CatalogEntry, split_eans
from backend.app.models.filament import REMAIN_UNKNOWN, FilamentRecord, generate_id, is_depleted
from backend.app.models.tray import ZERO_TAG_UID, TraySnapshot, is_valid_tag


class TestCatalogEntryStorage:
    """Dataset records use short keys and a comma-joined EAN string."""

    def test_from_dict_maps_storage_keys(self):
        entry = CatalogEntry.from_dict(
            {
                "manufacturer": "BambuLab",
                "material": "PLA",
                "variation": "Matte",
                "name": "Bambu PLA Matte",
                "colorname": "Ash Grey",
                "color": "#9a9a9aff",
                "note": "",
                "ean": "6975337030123, 6975337030124",
            }
        )

        assert entry.material_type == "PLA"
        assert entry.display_name == "Bambu PLA Matte"
        assert entry.color_name == "Ash Grey"
        assert entry.color_rgb == "#9A9A9A"
        assert entry.eans == ["6975337030123", "6975337030124"]

    def test_to_dict_joins_eans_and_keeps_unknown_keys(self):
        entry = CatalogEntry.from_dict({"name": "Bambu PLA Basic", "ean": "1,2", "source": "store"})

        data = entry.to_dict()

        assert data["ean"] == "1,2"
        assert data["source"] == "store"
        assert data["name"] == "Bambu PLA Basic"

    def test_split_eans_drops_blanks_and_duplicates(self):
        assert split_eans("1, ,2,1") == ["1", "2"]
        assert split_eans(None) == []
        assert split_eans(["3", "3"]) == ["3"]

    def test_add_ean(self):
        entry = CatalogEntry(eans=["1"])
        assert entry.add_ean("2") is True
        assert entry.add_ean("1") is False
        assert entry.eans == ["1", "2"]


class TestFilamentRecord:
    def test_defaults(self):
        record = FilamentRecord(tag_id="manual-1", owner_id="user-1")
        assert record.material_type == "Unknown"
        assert record.color_rgb == "#FFFFFF"
        assert record.spool_size_grams == 1000
        assert record.serial_number is None

    def test_color_is_normalized(self):
        assert FilamentRecord(tag_id="t", owner_id="u", color_rgb="c12e1fff").color_rgb == "#C12E1F"

    def test_from_dict_ignores_unknown_keys(self):
        record = FilamentRecord.from_dict({"tag_id": "t", "owner_id": "u", "legacy": True})
        assert record.tag_id == "t"

    @pytest.mark.parametrize(
        "remaining,expected",
        [(0, True), (-0.5, True), (1, False), (REMAIN_UNKNOWN, False)],
    )
    def test_is_depleted(self, remaining, expected):
        assert is_depleted(remaining) is expected

    def test_generate_id_format(self):
        prefix, millis, suffix = generate_id("manual").split("-")
        assert prefix == "manual"
        assert millis.isdigit()
        assert len(suffix) == 9


class TestTraySnapshot:
    @pytest.mark.parametrize("tag", ["", None, ZERO_TAG_UID, "00000000"])
    def test_invalid_tags(self, tag):
        assert is_valid_tag(tag) is False

    def test_valid_tag(self):
        assert is_valid_tag("A1B2C3D4E5F60718") is True

    def test_from_attributes(self):
        snapshot = TraySnapshot.from_attributes(
            {
                "tag_uid": "A1B2C3D4E5F60718",
                "type": "PLA",
                "color": "9A9A9AFF",
                "name": "Bambu PLA Matte",
                "remain": 80,
                "empty": False,
            }
        )

        assert snapshot.tag_id == "A1B2C3D4E5F60718"
        assert snapshot.color_rgb == "#9A9A9A"
        assert snapshot.remaining_percent == 80
        assert snapshot.is_empty is False

    def test_non_numeric_remain_reads_as_zero(self):
        snapshot = TraySnapshot.from_attributes({"tag_uid": "ABC", "remain": "unknown"})
        assert snapshot.remaining_percent == 0


class TestAMSConfig:
    @pytest.mark.parametrize("ams_type,count", [("ams", 4), ("ams2pro", 4), ("amsht", 1), ("amslite", 4), ("new", 4)])
    def test_tray_count(self, ams_type, count):
        assert tray_count(ams_type) == count
        assert AMSConfig(id="a", name="AMS", type=ams_type, sensor="sensor.x").tray_count == count
