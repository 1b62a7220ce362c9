"""Unit tests for the JSON-file inventory store."""

import json

import pytest

from backend.app.services.inventory_store import InventoryStore

pytestmark = pytest.mark.unit


class TestPersistence:
    def test_load_creates_missing_file(self, tmp_path):
        path = tmp_path / "data" / "database.json"

        InventoryStore.load(path)

        assert json.loads(path.read_text()) == {"users": {}, "filaments": {}, "ams_configs": {}}

    def test_reload_returns_identical_records(self, store, user_factory, filament_factory):
        user = user_factory()
        record = filament_factory(user.id, tag_id="A1B2", serial_number="A1B2", is_sensor_tracked=True)
        config = store.add_ams_config(user.id, "AMS 1", "ams", "sensor.x1c_ams_1")

        reloaded = InventoryStore.load(store.path)

        assert reloaded.get_by_tag("A1B2") == record
        assert reloaded.get_user(user.id) == user
        assert reloaded.get_ams_configs(user.id) == [config]

    def test_stored_colors_are_normalized_on_load(self, tmp_path):
        path = tmp_path / "database.json"
        path.write_text(
            json.dumps({"filaments": {"t1": {"tag_id": "t1", "owner_id": "u1", "color_rgb": "9a9a9aff"}}})
        )

        assert InventoryStore.load(path).get_by_tag("t1").color_rgb == "#9A9A9A"

    def test_no_temp_file_left_behind(self, store, filament_factory):
        filament_factory("u1")
        assert [p.name for p in store.path.parent.iterdir()] == ["database.json"]


class TestFilaments:
    def test_create_synthesizes_manual_tag(self, store):
        record = store.create("u1", material_type="PLA")

        assert record.tag_id.startswith("manual-")
        assert record.owner_id == "u1"
        assert record.created_at == record.updated_at

    def test_create_blank_fields_use_defaults(self, store):
        record = store.create("u1", tag_id="t1", manufacturer="", display_name=None, color_rgb="")

        assert record.manufacturer == "Unknown"
        assert record.display_name == "Unknown"
        assert record.color_rgb == "#FFFFFF"

    def test_create_ignores_unknown_fields(self, store):
        record = store.create("u1", tag_id="t1", username="someone", created_at="2020-01-01")
        assert record.created_at != "2020-01-01"
        assert not hasattr(record, "username")

    def test_returned_records_are_copies(self, store):
        record = store.create("u1", tag_id="t1", remaining_percent=50)
        record.remaining_percent = 0

        assert store.get_by_tag("t1").remaining_percent == 50

    def test_update_keeps_identity_fields(self, store):
        created = store.create("u1", tag_id="t1")

        updated = store.update("t1", tag_id="t2", owner_id="u2", remaining_percent=40, color_rgb="c12e1f")

        assert updated.tag_id == "t1"
        assert updated.owner_id == "u1"
        assert updated.created_at == created.created_at
        assert updated.remaining_percent == 40
        assert updated.color_rgb == "#C12E1F"

    def test_update_skips_none_for_required_fields(self, store):
        store.create("u1", tag_id="t1", material_type="PLA", remaining_percent=50, serial_number="SN-1")

        updated = store.update("t1", remaining_percent=None, material_type=None, is_empty=None, serial_number=None)

        assert updated.remaining_percent == 50
        assert updated.material_type == "PLA"
        assert updated.is_empty is False
        assert updated.serial_number is None

    def test_update_ignores_non_field_attributes(self, store):
        store.create("u1", tag_id="t1", remaining_percent=50)

        updated = store.update("t1", to_dict="oops", unknown=1)

        assert callable(updated.to_dict)
        assert not hasattr(updated, "unknown")
        assert updated.to_dict()["remaining_percent"] == 50

    def test_update_missing(self, store):
        assert store.update("nope", remaining_percent=1) is None

    def test_delete(self, store):
        store.create("u1", tag_id="t1")

        assert store.delete("t1") is True
        assert store.get_by_tag("t1") is None
        assert store.delete("t1") is False

    def test_get_by_owner(self, store):
        store.create("u1", tag_id="t1")
        store.create("u2", tag_id="t2")

        assert [r.tag_id for r in store.get_by_owner("u1")] == ["t1"]
        assert len(store.get_all()) == 2

    def test_find_by_code_matches_tag_or_serial(self, store):
        store.create("u1", tag_id="t1", serial_number="SN-1")

        assert store.find_by_code("u1", "t1").tag_id == "t1"
        assert store.find_by_code("u1", "SN-1").tag_id == "t1"
        assert store.find_by_code("u2", "t1") is None


class TestFindUnassociated:
    def _manual(self, store, **kwargs):
        fields = {
            "material_type": "PETG",
            "manufacturer": "BambuLab",
            "display_name": "Bambu PETG HF",
            "color_rgb": "#000000",
        }
        fields.update(kwargs)
        return store.create("u1", **fields)

    def test_finds_matching_manual_record(self, store):
        manual = self._manual(store)

        found = store.find_unassociated("u1", "PETG", "BambuLab", "Bambu PETG HF", "000000FF")

        assert found.tag_id == manual.tag_id

    @pytest.mark.parametrize(
        "kwargs",
        [{"serial_number": "SN"}, {"is_sensor_tracked": True}, {"display_name": "Bambu PETG Basic"}],
    )
    def test_skips_non_candidates(self, store, kwargs):
        self._manual(store, **kwargs)
        assert store.find_unassociated("u1", "PETG", "BambuLab", "Bambu PETG HF", "#000000") is None

    def test_other_owner(self, store):
        self._manual(store)
        assert store.find_unassociated("u2", "PETG", "BambuLab", "Bambu PETG HF", "#000000") is None


class TestUsersAndAMSConfigs:
    def test_user_crud(self, store):
        user = store.create_user("alice", email="alice@example.com")

        assert user.id.startswith("user-")
        assert store.get_user_by_username("alice") == user

        updated = store.update_user(user.id, hass_mode="webhook", id="other")
        assert updated.id == user.id
        assert updated.hass_mode == "webhook"
        assert store.update_user("missing", email="x") is None

    def test_ams_config_crud(self, store):
        config = store.add_ams_config("u1", "AMS HT", "amsht", "sensor.p1s_ams_ht")

        assert config.tray_count == 1
        assert store.update_ams_config("u1", config.id, enabled=False).enabled is False
        assert store.update_ams_config("u2", config.id, enabled=True) is None
        assert store.delete_ams_config("u1", config.id) is True
        assert store.get_ams_configs("u1") == []
        assert store.delete_ams_config("u1", config.id) is False

    def test_tray_count(self):
        assert InventoryStore.tray_count("amslite") == 4
