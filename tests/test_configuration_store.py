"""Configuration store tests — profile loading, lookup, settings updates."""

import dataclasses
import json
import math

import pytest

from ctplanner.core.configuration_store import (
    ConfigurationStore,
    check_profile,
    detector_entries_to_fields,
    normalize_field_name,
    parse_number,
)
from ctplanner.core.errors import NotFoundError, PlannerError, ValidationError


def _system_json(system_id="Test", detectors=None, **overrides):
    data = {
        "system_id": system_id,
        "name": f"{system_id} scanner",
        "FOD": 6, "SPOT_SIZE": 3, "SAFETY": 0.5,
        "MIN_SDD": 370, "MAX_SDD": 970, "MIN_SOD": 7, "MAX_SOD": 730,
        "detectors": detectors if detectors is not None else [
            {"detector_id": "3K", "pixelH": 2856, "pixelV": 2856,
             "sizeH": 428.4, "pixelSize": 0.15, "tilingFactor": 1.55},
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture
def store() -> ConfigurationStore:
    """Fresh built-in store; settings tests mutate it."""
    return ConfigurationStore()


# -----------------------------------------------------------------------
# Field helpers
# -----------------------------------------------------------------------

class TestFieldHelpers:

    @pytest.mark.parametrize("key, attr", [
        ("MIN_SDD", "min_sdd"),
        ("FOD", "fod"),
        ("SPOT_SIZE", "spot_size"),
        ("sizeH", "size_h"),
        ("tilingFactor", "tiling_factor"),
        ("size_h", "size_h"),
    ])
    def test_normalize_field_name(self, key, attr):
        assert normalize_field_name(key) == attr

    def test_parse_number_accepts_numbers_and_text(self):
        assert parse_number("FOD", 6) == 6.0
        assert parse_number("FOD", "6.5") == 6.5
        assert parse_number("FOD", " 6,5 ") == 6.5

    @pytest.mark.parametrize("value", ["abc", "", None, True, math.nan, "inf", [1]])
    def test_parse_number_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_number("FOD", value)

    def test_detector_entries_to_fields(self):
        fields = detector_entries_to_fields([
            ("3K", "sizeH", "400"),
            ("2K", "tilingFactor", "1.7"),
            ("3K", "tilingFactor", "1.6"),
            ("3K", "sizeH", "410"),
        ])
        assert fields == {
            "3K": {"sizeH": "410", "tilingFactor": "1.6"},
            "2K": {"tilingFactor": "1.7"},
        }


# -----------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------

class TestLoading:

    def test_builtin_coretom(self, store):
        assert "CoreTOM" in store.system_ids()
        p = store.get("CoreTOM")
        assert (p.fod, p.safety) == (6.0, 0.5)
        assert (p.min_sdd, p.max_sdd) == (370.0, 970.0)
        assert (p.min_sod, p.max_sod) == (7.0, 730.0)
        assert p.detector_ids == ["3K", "2K", "1.5K"]

    def test_detector_fields(self, store):
        det = store.get_detector("CoreTOM", "3K")
        assert (det.pixel_h, det.pixel_v) == (2856, 2856)
        assert det.size_h == pytest.approx(428.4)
        assert det.pixel_size == pytest.approx(0.15)
        assert det.tiling_factor == pytest.approx(1.55)

    def test_get_all_systems(self, store):
        assert [p.id for p in store.get_all_systems()] == store.system_ids()

    def test_unknown_system(self, store):
        with pytest.raises(NotFoundError):
            store.get("NoSuchScanner")

    def test_unknown_detector(self, store):
        with pytest.raises(NotFoundError):
            store.get_detector("CoreTOM", "8K")

    def test_not_found_is_key_error(self, store):
        with pytest.raises(KeyError):
            store.get("NoSuchScanner")

    def test_custom_directory(self, tmp_path):
        (tmp_path / "a.json").write_text(json.dumps(_system_json("Alpha")), encoding="utf-8")
        (tmp_path / "b.json").write_text(json.dumps(_system_json("Beta")), encoding="utf-8")
        store = ConfigurationStore(tmp_path)
        assert store.system_ids() == ["Alpha", "Beta"]

    def test_size_v_defaults_to_size_h(self, tmp_path):
        (tmp_path / "a.json").write_text(json.dumps(_system_json("Alpha")), encoding="utf-8")
        det = ConfigurationStore(tmp_path).get_detector("Alpha", "3K")
        assert det.size_v == det.size_h

    def test_bad_file_skipped(self, tmp_path, caplog):
        (tmp_path / "a.json").write_text("{not json", encoding="utf-8")
        (tmp_path / "b.json").write_text(json.dumps(_system_json("Beta")), encoding="utf-8")
        with caplog.at_level("ERROR", logger="ctplanner.core.configuration_store"):
            store = ConfigurationStore(tmp_path)
        assert store.system_ids() == ["Beta"]
        assert "a.json" in caplog.text

    def test_invalid_profile_skipped(self, tmp_path):
        bad = _system_json("Bad", MIN_SDD=1000, MAX_SDD=970)
        (tmp_path / "bad.json").write_text(json.dumps(bad), encoding="utf-8")
        assert ConfigurationStore(tmp_path).system_ids() == []

    def test_missing_directory(self, tmp_path, caplog):
        with caplog.at_level("WARNING", logger="ctplanner.core.configuration_store"):
            store = ConfigurationStore(tmp_path / "nowhere")
        assert store.system_ids() == []
        assert "not found" in caplog.text


class TestResolveDetector:

    def test_keeps_preferred(self, store):
        assert store.resolve_detector_id("CoreTOM", "2K") == "2K"

    def test_falls_back_to_first(self, store):
        assert store.resolve_detector_id("CoreTOM", "8K") == "3K"
        assert store.resolve_detector_id("CoreTOM", None) == "3K"

    def test_system_without_detectors(self, tmp_path):
        (tmp_path / "a.json").write_text(
            json.dumps(_system_json("Empty", detectors=[])), encoding="utf-8",
        )
        store = ConfigurationStore(tmp_path)
        with pytest.raises(NotFoundError):
            store.resolve_detector_id("Empty", "3K")


# -----------------------------------------------------------------------
# Profile invariants
# -----------------------------------------------------------------------

class TestCheckProfile:

    def test_builtin_is_valid(self, store):
        check_profile(store.get("CoreTOM"))

    def test_collects_every_problem(self):
        profile = ConfigurationStore().get("CoreTOM")
        broken = dataclasses.replace(profile, min_sdd=1000.0, min_sod=800.0, safety=-1.0)
        with pytest.raises(ValidationError) as exc_info:
            check_profile(broken)
        message = str(exc_info.value)
        assert "MIN_SDD" in message
        assert "MIN_SOD" in message
        assert "SAFETY" in message


# -----------------------------------------------------------------------
# Settings update
# -----------------------------------------------------------------------

class TestApplySettings:

    def test_system_fields(self, store):
        updated = store.apply_settings("CoreTOM", {"FOD": "8", "MAX_SDD": "1000"})
        assert updated.fod == 8.0
        assert updated.max_sdd == 1000.0
        assert store.get("CoreTOM") is updated

    def test_attribute_spelling_accepted(self, store):
        store.apply_settings("CoreTOM", {"min_sod": 10})
        assert store.get("CoreTOM").min_sod == 10.0

    def test_detector_size_mirrors_height(self, store):
        store.apply_settings("CoreTOM", detector_fields={"3K": {"sizeH": "400"}})
        det = store.get_detector("CoreTOM", "3K")
        assert det.size_h == 400.0
        assert det.size_v == 400.0
        assert det.pixel_h == 2856

    def test_tiling_factor(self, store):
        store.apply_settings("CoreTOM", detector_fields={"2K": {"tilingFactor": "1,9"}})
        assert store.get_detector("CoreTOM", "2K").tiling_factor == pytest.approx(1.9)

    def test_untouched_detectors_kept(self, store):
        before = store.get_detector("CoreTOM", "1.5K")
        store.apply_settings("CoreTOM", detector_fields={"3K": {"sizeH": "400"}})
        assert store.get_detector("CoreTOM", "1.5K") == before

    def test_new_metrics_use_new_values(self, store):
        from ctplanner.core.metrics_engine import max_diameter
        store.apply_settings("CoreTOM", {"FOD": "10"})
        assert max_diameter(100.0, store.get("CoreTOM")) == pytest.approx(179.0)

    def test_non_numeric_rejected_atomically(self, store):
        before = store.get("CoreTOM")
        with pytest.raises(ValidationError):
            store.apply_settings(
                "CoreTOM",
                {"FOD": "8", "SAFETY": "abc"},
                {"3K": {"sizeH": "400"}},
            )
        assert store.get("CoreTOM") is before

    def test_all_errors_reported(self, store):
        with pytest.raises(ValidationError) as exc_info:
            store.apply_settings("CoreTOM", {"FOD": "x", "SAFETY": "y"})
        assert "FOD" in str(exc_info.value)
        assert "SAFETY" in str(exc_info.value)

    def test_unknown_field_rejected(self, store):
        with pytest.raises(ValidationError):
            store.apply_settings("CoreTOM", {"PIXEL_PITCH": "0.1"})

    def test_non_editable_detector_field_rejected(self, store):
        with pytest.raises(ValidationError):
            store.apply_settings("CoreTOM", detector_fields={"3K": {"pixelH": "3000"}})

    def test_invariant_violation_rejected(self, store):
        before = store.get("CoreTOM")
        with pytest.raises(ValidationError):
            store.apply_settings("CoreTOM", {"MIN_SDD": "980"})
        assert store.get("CoreTOM") is before

    def test_tiling_below_one_rejected(self, store):
        with pytest.raises(ValidationError):
            store.apply_settings("CoreTOM", detector_fields={"3K": {"tilingFactor": "0.5"}})

    def test_unknown_detector(self, store):
        before = store.get("CoreTOM")
        with pytest.raises(NotFoundError):
            store.apply_settings("CoreTOM", {"FOD": "8"}, {"8K": {"sizeH": "400"}})
        assert store.get("CoreTOM") is before

    def test_unknown_system(self, store):
        with pytest.raises(NotFoundError):
            store.apply_settings("NoSuchScanner", {"FOD": "8"})

    def test_errors_share_base_class(self, store):
        with pytest.raises(PlannerError):
            store.apply_settings("CoreTOM", {"FOD": "x"})

    def test_empty_update_is_noop(self, store):
        before = store.get("CoreTOM")
        assert store.apply_settings("CoreTOM") == before

    def test_rejection_logged(self, store, caplog):
        with caplog.at_level("WARNING", logger="ctplanner.core.configuration_store"):
            with pytest.raises(ValidationError):
                store.apply_settings("CoreTOM", {"FOD": "x"})
        assert "rejected" in caplog.text


class TestProfileImmutability:

    def test_detectors_read_only(self, store):
        with pytest.raises(TypeError):
            store.get("CoreTOM").detectors["3K"] = store.get_detector("CoreTOM", "2K")
        assert store.get_detector("CoreTOM", "3K").pixel_h == 2856

    def test_profile_hashable(self, store):
        profile = store.get("CoreTOM")
        assert hash(profile) == hash(dataclasses.replace(profile))

    def test_update_keeps_read_only_view(self, store):
        updated = store.apply_settings("CoreTOM", detector_fields={"3K": {"sizeH": "400"}})
        with pytest.raises(TypeError):
            updated.detectors["8K"] = updated.detectors["3K"]
        assert updated.detector_ids == ["3K", "2K", "1.5K"]
