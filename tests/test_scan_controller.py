"""Tests for ScanController — geometry state mediator.

Tests selection, clamping, the interactive SDD constraint, settings
updates, sweep generation and signal emissions.
"""

import json

import pytest
from unittest.mock import MagicMock

from PyQt6.QtWidgets import QApplication
import sys

from ctplanner.core.configuration_store import ConfigurationStore
from ctplanner.core.errors import InvalidRangeError, NotFoundError, ValidationError
from ctplanner.ui.scan_controller import ScanController

# QApplication instance needed for QObject / signals
_app = QApplication.instance() or QApplication(sys.argv)


def _detector(det_id, pixels=2000, size=300.0):
    return {"detector_id": det_id, "pixelH": pixels, "pixelV": pixels,
            "sizeH": size, "pixelSize": 0.15, "tilingFactor": 1.5}


@pytest.fixture
def two_system_store(tmp_path) -> ConfigurationStore:
    alpha = {
        "system_id": "Alpha", "FOD": 6, "SAFETY": 0.5,
        "MIN_SDD": 370, "MAX_SDD": 970, "MIN_SOD": 7, "MAX_SOD": 730,
        "detectors": [_detector("3K"), _detector("2K")],
    }
    beta = {
        "system_id": "Beta", "FOD": 10, "SAFETY": 1,
        "MIN_SDD": 200, "MAX_SDD": 600, "MIN_SOD": 20, "MAX_SOD": 250,
        "detectors": [_detector("4K"), _detector("2K")],
    }
    (tmp_path / "alpha.json").write_text(json.dumps(alpha), encoding="utf-8")
    (tmp_path / "beta.json").write_text(json.dumps(beta), encoding="utf-8")
    return ConfigurationStore(tmp_path)


class TestControllerDefaults:
    """Default state after construction."""

    def setup_method(self):
        self.ctrl = ScanController()

    def test_default_system_and_detector(self):
        state = self.ctrl.state
        assert state.system_id == "CoreTOM"
        assert state.detector_id == "3K"

    def test_default_geometry(self):
        state = self.ctrl.state
        assert state.sod == 100.0
        assert state.sdd == 970.0
        assert state.binning == 1
        assert state.tiling_enabled is False

    def test_initial_metrics(self):
        m = self.ctrl.metrics
        assert m.max_diameter == pytest.approx(187.0)
        assert m.magnification == pytest.approx(9.7)
        assert m.voxel_size == pytest.approx(15.4639, abs=1e-4)

    def test_constraint_inactive(self):
        assert self.ctrl.constraint_active is False

    def test_no_sweep_yet(self):
        assert self.ctrl.last_sweep is None

    def test_state_is_a_copy(self):
        state = self.ctrl.state
        state.sod = 500.0
        assert self.ctrl.state.sod == 100.0

    def test_sweep_defaults(self):
        assert self.ctrl.sweep_defaults() == (7.0, 300.0, 10.0)

    def test_empty_store_rejected(self, tmp_path):
        with pytest.raises(NotFoundError):
            ScanController(ConfigurationStore(tmp_path))


class TestGeometry:

    def setup_method(self):
        self.ctrl = ScanController()

    def test_set_sod_without_constraint(self):
        self.ctrl.set_sod(300.0)
        assert self.ctrl.state.sdd == 970.0
        assert self.ctrl.constraint_active is False

    def test_set_sdd_raised_to_standoff(self):
        """SOD 300 needs SDD >= 593.5."""
        self.ctrl.set_sod(300.0)
        self.ctrl.set_sdd(400.0)
        assert self.ctrl.state.sdd == pytest.approx(593.5)
        assert self.ctrl.constraint_active is True
        assert self.ctrl.effective_min_sdd == pytest.approx(593.5)

    def test_set_sdd_clamped_to_hardware(self):
        self.ctrl.set_sdd(100.0)
        assert self.ctrl.state.sdd == 370.0
        self.ctrl.set_sdd(5000.0)
        assert self.ctrl.state.sdd == 970.0

    def test_set_sod_clamped(self):
        self.ctrl.set_sod(1.0)
        assert self.ctrl.state.sod == 7.0
        self.ctrl.set_sod(2000.0)
        assert self.ctrl.state.sod == 730.0

    def test_constraint_above_max_sdd(self):
        """At SOD 730 the standoff 1453.5 exceeds MAX_SDD and is kept."""
        self.ctrl.set_sod(730.0)
        assert self.ctrl.state.sdd == pytest.approx(1453.5)
        assert self.ctrl.constraint_active is True

    def test_metrics_follow_state(self):
        self.ctrl.set_sod(200.0)
        self.ctrl.set_sdd(800.0)
        assert self.ctrl.metrics.magnification == pytest.approx(4.0)

    def test_recompute_returns_metrics(self):
        assert self.ctrl.recompute() == self.ctrl.metrics


class TestReadoutMode:

    def setup_method(self):
        self.ctrl = ScanController()

    def test_set_binning(self):
        self.ctrl.set_binning(2)
        assert self.ctrl.state.binning == 2
        assert self.ctrl.metrics.voxel_size == pytest.approx(2 * 15.4639, abs=1e-3)

    @pytest.mark.parametrize("value", [0, -1, 2.0, True, "2"])
    def test_invalid_binning(self, value):
        with pytest.raises(ValidationError):
            self.ctrl.set_binning(value)
        assert self.ctrl.state.binning == 1

    def test_set_tiling(self):
        self.ctrl.set_tiling(True)
        assert self.ctrl.state.tiling_enabled is True
        assert self.ctrl.metrics.effective_pixel_h == 4427

    def test_select_detector(self):
        self.ctrl.select_detector("2K")
        assert self.ctrl.detector.id == "2K"
        assert self.ctrl.metrics.effective_pixel_v == 1896

    def test_select_unknown_detector(self):
        with pytest.raises(NotFoundError):
            self.ctrl.select_detector("8K")
        assert self.ctrl.state.detector_id == "3K"


class TestSelectSystem:

    def test_detector_kept_when_available(self, two_system_store):
        ctrl = ScanController(two_system_store)
        ctrl.select_detector("2K")
        ctrl.select_system("Beta")
        assert ctrl.state.system_id == "Beta"
        assert ctrl.state.detector_id == "2K"

    def test_detector_falls_back_to_first(self, two_system_store):
        ctrl = ScanController(two_system_store)
        assert ctrl.state.detector_id == "3K"
        ctrl.select_system("Beta")
        assert ctrl.state.detector_id == "4K"

    def test_geometry_clamped_to_new_bounds(self, two_system_store):
        ctrl = ScanController(two_system_store)
        ctrl.set_sod(600.0)
        ctrl.select_system("Beta")
        state = ctrl.state
        assert state.sod == 250.0
        assert state.sdd >= ctrl.effective_min_sdd

    def test_first_system_used_without_default(self, two_system_store):
        assert ScanController(two_system_store).state.system_id == "Alpha"

    def test_unknown_system(self, two_system_store):
        ctrl = ScanController(two_system_store)
        with pytest.raises(NotFoundError):
            ctrl.select_system("Gamma")
        assert ctrl.state.system_id == "Alpha"


class TestSettings:

    def setup_method(self):
        self.ctrl = ScanController()

    def test_apply_recomputes(self):
        self.ctrl.apply_settings({"FOD": "10"})
        assert self.ctrl.metrics.max_diameter == pytest.approx(179.0)

    def test_apply_clamps_state(self):
        self.ctrl.set_sod(300.0)
        self.ctrl.apply_settings({"MAX_SOD": "200"})
        assert self.ctrl.state.sod == 200.0

    def test_rejected_update_leaves_state(self):
        before_metrics = self.ctrl.metrics
        with pytest.raises(ValidationError):
            self.ctrl.apply_settings({"FOD": "abc"})
        assert self.ctrl.metrics == before_metrics
        assert self.ctrl.profile.fod == 6.0

    def test_detector_update(self):
        self.ctrl.set_tiling(True)
        self.ctrl.apply_settings(detector_fields={"3K": {"tilingFactor": "2"}})
        assert self.ctrl.metrics.effective_pixel_h == 5712


class TestSweep:

    def setup_method(self):
        self.ctrl = ScanController()

    def test_generate_uses_current_sdd(self):
        self.ctrl.set_sdd(800.0)
        result = self.ctrl.generate_sweep(7.0, 307.0, 50.0)
        assert len(result) == 7
        assert result.request.target_sdd == 800.0
        assert self.ctrl.last_sweep is result

    def test_generate_uses_readout_mode(self):
        self.ctrl.set_binning(3)
        self.ctrl.set_tiling(True)
        req = self.ctrl.generate_sweep(7.0, 307.0, 50.0).request
        assert req.binning == 3
        assert req.tiling_enabled is True

    def test_invalid_range_keeps_previous(self):
        first = self.ctrl.generate_sweep(7.0, 307.0, 50.0)
        with pytest.raises(InvalidRangeError):
            self.ctrl.generate_sweep(7.0, 307.0, 0.0)
        assert self.ctrl.last_sweep is first


class TestSignals:

    def setup_method(self):
        self.ctrl = ScanController()

    def test_metrics_changed_on_sod(self):
        spy = MagicMock()
        self.ctrl.metrics_changed.connect(spy)
        self.ctrl.set_sod(150.0)
        spy.assert_called_once()
        assert spy.call_args[0][0] == self.ctrl.metrics

    def test_constraint_changed(self):
        spy = MagicMock()
        self.ctrl.constraint_changed.connect(spy)
        self.ctrl.set_sod(300.0)
        self.ctrl.set_sdd(400.0)
        assert spy.call_args_list[-1][0][0] is True

    def test_system_changed_on_select(self):
        spy = MagicMock()
        self.ctrl.system_changed.connect(spy)
        self.ctrl.select_system("CoreTOM")
        spy.assert_called_once()

    def test_settings_applied(self):
        applied = MagicMock()
        changed = MagicMock()
        self.ctrl.settings_applied.connect(applied)
        self.ctrl.system_changed.connect(changed)
        self.ctrl.apply_settings({"FOD": "7"})
        applied.assert_called_once_with("CoreTOM")
        changed.assert_called_once()

    def test_no_signal_on_rejected_settings(self):
        spy = MagicMock()
        self.ctrl.settings_applied.connect(spy)
        with pytest.raises(ValidationError):
            self.ctrl.apply_settings({"FOD": "x"})
        spy.assert_not_called()

    def test_sweep_generated(self):
        spy = MagicMock()
        self.ctrl.sweep_generated.connect(spy)
        result = self.ctrl.generate_sweep(7.0, 57.0, 10.0)
        spy.assert_called_once_with(result)

    def test_no_sweep_signal_on_invalid_range(self):
        spy = MagicMock()
        self.ctrl.sweep_generated.connect(spy)
        with pytest.raises(InvalidRangeError):
            self.ctrl.generate_sweep(300.0, 7.0, 10.0)
        spy.assert_not_called()
