"""Scan controller — central mediator between the geometry state and UI.

Owns the single GeometryState. All mutations go through this controller,
which applies the interactive SDD constraint, recomputes the metrics and
emits Qt signals for panel refresh.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping

from PyQt6.QtCore import QObject, pyqtSignal

from ctplanner.constants import (
    DEFAULT_DETECTOR_ID,
    DEFAULT_SOD_MM,
    DEFAULT_SWEEP_MAX_SOD_MM,
    DEFAULT_SWEEP_STEP_MM,
    DEFAULT_SYSTEM_ID,
)
from ctplanner.core.configuration_store import ConfigurationStore
from ctplanner.core.constraint_solver import ConstraintSolver
from ctplanner.core.errors import NotFoundError, ValidationError
from ctplanner.core.metrics_engine import MetricsEngine
from ctplanner.core.sweep_generator import SweepGenerator
from ctplanner.models.geometry import GeometryState
from ctplanner.models.results import MetricsResult, SweepResult
from ctplanner.models.system import DetectorProfile, SystemProfile

logger = logging.getLogger(__name__)


class ScanController(QObject):
    """Mediator between GeometryState, the core services and the panels.

    Args:
        store: Configuration store (default: built-in system profiles).
        parent: Qt parent.
    """

    # System selection or its bounds changed (combos/sliders must refresh)
    system_changed = pyqtSignal()
    # Fresh metrics after any geometry change
    metrics_changed = pyqtSignal(object)  # MetricsResult
    # Interactive SDD constraint active / inactive
    constraint_changed = pyqtSignal(bool)
    sweep_generated = pyqtSignal(object)  # SweepResult
    settings_applied = pyqtSignal(str)  # system id

    def __init__(
        self,
        store: ConfigurationStore | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._store = store or ConfigurationStore()
        self._engine = MetricsEngine()
        self._solver = ConstraintSolver()
        self._sweeper = SweepGenerator(self._engine, self._solver)

        system_ids = self._store.system_ids()
        if not system_ids:
            raise NotFoundError("No system profiles loaded")
        system_id = DEFAULT_SYSTEM_ID if DEFAULT_SYSTEM_ID in system_ids else system_ids[0]
        profile = self._store.get(system_id)

        self._state = GeometryState(
            system_id=system_id,
            detector_id=self._store.resolve_detector_id(system_id, DEFAULT_DETECTOR_ID),
            sod=DEFAULT_SOD_MM,
            sdd=profile.max_sdd,
        )
        self._clamp_to_bounds()
        self._metrics = MetricsResult()
        self._constraint_active = False
        self._last_sweep: SweepResult | None = None
        self._update(emit=False)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def store(self) -> ConfigurationStore:
        return self._store

    @property
    def state(self) -> GeometryState:
        """Copy of the current geometry state."""
        return dataclasses.replace(self._state)

    @property
    def profile(self) -> SystemProfile:
        return self._store.get(self._state.system_id)

    @property
    def detector(self) -> DetectorProfile:
        return self._store.get_detector(self._state.system_id, self._state.detector_id)

    @property
    def metrics(self) -> MetricsResult:
        """Metrics for the current geometry."""
        return self._metrics

    @property
    def constraint_active(self) -> bool:
        """True when the last recompute raised SDD to its minimum."""
        return self._constraint_active

    @property
    def effective_min_sdd(self) -> float:
        return self._solver.effective_min_sdd(self._state.sod, self.profile)

    @property
    def last_sweep(self) -> SweepResult | None:
        return self._last_sweep

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_system(self, system_id: str) -> None:
        """Switch system; keep the detector if the new system has it.

        Raises:
            NotFoundError: Unknown *system_id* (state unchanged).
        """
        detector_id = self._store.resolve_detector_id(system_id, self._state.detector_id)
        self._state.system_id = system_id
        self._state.detector_id = detector_id
        self._clamp_to_bounds()
        self.system_changed.emit()
        self._update()

    def select_detector(self, detector_id: str) -> None:
        """Switch detector within the current system.

        Raises:
            NotFoundError: Unknown *detector_id* (state unchanged).
        """
        self._store.get_detector(self._state.system_id, detector_id)
        self._state.detector_id = detector_id
        self._update()

    def set_binning(self, binning: int) -> None:
        """Set the binning factor.

        Raises:
            ValidationError: *binning* is not a positive integer.
        """
        if isinstance(binning, bool) or not isinstance(binning, int) or binning < 1:
            raise ValidationError(f"Binning must be a positive integer, got {binning!r}")
        self._state.binning = binning
        self._update()

    def set_tiling(self, enabled: bool) -> None:
        self._state.tiling_enabled = bool(enabled)
        self._update()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def set_sod(self, sod: float) -> None:
        """Set SOD, clamped to [MIN_SOD, MAX_SOD] [mm]."""
        profile = self.profile
        self._state.sod = min(max(float(sod), profile.min_sod), profile.max_sod)
        self._update()

    def set_sdd(self, sdd: float) -> None:
        """Set SDD, clamped to [MIN_SDD, MAX_SDD], then raised if needed [mm]."""
        profile = self.profile
        self._state.sdd = min(max(float(sdd), profile.min_sdd), profile.max_sdd)
        self._update()

    def recompute(self) -> MetricsResult:
        """Re-apply the SDD constraint and recompute the metrics."""
        self._update()
        return self._metrics

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def apply_settings(
        self,
        profile_fields: Mapping[str, Any] | None = None,
        detector_fields: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> SystemProfile:
        """Apply a settings update to the current system.

        Raises:
            ValidationError, NotFoundError: Update rejected; the store and
                the geometry state are unchanged.
        """
        system_id = self._state.system_id
        updated = self._store.apply_settings(system_id, profile_fields, detector_fields)
        self._clamp_to_bounds()
        self.settings_applied.emit(system_id)
        self.system_changed.emit()
        self._update()
        return updated

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    def sweep_defaults(self) -> tuple[float, float, float]:
        """(min SOD, max SOD, step) defaults for the current system [mm]."""
        profile = self.profile
        return (
            profile.min_sod,
            min(DEFAULT_SWEEP_MAX_SOD_MM, profile.max_sod),
            DEFAULT_SWEEP_STEP_MM,
        )

    def generate_sweep(self, min_sod: float, max_sod: float, step: float) -> SweepResult:
        """Sweep SOD with the current SDD as target.

        Raises:
            InvalidRangeError: Invalid range; no rows, previous sweep kept.
        """
        result = self._sweeper.generate(
            min_sod, max_sod, step,
            self._state.sdd,
            self.profile, self.detector,
            self._state.binning, self._state.tiling_enabled,
        )
        self._last_sweep = result
        self.sweep_generated.emit(result)
        return result

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _clamp_to_bounds(self) -> None:
        """Keep SOD and SDD inside the current system's hardware bounds."""
        profile = self._store.get(self._state.system_id)
        self._state.sod = min(max(self._state.sod, profile.min_sod), profile.max_sod)
        self._state.sdd = min(max(self._state.sdd, profile.min_sdd), profile.max_sdd)

    def _update(self, emit: bool = True) -> None:
        """Apply the interactive constraint, recompute and notify."""
        profile = self.profile
        adjusted = self._solver.enforce_interactive(self._state.sod, self._state.sdd, profile)
        self._state.sdd = adjusted.sdd
        self._constraint_active = adjusted.was_adjusted
        self._metrics = self._engine.compute(
            self._state.sod, self._state.sdd, profile, self.detector,
            self._state.binning, self._state.tiling_enabled,
        )
        logger.debug(
            "Geometry %s/%s SOD=%.2f SDD=%.2f bin=%d tiling=%s constraint=%s",
            self._state.system_id, self._state.detector_id,
            self._state.sod, self._state.sdd, self._state.binning,
            self._state.tiling_enabled, adjusted.was_adjusted,
        )
        if emit:
            self.constraint_changed.emit(adjusted.was_adjusted)
            self.metrics_changed.emit(self._metrics)
