"""SOD sweep generator — diameter vs. resolution tradeoff table.

Evaluates the imaging metrics at SOD = min, min + step, ... up to and
including max (when it lands on the grid), applying the sweep SDD
policy at each point.

SOD positions are computed as ``min + i * step`` rather than by
repeated addition, and the point count carries a small epsilon, so the
last point is neither dropped nor duplicated by floating error.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ctplanner.constants import MAX_SWEEP_POINTS, SWEEP_EPSILON
from ctplanner.core.constraint_solver import ConstraintSolver
from ctplanner.core.errors import InvalidRangeError
from ctplanner.core.metrics_engine import MetricsEngine
from ctplanner.models.results import SweepPoint, SweepRequest, SweepResult

if TYPE_CHECKING:
    from ctplanner.models.system import DetectorProfile, SystemProfile

logger = logging.getLogger(__name__)


def sod_positions(min_sod: float, max_sod: float, step: float) -> NDArray[np.float64]:
    """SOD grid for a sweep.

    Args:
        min_sod: First SOD [mm].
        max_sod: Inclusive upper bound [mm].
        step: Increment [mm].

    Returns:
        Ascending SOD values; none exceeds *max_sod*.

    Raises:
        InvalidRangeError: Non-finite inputs, step <= 0, min > max, or
            more than MAX_SWEEP_POINTS points.
    """
    if not all(math.isfinite(v) for v in (min_sod, max_sod, step)):
        raise InvalidRangeError("Sweep range values must be finite numbers")
    if step <= 0:
        raise InvalidRangeError(f"Sweep step must be positive, got {step:g}")
    if min_sod > max_sod:
        raise InvalidRangeError(
            f"Minimum SOD ({min_sod:g}) is greater than maximum SOD ({max_sod:g})"
        )

    count = int(math.floor((max_sod - min_sod) / step + SWEEP_EPSILON)) + 1
    if count > MAX_SWEEP_POINTS:
        raise InvalidRangeError(
            f"Sweep would produce {count} points (limit {MAX_SWEEP_POINTS}); "
            f"increase the step"
        )

    positions = min_sod + np.arange(count, dtype=np.float64) * step
    return np.minimum(positions, max_sod)


class SweepGenerator:
    """Builds SOD sweeps from the metrics engine and constraint solver.

    Args:
        metrics_engine: Engine used per point (default: new MetricsEngine).
        constraint_solver: Solver used per point (default: new ConstraintSolver).
    """

    def __init__(
        self,
        metrics_engine: MetricsEngine | None = None,
        constraint_solver: ConstraintSolver | None = None,
    ) -> None:
        self._engine = metrics_engine or MetricsEngine()
        self._solver = constraint_solver or ConstraintSolver()

    def generate(
        self,
        min_sod: float,
        max_sod: float,
        step: float,
        target_sdd: float,
        profile: SystemProfile,
        detector: DetectorProfile,
        binning: int = 1,
        tiling_enabled: bool = False,
    ) -> SweepResult:
        """Evaluate the metrics over an SOD range.

        The range is validated before any point is computed; an invalid
        range produces no rows.

        Args:
            min_sod: First SOD [mm].
            max_sod: Inclusive upper SOD bound [mm].
            step: SOD increment [mm], > 0.
            target_sdd: Requested SDD for every row [mm].
            profile: System profile.
            detector: Detector read-out mode.
            binning: Binning factor.
            tiling_enabled: Tiling flag.

        Returns:
            SweepResult with one SweepPoint per SOD.

        Raises:
            InvalidRangeError: See :func:`sod_positions`.
        """
        positions = sod_positions(min_sod, max_sod, step)

        points = []
        for s in positions:
            sod = float(s)
            sdd = self._solver.enforce_sweep(sod, target_sdd, profile)
            metrics = self._engine.compute(
                sod, sdd, profile, detector, binning, tiling_enabled,
            )
            points.append(SweepPoint(sod=sod, sdd=sdd, metrics=metrics))

        request = SweepRequest(
            min_sod=min_sod,
            max_sod=max_sod,
            step=step,
            target_sdd=target_sdd,
            system_id=profile.id,
            detector_id=detector.id,
            binning=binning,
            tiling_enabled=tiling_enabled,
        )
        logger.info(
            "Sweep %s/%s: %d points, SOD %g..%g step %g, target SDD %g",
            profile.id, detector.id, len(points), min_sod, max_sod, step, target_sdd,
        )
        return SweepResult(request=request, points=tuple(points))
