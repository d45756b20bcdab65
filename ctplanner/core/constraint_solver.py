"""SDD constraint solver — keeps the detector clear of the object.

The detector must sit beyond the far edge of the largest object that
fits at a given SOD:

    SDD >= SOD + D_max(SOD) / 2

Two policies:
  - interactive: raise SDD to the effective minimum, never lower it
    (the slider range already caps the maximum).
  - sweep: raise to the standoff, then cap at the hardware MAX_SDD.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ctplanner.core.metrics_engine import max_diameter
from ctplanner.models.results import ConstraintResult

if TYPE_CHECKING:
    from ctplanner.models.system import SystemProfile


class ConstraintSolver:
    """Stateless SDD constraint policies."""

    @staticmethod
    def min_standoff(sod: float, profile: SystemProfile) -> float:
        """Minimum SDD for the largest object at *sod* [mm]."""
        return sod + max_diameter(sod, profile) / 2.0

    def effective_min_sdd(self, sod: float, profile: SystemProfile) -> float:
        """max(MIN_SDD, standoff) [mm]."""
        return max(profile.min_sdd, self.min_standoff(sod, profile))

    def enforce_interactive(
        self, sod: float, sdd: float, profile: SystemProfile,
    ) -> ConstraintResult:
        """Clamp *sdd* up to the effective minimum.

        No upper clamp: an SDD above MAX_SDD is passed through unchanged.

        Returns:
            ConstraintResult(sdd, was_adjusted).
        """
        effective_min = self.effective_min_sdd(sod, profile)
        if sdd < effective_min:
            return ConstraintResult(effective_min, True)
        return ConstraintResult(sdd, False)

    def enforce_sweep(
        self, sod: float, target_sdd: float, profile: SystemProfile,
    ) -> float:
        """SDD for one sweep row: max(target, standoff), capped at MAX_SDD.

        Never exceeds MAX_SDD, even when the standoff does.
        """
        candidate = max(target_sdd, self.min_standoff(sod, profile))
        return min(candidate, profile.max_sdd)
