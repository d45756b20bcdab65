"""Geometry state model — the operator's current scan set-up.

All dimensions in mm.
"""

from __future__ import annotations

from dataclasses import dataclass

from ctplanner.constants import (
    DEFAULT_BINNING,
    DEFAULT_DETECTOR_ID,
    DEFAULT_SOD_MM,
    DEFAULT_SYSTEM_ID,
)


@dataclass
class GeometryState:
    """Current scan geometry selection.

    SOD is kept inside [min_sod, max_sod] and SDD inside
    [effective minimum, max_sdd] by the controller, not by this type.

    Attributes:
        system_id: Selected system profile id.
        detector_id: Selected detector id within the system.
        sod: Source-to-object distance [mm].
        sdd: Source-to-detector distance [mm].
        binning: Pixel binning factor (1, 2, 3, ...).
        tiling_enabled: Whether stitched-panel tiling is active.
    """
    system_id: str = DEFAULT_SYSTEM_ID
    detector_id: str = DEFAULT_DETECTOR_ID
    sod: float = DEFAULT_SOD_MM
    sdd: float = 0.0
    binning: int = DEFAULT_BINNING
    tiling_enabled: bool = False
