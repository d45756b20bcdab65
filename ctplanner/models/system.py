"""Scanner system and detector profile models.

A system profile describes one CT scanner: its fixed geometric offsets
and the hardware travel limits of the object and detector stages. Each
system owns one or more detector profiles (read-out modes of the flat
panel).

All lengths are in mm. Profiles are immutable; updates build a new
instance (see ConfigurationStore.apply_settings).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class DetectorProfile:
    """Flat-panel detector read-out mode.

    Attributes:
        id: Detector identifier within its system (e.g. "3K").
        name: Display name (e.g. "3K (2856 x 2856)").
        pixel_h: Horizontal pixel count at binning 1.
        pixel_v: Vertical pixel count at binning 1.
        size_h: Active width [mm].
        size_v: Active height [mm].
        pixel_size: Pixel pitch at binning 1 [mm].
        tiling_factor: Width/pixel-count multiplier when several panels
            are stitched together (>= 1).
    """
    id: str
    name: str
    pixel_h: int
    pixel_v: int
    size_h: float
    size_v: float
    pixel_size: float
    tiling_factor: float = 1.0


@dataclass(frozen=True)
class SystemProfile:
    """CT scanner system profile.

    Attributes:
        id: System identifier (e.g. "CoreTOM").
        name: Display name.
        fod: Focal-to-object reference offset [mm].
        spot_size: Focal spot size [µm]; informational only.
        safety: Safety margin between object and source housing [mm].
        min_sdd: Minimum source-to-detector distance [mm].
        max_sdd: Maximum source-to-detector distance [mm].
        min_sod: Minimum source-to-object distance [mm].
        max_sod: Maximum source-to-object distance [mm].
        detectors: Detector id → DetectorProfile, in display order.
    """
    id: str
    name: str
    fod: float
    spot_size: float
    safety: float
    min_sdd: float
    max_sdd: float
    min_sod: float
    max_sod: float
    detectors: Mapping[str, DetectorProfile] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # Read-only view; changes go through ConfigurationStore.apply_settings
        object.__setattr__(self, "detectors", MappingProxyType(dict(self.detectors)))

    @property
    def detector_ids(self) -> list[str]:
        """Detector ids in display order."""
        return list(self.detectors)
