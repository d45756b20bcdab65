"""Imaging metrics engine — closed-form cone-beam CT geometry metrics.

Computes, for one (SOD, SDD) pair and a detector read-out mode:
  - maximum scannable object diameter
  - geometric magnification
  - reconstructed voxel size
  - field of view
  - raw projection data volume

All lengths in mm, voxel size in µm, data size in bytes.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ctplanner.constants import BYTES_PER_SAMPLE, PROJECTIONS_PER_PIXEL
from ctplanner.core.errors import ValidationError
from ctplanner.core.units import mm_to_um, round_half_up
from ctplanner.models.results import MetricsResult

if TYPE_CHECKING:
    from ctplanner.core.configuration_store import ConfigurationStore
    from ctplanner.models.geometry import GeometryState
    from ctplanner.models.system import DetectorProfile, SystemProfile


def max_diameter(sod: float, profile: SystemProfile) -> float:
    """Largest object diameter at *sod* that clears the source housing.

    D = 2 * (SOD - FOD) - 2 * SAFETY, floored at 0.

    Args:
        sod: Source-to-object distance [mm].
        profile: System profile (FOD, SAFETY).

    Returns:
        Maximum diameter [mm], >= 0.
    """
    return max(0.0, 2.0 * (sod - profile.fod) - 2.0 * profile.safety)


class MetricsEngine:
    """Stateless imaging metrics calculator."""

    def compute(
        self,
        sod: float,
        sdd: float,
        profile: SystemProfile,
        detector: DetectorProfile,
        binning: int = 1,
        tiling_enabled: bool = False,
    ) -> MetricsResult:
        """Compute imaging metrics for one geometry.

        SOD <= 0 gives zero magnification and voxel size; the field of
        view is still evaluated.  SDD = 0 is the limiting case of the
        field-of-view formula (half-angle π/2, FOV = 2 * SOD) and is not
        an error.

        Args:
            sod: Source-to-object distance [mm].
            sdd: Source-to-detector distance [mm].
            profile: System profile.
            detector: Detector read-out mode.
            binning: Pixel binning factor (>= 1).
            tiling_enabled: Use the stitched-panel width and pixel count.

        Returns:
            MetricsResult.

        Raises:
            ValidationError: If *binning* is below 1.
        """
        if binning < 1:
            raise ValidationError(f"Binning must be a positive integer, got {binning!r}")

        eff_pixel_size = detector.pixel_size * binning

        diameter = max_diameter(sod, profile)

        magnification = sdd / sod if sod > 0 else 0.0

        voxel_size = 0.0
        if magnification > 0:
            voxel_size = float(mm_to_um(eff_pixel_size / magnification))

        fov = self.field_of_view(sod, sdd, self.effective_width(detector, tiling_enabled))

        pixel_h, pixel_v = self.effective_pixels(detector, binning, tiling_enabled)
        num_projections = round_half_up(pixel_h * PROJECTIONS_PER_PIXEL)
        raw_bytes = pixel_h * pixel_v * num_projections * BYTES_PER_SAMPLE

        return MetricsResult(
            max_diameter=diameter,
            magnification=magnification,
            voxel_size=voxel_size,
            field_of_view=fov,
            raw_data_size_bytes=raw_bytes,
            effective_pixel_h=pixel_h,
            effective_pixel_v=pixel_v,
            num_projections=num_projections,
        )

    def compute_for_state(
        self, state: GeometryState, store: ConfigurationStore,
    ) -> MetricsResult:
        """Compute metrics for a GeometryState, resolving profiles from *store*.

        Raises:
            NotFoundError: Unknown system or detector in *state*.
        """
        profile = store.get(state.system_id)
        detector = store.get_detector(state.system_id, state.detector_id)
        return self.compute(
            state.sod, state.sdd, profile, detector,
            state.binning, state.tiling_enabled,
        )

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    @staticmethod
    def effective_width(detector: DetectorProfile, tiling_enabled: bool) -> float:
        """Active detector width [mm], multiplied by the tiling factor if tiled.

        Binning does not change the physical width.
        """
        if tiling_enabled:
            return detector.size_h * detector.tiling_factor
        return detector.size_h

    @staticmethod
    def field_of_view(sod: float, sdd: float, width: float) -> float:
        """FOV = 2 * SOD * sin(atan((width / 2) / SDD)).

        ``atan2`` is used so that SDD = 0 yields the π/2 limit.

        Args:
            sod: Source-to-object distance [mm].
            sdd: Source-to-detector distance [mm].
            width: Effective detector width [mm].

        Returns:
            Field of view [mm].
        """
        half_angle = math.atan2(width / 2.0, sdd)
        return 2.0 * sod * math.sin(half_angle)

    @staticmethod
    def effective_pixels(
        detector: DetectorProfile, binning: int, tiling_enabled: bool,
    ) -> tuple[int, int]:
        """Effective (horizontal, vertical) pixel counts.

        The horizontal count is rounded after the tiling expansion and
        again after the binning reduction.
        """
        pixel_h = detector.pixel_h
        if tiling_enabled:
            pixel_h = round_half_up(detector.pixel_h * detector.tiling_factor)
        pixel_h = round_half_up(pixel_h / binning)
        pixel_v = round_half_up(detector.pixel_v / binning)
        return pixel_h, pixel_v
