"""Result data models — imaging metrics, constraint outcome, SOD sweep.

Results are always freshly derived from the geometry and the
configuration; they are never cached or persisted.

Units:
  - Lengths: mm
  - Voxel size: µm
  - Raw data size: bytes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, NamedTuple


@dataclass(frozen=True)
class MetricsResult:
    """Imaging metrics for one geometry.

    Attributes:
        max_diameter: Largest object diameter that fits without
            collision [mm], >= 0.
        magnification: Geometric magnification SDD / SOD (0 if SOD <= 0).
        voxel_size: Reconstructed voxel edge length [µm] (0 if M = 0).
        field_of_view: Diameter of the region seen by the detector [mm].
        raw_data_size_bytes: Estimated size of one raw projection set.
        effective_pixel_h: Horizontal pixel count after tiling and binning.
        effective_pixel_v: Vertical pixel count after binning.
        num_projections: Projection count used for the raw size estimate.
    """
    max_diameter: float = 0.0
    magnification: float = 0.0
    voxel_size: float = 0.0
    field_of_view: float = 0.0
    raw_data_size_bytes: int = 0
    effective_pixel_h: int = 0
    effective_pixel_v: int = 0
    num_projections: int = 0


class ConstraintResult(NamedTuple):
    """Outcome of the interactive SDD constraint.

    Attributes:
        sdd: SDD to use [mm] (raised to the effective minimum if needed).
        was_adjusted: True when the requested SDD was below the minimum.
    """
    sdd: float
    was_adjusted: bool


@dataclass(frozen=True)
class SweepPoint:
    """One row of an SOD sweep.

    Attributes:
        sod: Source-to-object distance [mm].
        sdd: SDD actually used for this row after the sweep constraint [mm].
        metrics: Metrics at (sod, sdd).
    """
    sod: float
    sdd: float
    metrics: MetricsResult


@dataclass(frozen=True)
class ChartPoint:
    """Chart record: plotted pair (x, y) plus display-only extras.

    Attributes:
        x: Maximum diameter [mm].
        y: Voxel size [µm].
        sod: Source-to-object distance [mm] (tooltip).
        fov: Field of view [mm] (tooltip).
    """
    x: float
    y: float
    sod: float
    fov: float

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "sod": self.sod, "fov": self.fov}


@dataclass(frozen=True)
class SweepRequest:
    """Parameters that produced a sweep.

    Attributes:
        min_sod: First SOD [mm].
        max_sod: Inclusive upper SOD bound [mm].
        step: SOD increment [mm], > 0.
        target_sdd: Requested SDD for every row [mm].
        system_id: System profile id.
        detector_id: Detector id.
        binning: Binning factor.
        tiling_enabled: Tiling flag.
    """
    min_sod: float
    max_sod: float
    step: float
    target_sdd: float
    system_id: str = ""
    detector_id: str = ""
    binning: int = 1
    tiling_enabled: bool = False


@dataclass(frozen=True)
class SweepResult:
    """Ordered, immutable result of an SOD sweep.

    Iterating yields the same SweepPoint sequence every time, so one
    result can feed the table, the CSV export and the chart.
    """
    request: SweepRequest
    points: tuple[SweepPoint, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[SweepPoint]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def sod_values(self) -> list[float]:
        return [p.sod for p in self.points]

    def chart_points(self) -> list[ChartPoint]:
        """Chart dataset: x = max diameter, y = voxel size."""
        return [
            ChartPoint(
                x=p.metrics.max_diameter,
                y=p.metrics.voxel_size,
                sod=p.sod,
                fov=p.metrics.field_of_view,
            )
            for p in self.points
        ]
