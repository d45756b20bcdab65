"""Display formatting — metrics and sweep rows as text.

Every number shown in the metrics panel, the sweep table and the CSV
export goes through :func:`format_value`, so the table cells and the
CSV fields are identical strings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from ctplanner.constants import DISPLAY_DECIMALS
from ctplanner.core.units import bytes_to_GiB
from ctplanner.models.results import MetricsResult, SweepPoint, SweepResult


def format_value(value: float, decimals: int = DISPLAY_DECIMALS) -> str:
    """Fixed-point text with *decimals* places (``187.0`` → ``"187.00"``).

    An exact tie in the float's binary value rounds away from zero
    (``186.125`` → ``"186.13"``); ``f"{v:.2f}"`` would round it to even.
    """
    if not math.isfinite(value):
        return f"{value:.{decimals}f}"
    quantum = Decimal(1).scaleb(-decimals)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):.{decimals}f}"


@dataclass(frozen=True)
class MetricsDisplay:
    """Formatted metrics, one string per display field."""
    max_diameter: str
    magnification: str
    voxel_size: str
    field_of_view: str
    raw_data_gb: str


def format_metrics(result: MetricsResult) -> MetricsDisplay:
    """Format a MetricsResult for the metrics panel.

    Raw data size is shown in binary gigabytes.
    """
    return MetricsDisplay(
        max_diameter=format_value(result.max_diameter),
        magnification=format_value(result.magnification),
        voxel_size=format_value(result.voxel_size),
        field_of_view=format_value(result.field_of_view),
        raw_data_gb=format_value(bytes_to_GiB(result.raw_data_size_bytes)),
    )


def table_cells(point: SweepPoint) -> list[str]:
    """Table cells for one sweep row: SOD, max diameter, voxel size, FOV."""
    m = point.metrics
    return [
        format_value(point.sod),
        format_value(m.max_diameter),
        format_value(m.voxel_size),
        format_value(m.field_of_view),
    ]


def table_rows(result: SweepResult) -> list[list[str]]:
    """Table cells for every sweep row, in SOD order."""
    return [table_cells(p) for p in result]
