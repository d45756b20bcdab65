"""Resolution chart — voxel size vs. maximum object diameter.

Plots one point per sweep row; hovering a point shows its SOD and FOV.
"""

import numpy as np
from PyQt6.QtWidgets import QWidget, QVBoxLayout

from ctplanner.core.display import format_value
from ctplanner.core.i18n import t, follow_language
from ctplanner.models.results import ChartPoint, SweepResult
from ctplanner.ui.charts.base_chart import BaseChart
from ctplanner.ui.styles.colors import SWEEP_SERIES


def point_tip(x: float, y: float, data: ChartPoint | None = None) -> str:
    """Hover text for one chart point."""
    text = f"MaxDia: {format_value(x)} mm, Voxel: {format_value(y)} µm"
    if data is not None:
        text += f" (SOD: {format_value(data.sod)}, FOV: {format_value(data.fov)})"
    return text


class ResolutionChartWidget(QWidget):
    """Scatter chart of a sweep's diameter/resolution tradeoff."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        self._chart = BaseChart()
        self._chart.enable_crosshair()
        layout.addWidget(self._chart, stretch=1)
        self._points: list[ChartPoint] = []
        self.retranslate_ui()
        follow_language(self)

    def retranslate_ui(self) -> None:
        self._chart.set_labels(
            t("chart.x_label", "Maximum Diameter [mm]"),
            t("chart.y_label", "Voxel Size [µm]"),
        )
        self._plot()

    @property
    def points(self) -> list[ChartPoint]:
        """Chart records currently plotted."""
        return list(self._points)

    def set_sweep(self, result: SweepResult) -> None:
        """Replace the plotted series with *result*."""
        self._points = result.chart_points()
        self._plot()

    def _plot(self) -> None:
        self._chart.clear_series()
        if not self._points:
            return
        self._chart.add_series(
            np.array([p.x for p in self._points]),
            np.array([p.y for p in self._points]),
            name=t("chart.series", "Voxel Size (µm) vs Max Diameter (mm)"),
            color=SWEEP_SERIES,
            data=self._points,
            tip=point_tip,
        )

    def clear(self) -> None:
        self._chart.clear_series()
        self._points = []
