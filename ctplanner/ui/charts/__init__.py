"""Charts — pyqtgraph visualization widgets."""

from ctplanner.ui.charts.base_chart import BaseChart
from ctplanner.ui.charts.resolution_chart import ResolutionChartWidget

__all__ = [
    "BaseChart",
    "ResolutionChartWidget",
]
