"""Base chart widget — pyqtgraph-based with dark theme.

Common API for chart widgets: add_series, clear_series, crosshair.
"""

from typing import Callable

import numpy as np
import pyqtgraph as pg
from PyQt6.QtWidgets import QWidget, QVBoxLayout
from PyQt6.QtCore import Qt

from ctplanner.ui.styles.colors import ACCENT, BACKGROUND, PANEL_BG, TEXT_SECONDARY, BORDER


class BaseChart(QWidget):
    """pyqtgraph PlotWidget wrapper with dark theme and utility methods."""

    def __init__(
        self,
        title: str = "",
        x_label: str = "",
        y_label: str = "",
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._items: list[pg.GraphicsObject] = []
        self._crosshair_enabled = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setBackground(BACKGROUND)
        self.plot_widget.showGrid(x=True, y=True, alpha=0.15)
        layout.addWidget(self.plot_widget)

        plot_item = self.plot_widget.getPlotItem()
        if title:
            plot_item.setTitle(title, color=TEXT_SECONDARY, size="10pt")
        self.set_labels(x_label, y_label)

        for axis_name in ("bottom", "left", "top", "right"):
            axis = plot_item.getAxis(axis_name)
            axis.setPen(pg.mkPen(BORDER))
            axis.setTextPen(pg.mkPen(TEXT_SECONDARY))

        self._legend = plot_item.addLegend(
            offset=(10, 10),
            labelTextColor=TEXT_SECONDARY,
            brush=pg.mkBrush(PANEL_BG),
            pen=pg.mkPen(BORDER),
        )

    def set_labels(self, x_label: str, y_label: str) -> None:
        """Set the axis titles."""
        plot_item = self.plot_widget.getPlotItem()
        if x_label:
            plot_item.setLabel("bottom", x_label, color=TEXT_SECONDARY)
        if y_label:
            plot_item.setLabel("left", y_label, color=TEXT_SECONDARY)

    def add_series(
        self,
        x: np.ndarray,
        y: np.ndarray,
        name: str = "",
        color: str = ACCENT,
        width: int = 2,
        symbol_size: int = 7,
        data: list | None = None,
        tip: Callable[..., str] | None = None,
    ) -> pg.ScatterPlotItem:
        """Add a scatter series joined by a line.

        Args:
            x, y: Point coordinates.
            name: Legend label.
            color: Line and symbol color.
            width: Line width [px].
            symbol_size: Symbol size [px].
            data: Per-point payload passed to *tip*.
            tip: Hover text callable ``tip(x=..., y=..., data=...)``.

        Returns:
            The scatter item.
        """
        line = self.plot_widget.plot(x, y, pen=pg.mkPen(color=color, width=width))
        self._items.append(line)

        kwargs = {}
        if data is not None:
            kwargs["data"] = data
        if tip is not None:
            kwargs["hoverable"] = True
            kwargs["tip"] = tip
        scatter = pg.ScatterPlotItem(
            x=x, y=y,
            size=symbol_size,
            brush=pg.mkBrush(color),
            pen=pg.mkPen(color),
            name=name,
            **kwargs,
        )
        self.plot_widget.addItem(scatter)
        self._items.append(scatter)
        return scatter

    def clear_series(self) -> None:
        """Remove all series."""
        for item in self._items:
            self.plot_widget.removeItem(item)
        self._items.clear()
        if self._legend is not None:
            self._legend.clear()

    def enable_crosshair(self) -> None:
        """Add crosshair lines that follow mouse cursor."""
        if self._crosshair_enabled:
            return
        self._crosshair_enabled = True
        pen = pg.mkPen(TEXT_SECONDARY, width=1, style=Qt.PenStyle.DotLine)
        self._vline = pg.InfiniteLine(angle=90, movable=False, pen=pen)
        self._hline = pg.InfiniteLine(angle=0, movable=False, pen=pen)
        self.plot_widget.addItem(self._vline, ignoreBounds=True)
        self.plot_widget.addItem(self._hline, ignoreBounds=True)

        self.plot_widget.scene().sigMouseMoved.connect(self._on_mouse_moved)

    def _on_mouse_moved(self, pos) -> None:
        """Update crosshair position."""
        vb = self.plot_widget.getPlotItem().vb
        if self.plot_widget.sceneBoundingRect().contains(pos):
            mouse_point = vb.mapSceneToView(pos)
            self._vline.setPos(mouse_point.x())
            self._hline.setPos(mouse_point.y())
