"""Sweep panel — SOD range inputs, resolution table, graph and CSV export.

The table and the chart are filled from the same SweepResult; the CSV
export writes the same cells the table shows.
"""

from __future__ import annotations

import logging

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QDoubleSpinBox, QTableWidget, QTableWidgetItem, QStackedWidget,
    QHeaderView, QFileDialog, QMessageBox, QAbstractItemView,
)
from PyQt6.QtCore import Qt

from ctplanner.constants import CSV_DEFAULT_FILENAME, CSV_HEADER
from ctplanner.core.display import table_rows
from ctplanner.core.errors import InvalidRangeError
from ctplanner.core.i18n import t, follow_language
from ctplanner.export.csv_export import CsvExporter
from ctplanner.models.results import SweepResult
from ctplanner.ui.charts.resolution_chart import ResolutionChartWidget
from ctplanner.ui.scan_controller import ScanController

logger = logging.getLogger(__name__)


class SweepPanel(QWidget):
    """SOD sweep table/graph bound to a ScanController."""

    def __init__(self, controller: ScanController, parent: QWidget | None = None):
        super().__init__(parent)
        self._controller = controller
        self._exporter = CsvExporter()
        self._build_ui()
        self._connect_signals()
        self._reset_range()
        follow_language(self)

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 6, 8, 6)
        layout.setSpacing(6)

        # Range inputs
        range_row = QHBoxLayout()
        self._min_spin = self._spin()
        self._max_spin = self._spin()
        self._step_spin = self._spin()
        self._min_label = QLabel()
        self._max_label = QLabel()
        self._step_label = QLabel()
        for label, spin in (
            (self._min_label, self._min_spin),
            (self._max_label, self._max_spin),
            (self._step_label, self._step_spin),
        ):
            range_row.addWidget(label)
            range_row.addWidget(spin)
        self._btn_generate = QPushButton()
        range_row.addWidget(self._btn_generate)
        range_row.addStretch()
        layout.addLayout(range_row)

        # View toggle + export
        view_row = QHBoxLayout()
        self._btn_table = QPushButton()
        self._btn_graph = QPushButton()
        for btn in (self._btn_table, self._btn_graph):
            btn.setCheckable(True)
            view_row.addWidget(btn)
        self._btn_table.setChecked(True)
        view_row.addStretch()
        self._btn_export = QPushButton()
        self._btn_export.setEnabled(False)
        view_row.addWidget(self._btn_export)
        layout.addLayout(view_row)

        # Table / graph
        self._stack = QStackedWidget()
        self._table = QTableWidget(0, len(CSV_HEADER))
        self._table.setHorizontalHeaderLabels(CSV_HEADER)
        self._table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self._table.verticalHeader().setVisible(False)
        self._table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self._stack.addWidget(self._table)

        self._chart = ResolutionChartWidget()
        self._stack.addWidget(self._chart)
        layout.addWidget(self._stack, stretch=1)

        self.retranslate_ui()

    def retranslate_ui(self) -> None:
        self._min_label.setText(t("sweep.min_sod", "Min SOD [mm]"))
        self._max_label.setText(t("sweep.max_sod", "Max SOD [mm]"))
        self._step_label.setText(t("sweep.step", "Step [mm]"))
        self._btn_generate.setText(t("sweep.generate", "Generate"))
        self._btn_table.setText(t("sweep.table", "Table"))
        self._btn_graph.setText(t("sweep.graph", "Graph"))
        self._btn_export.setText(t("sweep.export_csv", "Export CSV"))

    @staticmethod
    def _spin() -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setRange(0.0, 10_000.0)
        spin.setDecimals(1)
        spin.setSingleStep(1.0)
        return spin

    def _connect_signals(self) -> None:
        self._btn_generate.clicked.connect(self.generate)
        self._btn_table.clicked.connect(lambda: self.switch_view("table"))
        self._btn_graph.clicked.connect(lambda: self.switch_view("graph"))
        self._btn_export.clicked.connect(self.export_csv)
        self._controller.system_changed.connect(self._reset_range)
        self._controller.sweep_generated.connect(self.show_sweep)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _reset_range(self) -> None:
        """Load the sweep defaults of the current system."""
        min_sod, max_sod, step = self._controller.sweep_defaults()
        self._min_spin.setValue(min_sod)
        self._max_spin.setValue(max_sod)
        self._step_spin.setValue(step)

    def generate(self) -> None:
        """Run the sweep for the entered range."""
        try:
            self._controller.generate_sweep(
                self._min_spin.value(), self._max_spin.value(), self._step_spin.value(),
            )
        except InvalidRangeError as exc:
            QMessageBox.warning(self, t("sweep.invalid_title", "Invalid range"), str(exc))

    def show_sweep(self, result: SweepResult) -> None:
        """Fill table and chart from *result*."""
        rows = table_rows(result)
        self._table.setRowCount(len(rows))
        for r, cells in enumerate(rows):
            for c, text in enumerate(cells):
                item = QTableWidgetItem(text)
                item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                self._table.setItem(r, c, item)
        self._chart.set_sweep(result)
        self._btn_export.setEnabled(bool(rows))

    def switch_view(self, view_name: str) -> None:
        """Show ``"table"`` or ``"graph"``."""
        show_graph = view_name == "graph"
        self._stack.setCurrentWidget(self._chart if show_graph else self._table)
        self._btn_graph.setChecked(show_graph)
        self._btn_table.setChecked(not show_graph)

    def table_cells(self) -> list[list[str]]:
        """Current table contents as text."""
        return [
            [self._table.item(r, c).text() for c in range(self._table.columnCount())]
            for r in range(self._table.rowCount())
        ]

    def export_csv(self) -> None:
        """Ask for a file name and write the last sweep as CSV."""
        result = self._controller.last_sweep
        if result is None:
            return
        path, _ = QFileDialog.getSaveFileName(
            self,
            t("sweep.export_title", "Export Resolution Table"),
            CSV_DEFAULT_FILENAME,
            "CSV (*.csv)",
        )
        if not path:
            return
        try:
            self._exporter.export_sweep(result, path)
        except OSError as exc:
            logger.exception("CSV export failed: %s", path)
            QMessageBox.critical(self, t("sweep.export_failed", "Export failed"), str(exc))
