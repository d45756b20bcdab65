"""Metrics panel — imaging metrics score card.

Shows max diameter, voxel size, field of view, magnification and raw
data size for the current geometry, each to 2 decimals.
"""

from __future__ import annotations

from PyQt6.QtWidgets import QWidget, QFormLayout, QLabel

from ctplanner.core.display import format_metrics
from ctplanner.core.i18n import t, follow_language
from ctplanner.models.results import MetricsResult
from ctplanner.ui.styles.colors import TEXT_PRIMARY

# (field, translation key, default label, unit)
_ROWS = [
    ("max_diameter", "metrics.max_diameter", "Maximum diameter", "mm"),
    ("voxel_size", "metrics.voxel_size", "Voxel size", "µm"),
    ("field_of_view", "metrics.fov", "Field of view", "mm"),
    ("magnification", "metrics.magnification", "Magnification", "x"),
    ("raw_data_gb", "metrics.raw_data", "Raw data", "GB"),
]


class MetricsPanel(QWidget):
    """Score card for the current imaging metrics."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self._value_labels: dict[str, QLabel] = {}
        self._name_labels: dict[str, QLabel] = {}
        self._build_ui()
        follow_language(self)

    def _build_ui(self) -> None:
        form = QFormLayout(self)
        form.setContentsMargins(8, 6, 8, 6)
        form.setSpacing(4)
        for field_name, key, default, _unit in _ROWS:
            name_label = QLabel(t(key, default))
            value_label = QLabel("-")
            value_label.setStyleSheet(f"color: {TEXT_PRIMARY}; font-size: 11pt; font-weight: bold;")
            form.addRow(name_label, value_label)
            self._name_labels[field_name] = name_label
            self._value_labels[field_name] = value_label

    def retranslate_ui(self) -> None:
        for field_name, key, default, _unit in _ROWS:
            self._name_labels[field_name].setText(t(key, default))

    def update_metrics(self, result: MetricsResult) -> None:
        """Show *result*."""
        shown = format_metrics(result)
        for field_name, _key, _default, unit in _ROWS:
            self._value_labels[field_name].setText(f"{getattr(shown, field_name)} {unit}")

    def value_text(self, field_name: str) -> str:
        """Displayed text of one metric (e.g. ``"187.00 mm"``)."""
        return self._value_labels[field_name].text()
