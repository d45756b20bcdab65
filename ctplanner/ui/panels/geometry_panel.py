"""Geometry panel — system, detector, binning, tiling, SOD and SDD controls.

Reads control values into the ScanController and mirrors the
controller's state back, including an SDD raised by the constraint.
"""

from __future__ import annotations

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel,
    QComboBox, QCheckBox, QSlider,
)
from PyQt6.QtCore import Qt

from ctplanner.constants import BINNING_OPTIONS
from ctplanner.core.i18n import t, follow_language
from ctplanner.ui.scan_controller import ScanController
from ctplanner.ui.styles.colors import WARNING


class GeometryPanel(QWidget):
    """Scan geometry controls bound to a ScanController."""

    def __init__(self, controller: ScanController, parent: QWidget | None = None):
        super().__init__(parent)
        self._controller = controller
        self._updating = False
        self._build_ui()
        self._connect_signals()
        self._refresh_system()
        self._refresh_values()
        follow_language(self)

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 6, 8, 6)
        layout.setSpacing(6)

        form = QFormLayout()
        self._system_label = QLabel()
        self._system_combo = QComboBox()
        form.addRow(self._system_label, self._system_combo)

        self._detector_label = QLabel()
        self._detector_combo = QComboBox()
        form.addRow(self._detector_label, self._detector_combo)

        self._binning_label = QLabel()
        self._binning_combo = QComboBox()
        for b in BINNING_OPTIONS:
            self._binning_combo.addItem(f"{b}x{b}", b)
        form.addRow(self._binning_label, self._binning_combo)

        self._tiling_check = QCheckBox()
        form.addRow("", self._tiling_check)
        layout.addLayout(form)

        self._sod_title, self._sod_slider, self._sod_label = self._slider_row(layout)
        self._sdd_title, self._sdd_slider, self._sdd_label = self._slider_row(layout)

        self._constraint_label = QLabel()
        self._constraint_label.setWordWrap(True)
        self._constraint_label.setStyleSheet(f"color: {WARNING}; font-size: 9pt;")
        self._constraint_label.setVisible(False)
        layout.addWidget(self._constraint_label)
        layout.addStretch()

        self.retranslate_ui()

    @staticmethod
    def _slider_row(layout: QVBoxLayout) -> tuple[QLabel, QSlider, QLabel]:
        row = QHBoxLayout()
        title = QLabel()
        row.addWidget(title)
        row.addStretch()
        value_label = QLabel("")
        value_label.setStyleSheet("font-weight: bold;")
        row.addWidget(value_label)
        layout.addLayout(row)

        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setSingleStep(1)
        layout.addWidget(slider)
        return title, slider, value_label

    def retranslate_ui(self) -> None:
        self._system_label.setText(t("geometry.system", "System"))
        self._detector_label.setText(t("geometry.detector", "Detector mode"))
        self._binning_label.setText(t("geometry.binning", "Binning"))
        self._tiling_check.setText(t("geometry.tiling", "Tiling"))
        self._sod_title.setText(t("geometry.sod", "SOD [mm]"))
        self._sdd_title.setText(t("geometry.sdd", "SDD [mm]"))
        self._constraint_label.setText(t(
            "geometry.constraint",
            "SDD raised: the detector must clear the largest object (SDD >= SOD + D/2).",
        ))

    def _connect_signals(self) -> None:
        self._system_combo.currentIndexChanged.connect(self._on_system_selected)
        self._detector_combo.currentIndexChanged.connect(self._on_detector_selected)
        self._binning_combo.currentIndexChanged.connect(
            lambda _: self._guarded(self._controller.set_binning, self._binning_combo.currentData())
        )
        self._tiling_check.toggled.connect(
            lambda checked: self._guarded(self._controller.set_tiling, checked)
        )
        self._sod_slider.valueChanged.connect(
            lambda v: self._guarded(self._controller.set_sod, float(v))
        )
        self._sdd_slider.valueChanged.connect(
            lambda v: self._guarded(self._controller.set_sdd, float(v))
        )

        self._controller.system_changed.connect(self._refresh_system)
        self._controller.metrics_changed.connect(lambda _: self._refresh_values())
        self._controller.constraint_changed.connect(self._constraint_label.setVisible)

    # ------------------------------------------------------------------
    # UI → controller
    # ------------------------------------------------------------------

    def _guarded(self, setter, value) -> None:
        """Forward a control change unless the panel is being refreshed."""
        if self._updating:
            return
        setter(value)

    def _on_system_selected(self, index: int) -> None:
        system_id = self._system_combo.itemData(index)
        if system_id is not None:
            self._guarded(self._controller.select_system, system_id)

    def _on_detector_selected(self, index: int) -> None:
        detector_id = self._detector_combo.itemData(index)
        if detector_id is not None:
            self._guarded(self._controller.select_detector, detector_id)

    # ------------------------------------------------------------------
    # Controller → UI
    # ------------------------------------------------------------------

    def _refresh_system(self) -> None:
        """Rebuild combos and slider ranges for the current system."""
        self._updating = True
        try:
            state = self._controller.state
            profile = self._controller.profile

            self._system_combo.clear()
            for sys_profile in self._controller.store.get_all_systems():
                self._system_combo.addItem(sys_profile.name, sys_profile.id)
            self._system_combo.setCurrentIndex(self._system_combo.findData(state.system_id))

            self._detector_combo.clear()
            for det in profile.detectors.values():
                self._detector_combo.addItem(det.name, det.id)
            self._detector_combo.setCurrentIndex(self._detector_combo.findData(state.detector_id))

            self._sod_slider.setRange(int(profile.min_sod), int(profile.max_sod))
            self._sdd_slider.setRange(int(profile.min_sdd), int(profile.max_sdd))
        finally:
            self._updating = False
        self._refresh_values()

    def _refresh_values(self) -> None:
        """Mirror SOD/SDD/binning/tiling from the controller state."""
        self._updating = True
        try:
            state = self._controller.state
            self._sod_slider.setValue(round(state.sod))
            self._sdd_slider.setValue(round(state.sdd))
            self._sod_label.setText(f"{state.sod:g}")
            self._sdd_label.setText(f"{round(state.sdd)}")
            self._binning_combo.setCurrentIndex(self._binning_combo.findData(state.binning))
            self._tiling_check.setChecked(state.tiling_enabled)
            self._constraint_label.setVisible(self._controller.constraint_active)
        finally:
            self._updating = False
