"""System settings dialog.

Edits the current system's geometric constants and travel limits, plus
the width and tiling factor of each detector mode. Values are entered as
text and validated by the configuration store when applied; a rejected
update leaves the configuration untouched and the dialog open.
"""

from __future__ import annotations

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QGroupBox, QFormLayout,
    QLineEdit, QPushButton, QMessageBox,
)

from ctplanner.core.errors import PlannerError
from ctplanner.core.i18n import t
from ctplanner.models.system import SystemProfile
from ctplanner.ui.scan_controller import ScanController

# (settings key, profile attribute, translation key, default label)
_SYSTEM_FIELDS = [
    ("FOD", "fod", "settings.fod", "FOD [mm]"),
    ("SPOT_SIZE", "spot_size", "settings.spot_size", "Spot size [µm]"),
    ("SAFETY", "safety", "settings.safety", "Safety margin [mm]"),
    ("MIN_SDD", "min_sdd", "settings.min_sdd", "Min SDD [mm]"),
    ("MAX_SDD", "max_sdd", "settings.max_sdd", "Max SDD [mm]"),
    ("MIN_SOD", "min_sod", "settings.min_sod", "Min SOD [mm]"),
    ("MAX_SOD", "max_sod", "settings.max_sod", "Max SOD [mm]"),
]


def settings_fields(profile: SystemProfile) -> tuple[dict[str, str], dict[str, dict[str, str]]]:
    """Current profile values as the text the dialog starts with."""
    system = {key: f"{getattr(profile, attr):g}" for key, attr, _k, _d in _SYSTEM_FIELDS}
    detectors = {
        det.id: {"sizeH": f"{det.size_h:g}", "tilingFactor": f"{det.tiling_factor:g}"}
        for det in profile.detectors.values()
    }
    return system, detectors


class SettingsDialog(QDialog):
    """Dialog for editing the current system profile."""

    def __init__(self, controller: ScanController, parent=None):
        super().__init__(parent)
        self._controller = controller
        self.setWindowTitle(t("settings.title", "System Settings"))
        self.setMinimumWidth(420)
        self._system_edits: dict[str, QLineEdit] = {}
        self._detector_edits: dict[str, dict[str, QLineEdit]] = {}
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        profile = self._controller.profile
        system_values, detector_values = settings_fields(profile)

        sys_group = QGroupBox(profile.name)
        sys_form = QFormLayout(sys_group)
        for key, _attr, tkey, default in _SYSTEM_FIELDS:
            edit = QLineEdit(system_values[key])
            self._system_edits[key] = edit
            sys_form.addRow(t(tkey, default), edit)
        layout.addWidget(sys_group)

        det_group = QGroupBox(t("settings.detectors", "Detector modes"))
        det_form = QFormLayout(det_group)
        for det in profile.detectors.values():
            size_edit = QLineEdit(detector_values[det.id]["sizeH"])
            tile_edit = QLineEdit(detector_values[det.id]["tilingFactor"])
            self._detector_edits[det.id] = {"sizeH": size_edit, "tilingFactor": tile_edit}
            det_form.addRow(f"{det.name} - {t('settings.size_h', 'Size H (mm)')}", size_edit)
            det_form.addRow(f"{det.name} - {t('settings.tiling', 'Tiling Factor')}", tile_edit)
        layout.addWidget(det_group)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()
        btn_ok = QPushButton(t("common.apply", "Apply"))
        btn_ok.clicked.connect(self._on_apply)
        btn_cancel = QPushButton(t("common.cancel", "Cancel"))
        btn_cancel.clicked.connect(self.reject)
        btn_layout.addWidget(btn_ok)
        btn_layout.addWidget(btn_cancel)
        layout.addLayout(btn_layout)

    def get_fields(self) -> tuple[dict[str, str], dict[str, dict[str, str]]]:
        """Entered (system fields, detector fields) as raw text."""
        system = {key: edit.text() for key, edit in self._system_edits.items()}
        detectors = {
            det_id: {name: edit.text() for name, edit in edits.items()}
            for det_id, edits in self._detector_edits.items()
        }
        return system, detectors

    def _on_apply(self) -> None:
        system, detectors = self.get_fields()
        try:
            self._controller.apply_settings(system, detectors)
        except PlannerError as exc:
            QMessageBox.warning(self, t("settings.invalid_title", "Invalid settings"), str(exc))
            return
        self.accept()
