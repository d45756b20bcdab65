"""Main window — QMainWindow with geometry controls, metrics and sweep.

Layout:
  Left:   Geometry panel (QDockWidget)
  Right:  Metrics panel (QDockWidget)
  Center: Sweep panel (table / graph)
  Menu:   File (Export CSV, Quit), Settings (System settings), Language
  Footer: QStatusBar
"""

from PyQt6.QtWidgets import QMainWindow, QDockWidget
from PyQt6.QtCore import Qt, QSettings
from PyQt6.QtGui import QAction, QActionGroup

import logging

from ctplanner.constants import APP_NAME, APP_VERSION, MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT
from ctplanner.core.display import format_value
from ctplanner.core.i18n import t, follow_language, TranslationManager
from ctplanner.models.results import MetricsResult, SweepResult
from ctplanner.ui.dialogs.settings_dialog import SettingsDialog
from ctplanner.ui.panels.geometry_panel import GeometryPanel
from ctplanner.ui.panels.metrics_panel import MetricsPanel
from ctplanner.ui.panels.sweep_panel import SweepPanel
from ctplanner.ui.scan_controller import ScanController

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Application main window."""

    def __init__(self, controller: ScanController | None = None):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} v{APP_VERSION}")
        self.setMinimumSize(MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT)

        self._controller = controller or ScanController()
        self._build_ui()
        self._build_menu()
        self._connect_signals()
        self._on_metrics_changed(self._controller.metrics)

        self.retranslate_ui()
        follow_language(self)

    def _build_ui(self) -> None:
        self._geometry_panel = GeometryPanel(self._controller)
        self._geo_dock = QDockWidget(self)
        self._geo_dock.setObjectName("GeometryDock")
        self._geo_dock.setWidget(self._geometry_panel)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self._geo_dock)

        self._metrics_panel = MetricsPanel()
        self._metrics_dock = QDockWidget(self)
        self._metrics_dock.setObjectName("MetricsDock")
        self._metrics_dock.setWidget(self._metrics_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self._metrics_dock)

        self._sweep_panel = SweepPanel(self._controller)
        self.setCentralWidget(self._sweep_panel)

        self.statusBar().showMessage(t("status.ready", "Ready"))

    def _build_menu(self) -> None:
        menu = self.menuBar()

        self._file_menu = menu.addMenu("")
        self._export_action = QAction(self)
        self._export_action.setEnabled(self._controller.last_sweep is not None)
        self._export_action.triggered.connect(self._sweep_panel.export_csv)
        self._file_menu.addAction(self._export_action)
        self._file_menu.addSeparator()
        self._quit_action = QAction(self)
        self._quit_action.triggered.connect(self.close)
        self._file_menu.addAction(self._quit_action)

        self._settings_menu = menu.addMenu("")
        self._settings_action = QAction(self)
        self._settings_action.triggered.connect(self._open_settings)
        self._settings_menu.addAction(self._settings_action)

        self._lang_menu = menu.addMenu("")
        group = QActionGroup(self)
        current = TranslationManager.instance().lang
        for lang in TranslationManager.available_languages():
            action = QAction(lang.upper(), self)
            action.setCheckable(True)
            action.setChecked(lang == current)
            action.triggered.connect(lambda _, code=lang: self._set_language(code))
            group.addAction(action)
            self._lang_menu.addAction(action)

    def retranslate_ui(self) -> None:
        """Update all translatable window strings on language change."""
        self._geo_dock.setWindowTitle(t("panels.geometry", "Geometry"))
        self._metrics_dock.setWindowTitle(t("panels.metrics", "Imaging Metrics"))

        self._file_menu.setTitle(t("menu.file", "File"))
        self._export_action.setText(t("menu.export_csv", "Export CSV..."))
        self._quit_action.setText(t("menu.quit", "Quit"))
        self._settings_menu.setTitle(t("menu.settings", "Settings"))
        self._settings_action.setText(t("menu.system_settings", "System settings..."))
        self._lang_menu.setTitle(t("menu.language", "Language"))

    def _connect_signals(self) -> None:
        self._controller.metrics_changed.connect(self._on_metrics_changed)
        self._controller.sweep_generated.connect(self._on_sweep_generated)
        self._controller.settings_applied.connect(
            lambda sid: self.statusBar().showMessage(
                t("status.settings_applied", "Settings applied to {system}").format(system=sid)
            )
        )

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def _on_metrics_changed(self, result: MetricsResult) -> None:
        self._metrics_panel.update_metrics(result)

    def _on_sweep_generated(self, result: SweepResult) -> None:
        self._export_action.setEnabled(len(result) > 0)
        self.statusBar().showMessage(
            t("status.sweep", "{count} points, target SDD {sdd} mm").format(
                count=len(result), sdd=format_value(result.request.target_sdd),
            )
        )

    def _open_settings(self) -> None:
        SettingsDialog(self._controller, self).exec()

    def _set_language(self, lang: str) -> None:
        QSettings().setValue("language", lang)
        TranslationManager.instance().set_language(lang)
        logger.info("Language switched to %s", lang)
        self.statusBar().showMessage(
            t("status.language", "Language: {language}").format(language=lang.upper())
        )
