"""Application factory — QApplication creation, theme loading, font setup."""

import logging
import sys
from pathlib import Path

from PyQt6.QtCore import qInstallMessageHandler, QtMsgType, QSettings
from PyQt6.QtWidgets import QApplication
from PyQt6.QtGui import QFont

from ctplanner.constants import APP_NAME, APP_ORGANIZATION
from ctplanner.core.i18n import TranslationManager
from ctplanner.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _qt_message_handler(msg_type, context, message):
    """Route Qt warnings into the application log.

    Suppresses harmless QPainter warnings that Qt's style engine emits
    for widgets that do not have a valid size yet.
    """
    if "QPainter" in message:
        return
    if msg_type == QtMsgType.QtWarningMsg:
        logger.warning("Qt: %s", message)
    elif msg_type in (QtMsgType.QtCriticalMsg, QtMsgType.QtFatalMsg):
        logger.error("Qt: %s", message)


def create_application(argv: list[str]) -> QApplication:
    """Create and configure the QApplication instance."""
    qInstallMessageHandler(_qt_message_handler)

    app = QApplication(argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_ORGANIZATION)

    font = QFont("Segoe UI", 10)
    font.setStyleHint(QFont.StyleHint.SansSerif)
    app.setFont(font)

    # Dark theme QSS
    qss_path = Path(__file__).parent / "ui" / "styles" / "dark_theme.qss"
    if qss_path.exists():
        app.setStyleSheet(qss_path.read_text(encoding="utf-8"))

    return app


def restore_language() -> str:
    """Load the interface language saved by the Language menu."""
    saved = QSettings().value("language")
    if saved in TranslationManager.available_languages():
        TranslationManager.init(saved)
    return TranslationManager.instance().lang


def main() -> None:
    """GUI entry point."""
    from ctplanner.ui.main_window import MainWindow

    setup_logging()
    app = create_application(sys.argv)
    restore_language()
    window = MainWindow()
    window.show()
    sys.exit(app.exec())
