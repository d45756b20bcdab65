"""Dialogs — modal dialog windows."""

from ctplanner.ui.dialogs.settings_dialog import SettingsDialog

__all__ = [
    "SettingsDialog",
]
