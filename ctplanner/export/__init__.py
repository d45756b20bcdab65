"""Export — sweep table data export (CSV)."""

from ctplanner.export.csv_export import CsvExporter

__all__ = [
    "CsvExporter",
]
