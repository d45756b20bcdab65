"""CSV export — SOD sweep resolution table.

Rows are the same formatted cells the sweep table shows. File output is
BOM UTF-8 encoded for Excel compatibility.
"""

from __future__ import annotations

import csv
import io
import logging

from ctplanner.constants import CSV_HEADER
from ctplanner.core.display import table_rows
from ctplanner.models.results import SweepResult

logger = logging.getLogger(__name__)


class CsvExporter:
    """CSV export operations for sweep results."""

    def sweep_rows(self, result: SweepResult) -> list[list[str]]:
        """Header row followed by one row per sweep point."""
        return [list(CSV_HEADER), *table_rows(result)]

    def sweep_to_csv_text(self, result: SweepResult) -> str:
        """Sweep as CSV text, rows separated by ``\\n``.

        Args:
            result: Sweep result.

        Returns:
            CSV text without trailing newline.
        """
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerows(self.sweep_rows(result))
        return buf.getvalue().rstrip("\n")

    def export_sweep(self, result: SweepResult, output_path: str) -> None:
        """Write the sweep table as a CSV file.

        Columns: SOD (mm), Maximum diameter (mm), Voxel size (µm), FOV (mm).

        Args:
            result: Sweep result.
            output_path: Destination file path (.csv).
        """
        with open(output_path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.writer(f)
            writer.writerows(self.sweep_rows(result))
        logger.info("Exported %d sweep rows to %s", len(result), output_path)
