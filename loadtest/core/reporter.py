"""Report writer for persisting a finished load test."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from common.models.report import Report
from common.utils import ensure_dir, format_timestamp, sanitize_filename

logger = logging.getLogger(__name__)


class ReportWriter:
    """Write reports to `<dir>/<prefix><UTC timestamp><suffix>`."""

    def __init__(
        self,
        report_dir: str | Path = ".",
        prefix: str = "load_test_",
        suffix: str = ".json",
    ):
        self.report_dir = Path(report_dir)
        self.prefix = prefix
        self.suffix = suffix

    def report_path(self, completed_at: Optional[datetime] = None) -> Path:
        name = sanitize_filename(f"{self.prefix}{format_timestamp(completed_at)}{self.suffix}")
        return self.report_dir / name

    def write(self, report: Report, completed_at: Optional[datetime] = None) -> Path:
        """Append the report as one JSON line to its timestamped file."""
        ensure_dir(self.report_dir)
        path = self.report_path(completed_at or report.finished)

        with open(path, "a", encoding="utf-8") as f:
            f.write(report.to_json())
            f.write("\n")

        logger.info(f"Done! Here is the report: {path}")
        return path

    def list_reports(self) -> list[Path]:
        """Reports in the directory, newest first."""
        if not self.report_dir.is_dir():
            return []
        files = self.report_dir.glob(f"{self.prefix}*{self.suffix}")
        return sorted(files, key=lambda p: p.name, reverse=True)

    @staticmethod
    def load_all(path: str | Path) -> list[Report]:
        """Every report appended to the file, oldest first."""
        reports = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    reports.append(Report.model_validate_json(line))
        if not reports:
            raise ValueError(f"No reports in {path}")
        return reports

    @staticmethod
    def load(path: str | Path) -> Report:
        """Read the last report written to the file by `write`."""
        return ReportWriter.load_all(path)[-1]
