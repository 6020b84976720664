"""File-based report delivery (JSON Lines)."""

import fcntl
import json
from pathlib import Path
from typing import Optional, TextIO

from ..config.report_delivery import FileDeliveryConfig
from ..models.market import ValuationReport
from .base import BaseReportDelivery


class FileReportDelivery(BaseReportDelivery):
    """Appends one JSON object per report to a file."""

    def __init__(self, config: FileDeliveryConfig, name: str = "file"):
        super().__init__(name, config)
        self.config: FileDeliveryConfig = config
        self.output_path = Path(config.output_path)
        self._handle: Optional[TextIO] = None

        if config.create_dirs:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def _open(self) -> TextIO:
        if self._handle is None:
            mode = "a" if self.config.append_mode else "w"
            self._handle = open(self.output_path, mode)
        return self._handle

    def _emit(self, report: ValuationReport) -> None:
        handle = self._open()
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        try:
            json.dump(report.to_dict(), handle, default=str)
            handle.write("\n")
            handle.flush()
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self.logger.info(
                "Report file closed",
                delivery_name=self.name,
                output_path=str(self.output_path),
                reports_written=self._delivery_count
            )

    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        try:
            test_file = self.output_path.parent / ".health_check_test"
            test_file.write_text("test")
            test_file.unlink()
            return True

        except OSError as e:
            self.logger.warning(
                "Health check failed",
                delivery_name=self.name,
                error=str(e)
            )
            return False
