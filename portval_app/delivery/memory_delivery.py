"""In-memory report delivery for embedding callers and tests."""

import threading
from typing import Optional

from ..models.market import ValuationReport
from .base import BaseReportDelivery


class CollectingReportDelivery(BaseReportDelivery):
    """Keeps delivered reports in arrival order, optionally bounded."""

    def __init__(self, name: str = "memory", max_reports: Optional[int] = None):
        super().__init__(name)
        self.max_reports = max_reports
        self._reports: list[ValuationReport] = []
        self._lock = threading.Lock()

    def _emit(self, report: ValuationReport) -> None:
        with self._lock:
            self._reports.append(report)
            if self.max_reports is not None and len(self._reports) > self.max_reports:
                del self._reports[0]

    @property
    def reports(self) -> list[ValuationReport]:
        with self._lock:
            return list(self._reports)

    @property
    def latest(self) -> Optional[ValuationReport]:
        with self._lock:
            return self._reports[-1] if self._reports else None

    def health_check(self) -> bool:
        return True
