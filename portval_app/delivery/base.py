"""Base classes for valuation report delivery."""

import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from ..errors import DeliveryError
from ..models.market import ValuationReport


@dataclass
class DeliveryResult:
    """Result of a successful report delivery."""
    delivery_name: str
    sequence: int
    delivery_time_ms: int


class BaseReportDelivery(ABC):
    """
    Base class for report sinks.

    Subclasses implement ``_emit``. ``deliver`` times the call, keeps
    counters, and raises DeliveryError when the sink fails.
    """

    def __init__(self, name: str, config: Any = None):
        self.name = name
        self.config = config
        self.logger = structlog.get_logger(f"report.delivery.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def _emit(self, report: ValuationReport) -> None:
        """Write one report to the destination."""

    @abstractmethod
    def health_check(self) -> bool:
        """Check if delivery mechanism is healthy."""

    def deliver(self, report: ValuationReport) -> DeliveryResult:
        start_time = time.perf_counter()

        try:
            self._emit(report)
        except Exception as e:
            self._error_count += 1
            self.logger.error(
                "Report delivery failed",
                delivery_name=self.name,
                sequence=report.sequence_number,
                error=str(e)
            )
            raise DeliveryError(
                f"{self.name} delivery failed: {e}",
                delivery_method=self.name,
                sequence=report.sequence_number
            ) from e

        self._delivery_count += 1
        return DeliveryResult(
            delivery_name=self.name,
            sequence=report.sequence_number,
            delivery_time_ms=int((time.perf_counter() - start_time) * 1000)
        )

    def __call__(self, report: ValuationReport) -> DeliveryResult:
        return self.deliver(report)

    def close(self) -> None:
        """Release any held resources."""

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": (
                self._delivery_count / (self._delivery_count + self._error_count)
                if (self._delivery_count + self._error_count) > 0 else 0.0
            )
        }

    def reset_stats(self) -> None:
        """Reset delivery statistics."""
        self._delivery_count = 0
        self._error_count = 0


class CompositeReportDelivery(BaseReportDelivery):
    """Fans a report out to several sinks; one failing sink does not block the rest."""

    def __init__(self, deliveries: Sequence[BaseReportDelivery], name: str = "composite"):
        super().__init__(name)
        self.deliveries = list(deliveries)

    def _emit(self, report: ValuationReport) -> None:
        failures = []
        for delivery in self.deliveries:
            try:
                delivery.deliver(report)
            except DeliveryError as e:
                failures.append(e)

        if failures:
            raise DeliveryError(
                "; ".join(str(f) for f in failures),
                delivery_method=",".join(str(f.delivery_method) for f in failures),
                sequence=report.sequence_number
            )

    def health_check(self) -> bool:
        return all(delivery.health_check() for delivery in self.deliveries)

    def close(self) -> None:
        for delivery in self.deliveries:
            delivery.close()
