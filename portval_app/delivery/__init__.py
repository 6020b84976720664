"""Valuation report delivery sinks."""

from .base import BaseReportDelivery, CompositeReportDelivery, DeliveryResult
from .file_delivery import FileReportDelivery
from .memory_delivery import CollectingReportDelivery
from .stdout_delivery import StdoutReportDelivery
from .factory import build_delivery

__all__ = [
    "BaseReportDelivery",
    "CollectingReportDelivery",
    "CompositeReportDelivery",
    "DeliveryResult",
    "FileReportDelivery",
    "StdoutReportDelivery",
    "build_delivery",
]
