"""Builds the report sink from configuration."""

from ..config.defaults import ReportParams
from ..config.report_delivery import DeliveryMethod, destinations_from_params
from .base import BaseReportDelivery, CompositeReportDelivery
from .file_delivery import FileReportDelivery
from .stdout_delivery import StdoutReportDelivery


def build_delivery(params: ReportParams) -> BaseReportDelivery:
    """Create the sink for configured destinations; a single sink is returned as-is."""
    deliveries: list[BaseReportDelivery] = []

    for destination in destinations_from_params(params):
        if not destination.enabled:
            continue
        if destination.method == DeliveryMethod.STDOUT:
            deliveries.append(StdoutReportDelivery(destination.name, destination.config))
        elif destination.method == DeliveryMethod.FILE_OUTPUT:
            deliveries.append(FileReportDelivery(destination.config, destination.name))

    if len(deliveries) == 1:
        return deliveries[0]
    return CompositeReportDelivery(deliveries)
