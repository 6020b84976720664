"""
System failure error classifications.

Environment faults leave no safe way to keep producing snapshots. Consumer
and delivery faults are isolated to the component that raised them.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for runtime system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class EnvironmentFaultError(SystemFailureError):
    """Random source or scheduling primitive failed inside the tick loop."""

    def __init__(self, message: str, component: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.component = component


class ConsumerFaultError(SystemFailureError):
    """A bus subscriber raised while handling a snapshot."""

    def __init__(self, message: str, consumer: Optional[str] = None,
                 sequence: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.consumer = consumer
        self.sequence = sequence
        self.recoverable = True


class DeliveryError(SystemFailureError):
    """Valuation report delivery failed."""

    def __init__(self, message: str, delivery_method: Optional[str] = None,
                 sequence: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.delivery_method = delivery_method
        self.sequence = sequence
