"""
Centralized logging configuration for the portfolio valuation system.

All components log through structlog so that tick, pricing and delivery
events share one structured format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    # Logs go to stderr; stdout is reserved for valuation reports
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO,
                        structlog.processors.CallsiteParameter.THREAD_NAME]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_market_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the market bus subsystem.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger carrying subsystem context for tick events
    """
    return get_logger(name).bind(subsystem="market_bus")


def log_consumer_fault(
    logger: FilteringBoundLogger,
    consumer: str,
    sequence: int,
    error: BaseException,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log an isolated subscriber failure with standardized fields.

    Args:
        logger: Structlog logger instance
        consumer: Name of the failing consumer
        sequence: Snapshot sequence being delivered
        error: Exception raised by the consumer
        context: Additional context data
    """
    bound_logger = logger.bind(
        consumer=consumer,
        sequence=sequence,
        error_type=type(error).__name__,
        error=str(error),
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.error("Consumer failed during snapshot notification", exc_info=error)
