"""
Main valuation engine coordinator.

Loads reference data and positions once, then wires the market bus to a
portfolio valuator and its report sink:

Reference data → Initial snapshot → Market bus ticks → Valuator → Report sink
"""

import time
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Any, Callable, Optional, Union

import numpy as np

from .config.defaults import AppConfig
from .data.positions import load_positions_csv, resolve_positions
from .data.reference import SecurityReference, provider_for_path
from .delivery.base import BaseReportDelivery
from .delivery.factory import build_delivery
from .logging.config import get_logger
from .market.bus import BusState, MarketBus, SnapshotConsumer
from .models.securities import Position
from .valuation.valuator import PortfolioValuator

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


class PortfolioValuationEngine:
    """
    Owns one market bus and its primary portfolio valuator.

    Additional consumers can be attached with ``subscribe`` before or after
    ``start``; all of them run on the bus thread.
    """

    def __init__(
        self,
        config: AppConfig,
        reference: SecurityReference,
        positions: Sequence[Position],
        sink: Optional[Union[BaseReportDelivery, Callable[..., Any]]] = None,
        rng: Optional[np.random.Generator] = None,
        clock: Callable[[], date] = date.today,
        max_ticks: Optional[int] = None,
    ) -> None:
        self.logger = logger
        self.config = config
        self.reference = reference
        self.sink = sink if sink is not None else build_delivery(config.report)

        self.bus = MarketBus(
            reference.initial_snapshot(),
            params=config.simulation,
            rng=rng,
            max_ticks=max_ticks,
        )
        self.valuator = PortfolioValuator(
            positions,
            sink=self.sink,
            params=config.pricing,
            clock=clock,
        )
        self.bus.subscribe(self.valuator)

        self.logger.info(
            "Portfolio valuation engine initialized",
            stocks=len(reference.stocks),
            options=len(reference.options),
            positions=len(self.valuator.positions)
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        base_dir: Optional[Path] = None,
        **kwargs: Any,
    ) -> "PortfolioValuationEngine":
        """
        Load reference data and positions from the configured paths.

        Relative paths resolve against base_dir (the project root by default).
        Configuration errors in the reference data propagate and abort startup.
        """
        base_dir = Path(base_dir) if base_dir is not None else PROJECT_ROOT
        reference_path = base_dir / config.data.reference_path
        positions_path = base_dir / config.data.positions_path

        reference = SecurityReference.from_provider(provider_for_path(reference_path))
        positions = resolve_positions(load_positions_csv(positions_path), reference)

        return cls(config, reference, positions, **kwargs)

    def subscribe(self, consumer: SnapshotConsumer) -> None:
        self.bus.subscribe(consumer)

    @property
    def running(self) -> bool:
        return self.bus.state == BusState.RUNNING

    def start(self) -> None:
        self.bus.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Cancel the bus, wait for the loop to exit and close the sink."""
        try:
            self.bus.stop(timeout)
        finally:
            close = getattr(self.sink, "close", None)
            if callable(close):
                close()

            self.logger.info(
                "Portfolio valuation engine stopped",
                ticks_published=self.bus.ticks_published,
                consumer_faults=self.bus.consumer_fault_count
            )

    def run(self, duration: Optional[float] = None, poll_interval: float = 0.25) -> None:
        """
        Run until duration elapses, the bus stops on its own, or Ctrl+C.

        Args:
            duration: Seconds to run; None runs until interrupted
            poll_interval: How often the calling thread checks the bus
        """
        self.start()
        deadline = None if duration is None else time.monotonic() + duration

        try:
            while self.running:
                wait = poll_interval
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    wait = min(wait, remaining)
                self.bus.join(wait)

        except KeyboardInterrupt:
            self.logger.info("Interrupted, stopping market bus")

        finally:
            self.stop()
