"""
Market bus: single-producer snapshot publication.

A dedicated thread evolves every tracked stock once per tick, swaps the
published snapshot reference, then calls each subscriber in registration
order from that same thread. Readers on other threads call ``current()`` and
always get either the previous or the new snapshot object, never a mixture,
since snapshots are immutable and the swap is a single reference assignment.
"""

import threading
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Union

import numpy as np

from ..config.defaults import SimulationParams
from ..errors import ConsumerFaultError, EnvironmentFaultError
from ..logging.config import get_market_logger, log_consumer_fault
from ..models.market import MarketSnapshot
from ..pricing.evolution import PriceEvolver
from .schedule import TickSchedule


class BusState(str, Enum):
    """Lifecycle of the tick loop."""
    IDLE = "idle"          # Constructed, loop not started
    RUNNING = "running"
    STOPPED = "stopped"


class SnapshotListener(Protocol):
    def on_snapshot(self, snapshot: MarketSnapshot) -> Any: ...


SnapshotConsumer = Union[SnapshotListener, Callable[[MarketSnapshot], Any]]


def _consumer_name(consumer: SnapshotConsumer) -> str:
    name = getattr(consumer, "name", None)
    if isinstance(name, str):
        return name
    return getattr(consumer, "__qualname__", type(consumer).__name__)


class MarketBus:
    """
    Owns the current market snapshot and publishes a new one every tick.

    Subscribers may be objects with an ``on_snapshot`` method or plain
    callables. They run synchronously on the producer thread, so a slow
    subscriber delays the next tick.
    """

    def __init__(
        self,
        initial_snapshot: MarketSnapshot,
        params: Optional[SimulationParams] = None,
        rng: Optional[np.random.Generator] = None,
        schedule: Optional[TickSchedule] = None,
        max_ticks: Optional[int] = None,
        name: str = "market-bus",
    ) -> None:
        self.params = params or SimulationParams()
        self.name = name
        self.logger = get_market_logger(__name__).bind(bus=name)

        self._evolver = PriceEvolver(self.params)
        self._schedule = schedule or TickSchedule.from_params(self.params)
        # Owned by the producer thread only
        self._rng = rng if rng is not None else np.random.default_rng(self.params.seed)
        self._max_ticks = max_ticks

        self._published = initial_snapshot
        self._subscribers: tuple[SnapshotConsumer, ...] = ()
        self._subscribers_lock = threading.Lock()

        # Guards the cancel flag against publication and wakes sequence waiters
        self._publish_cond = threading.Condition()
        self._cancel_event = threading.Event()

        self._state = BusState.IDLE
        self._thread: Optional[threading.Thread] = None
        self._ticks_published = 0
        self._consumer_fault_count = 0
        self._last_consumer_fault: Optional[ConsumerFaultError] = None
        self._fault: Optional[BaseException] = None

    # Subscription

    def subscribe(self, consumer: SnapshotConsumer) -> None:
        """Register a consumer for every future snapshot. Safe before or after start."""
        if not callable(getattr(consumer, "on_snapshot", None)) and not callable(consumer):
            raise TypeError("Consumer must be callable or define on_snapshot(snapshot)")

        with self._subscribers_lock:
            # Copy-on-write so the producer iterates a stable tuple
            self._subscribers = self._subscribers + (consumer,)

        self.logger.info(
            "Consumer subscribed",
            consumer=_consumer_name(consumer),
            subscriber_count=len(self._subscribers)
        )

    @property
    def subscribers(self) -> tuple[SnapshotConsumer, ...]:
        return self._subscribers

    # Introspection

    def current(self) -> MarketSnapshot:
        """Latest published snapshot."""
        return self._published

    @property
    def state(self) -> BusState:
        return self._state

    @property
    def ticks_published(self) -> int:
        return self._ticks_published

    @property
    def consumer_fault_count(self) -> int:
        return self._consumer_fault_count

    @property
    def last_consumer_fault(self) -> Optional[ConsumerFaultError]:
        """Most recent isolated consumer failure; earlier ones are only counted."""
        return self._last_consumer_fault

    @property
    def fault(self) -> Optional[BaseException]:
        """Environment fault that stopped the loop, if any."""
        return self._fault

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    # Lifecycle

    def start(self) -> None:
        """Start the tick loop on a daemon thread."""
        if self._state != BusState.IDLE:
            raise RuntimeError(f"Market bus already {self._state.value}")

        self._state = BusState.RUNNING
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

        self.logger.info(
            "Market bus started",
            initial_sequence=self._published.sequence,
            stocks=len(self._published),
            interval_seconds=self._schedule.interval_seconds,
            max_interval_seconds=self._schedule.max_interval_seconds
        )

    def cancel(self) -> None:
        """
        Request the loop to stop. Idempotent.

        Once this returns no further snapshot is published; a tick that is
        mid-computation is abandoned.
        """
        with self._publish_cond:
            already = self._cancel_event.is_set()
            self._cancel_event.set()
            self._publish_cond.notify_all()

        if self._state == BusState.IDLE:
            self._state = BusState.STOPPED

        if not already:
            self.logger.info("Market bus cancellation requested")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the loop thread to exit; re-raise an environment fault."""
        if self._thread is not None:
            self._thread.join(timeout)
        if self._fault is not None:
            raise self._fault

    def stop(self, timeout: Optional[float] = None) -> None:
        """Cancel and join."""
        self.cancel()
        self.join(timeout)

    def wait_for_sequence(self, sequence: int, timeout: Optional[float] = None) -> bool:
        """Block until a snapshot with at least this sequence is published."""
        with self._publish_cond:
            return self._publish_cond.wait_for(
                lambda: self._published.sequence >= sequence or self._state == BusState.STOPPED,
                timeout=timeout,
            ) and self._published.sequence >= sequence

    # Producer loop

    def _run(self) -> None:
        try:
            while not self._cancel_event.is_set():
                snapshot = self._tick()
                if snapshot is None:
                    break

                self._notify(snapshot)

                if self._max_ticks is not None and self._ticks_published >= self._max_ticks:
                    self.logger.info("Tick limit reached", ticks=self._ticks_published)
                    break

                try:
                    interval = self._schedule.next_interval(self._rng)
                except Exception as e:
                    raise EnvironmentFaultError(
                        "Failed to draw tick interval", component="schedule"
                    ) from e

                # Wakes early on cancel
                if self._cancel_event.wait(interval):
                    break

        except EnvironmentFaultError as e:
            self._fault = e
            self.logger.critical(
                "Market bus stopped by environment fault",
                component=e.component,
                error=str(e.__cause__ or e),
                exc_info=e
            )

        finally:
            with self._publish_cond:
                self._state = BusState.STOPPED
                self._publish_cond.notify_all()

            self.logger.info(
                "Market bus stopped",
                ticks_published=self._ticks_published,
                last_sequence=self._published.sequence,
                consumer_faults=self._consumer_fault_count
            )

    def _tick(self) -> Optional[MarketSnapshot]:
        """Build and publish the next snapshot. Returns None if cancelled first."""
        previous = self._published

        try:
            quotes = [self._evolver.step(quote, self._rng) for quote in previous.quotes.values()]
        except Exception as e:
            raise EnvironmentFaultError(
                "Random source failed while evolving prices", component="random_source"
            ) from e

        snapshot = MarketSnapshot.from_quotes(previous.sequence + 1, quotes)

        with self._publish_cond:
            if self._cancel_event.is_set():
                return None
            self._published = snapshot
            self._ticks_published += 1
            self._publish_cond.notify_all()

        self.logger.debug(
            "Snapshot published",
            sequence=snapshot.sequence,
            stocks=len(snapshot)
        )
        return snapshot

    def _notify(self, snapshot: MarketSnapshot) -> None:
        for consumer in self._subscribers:
            handler = getattr(consumer, "on_snapshot", consumer)
            try:
                handler(snapshot)
            except Exception as e:
                name = _consumer_name(consumer)
                fault = ConsumerFaultError(
                    f"Consumer {name} failed on snapshot {snapshot.sequence}: {e}",
                    consumer=name,
                    sequence=snapshot.sequence,
                    context={"error_type": type(e).__name__}
                )
                fault.__cause__ = e
                self._consumer_fault_count += 1
                self._last_consumer_fault = fault
                log_consumer_fault(self.logger, name, snapshot.sequence, e)
