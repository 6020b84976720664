"""Tests for the market bus tick loop."""

import threading
import time

import numpy as np
import pytest

from portval_app.config.defaults import SimulationParams
from portval_app.errors import ConsumerFaultError, EnvironmentFaultError
from portval_app.market.bus import BusState, MarketBus
from portval_app.market.schedule import TickSchedule
from portval_app.models.market import MarketSnapshot


class BrokenSource:
    """Random source that fails on first use."""

    def standard_normal(self):
        raise RuntimeError("entropy pool unavailable")

    def uniform(self, low, high):
        raise RuntimeError("entropy pool unavailable")


class Recorder:
    """Consumer that records every snapshot it sees."""

    def __init__(self, name="recorder", log=None):
        self.name = name
        self.snapshots = []
        self.log = log

    def on_snapshot(self, snapshot):
        self.snapshots.append(snapshot)
        if self.log is not None:
            self.log.append((self.name, snapshot.sequence))


@pytest.fixture
def initial_snapshot(aapl, tsla):
    return MarketSnapshot.from_quotes(0, [aapl, tsla])


def make_bus(initial_snapshot, params, **kwargs):
    return MarketBus(initial_snapshot, params=params, **kwargs)


class TestMarketBusLifecycle:
    """State transitions and cancellation."""

    def test_initial_state(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params)
        assert bus.state == BusState.IDLE
        assert bus.current() is initial_snapshot
        assert bus.ticks_published == 0

    def test_runs_until_tick_limit(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params, max_ticks=5)
        bus.start()
        bus.join(timeout=5)

        assert bus.state == BusState.STOPPED
        assert bus.ticks_published == 5
        assert bus.current().sequence == 5

    def test_start_twice_raises(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params, max_ticks=1)
        bus.start()
        with pytest.raises(RuntimeError):
            bus.start()
        bus.stop(timeout=5)

    def test_cancel_before_start(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params)
        bus.cancel()
        assert bus.state == BusState.STOPPED
        with pytest.raises(RuntimeError):
            bus.start()

    def test_cancel_is_idempotent(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params)
        bus.start()
        bus.wait_for_sequence(2, timeout=5)
        bus.cancel()
        bus.cancel()
        bus.join(timeout=5)
        bus.cancel()
        assert bus.state == BusState.STOPPED
        assert bus.cancelled

    def test_no_publication_after_cancel(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params)
        recorder = Recorder()
        bus.subscribe(recorder)
        bus.start()
        assert bus.wait_for_sequence(3, timeout=5)

        bus.cancel()
        sequence_at_cancel = bus.current().sequence
        time.sleep(0.05)
        bus.join(timeout=5)

        assert bus.current().sequence == sequence_at_cancel
        assert recorder.snapshots[-1].sequence <= sequence_at_cancel

    def test_cancel_interrupts_long_wait(self, initial_snapshot):
        params = SimulationParams(tick_interval_seconds=60.0)
        bus = make_bus(initial_snapshot, params)
        bus.start()
        assert bus.wait_for_sequence(1, timeout=5)

        started = time.monotonic()
        bus.stop(timeout=5)
        assert time.monotonic() - started < 2.0
        assert bus.current().sequence == 1

    def test_wait_for_sequence_returns_false_when_stopped_early(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params, max_ticks=2)
        bus.start()
        assert bus.wait_for_sequence(10, timeout=5) is False
        bus.join(timeout=5)


class TestMarketBusPublication:
    """Snapshot contents, ordering and immutability."""

    def test_sequences_strictly_increasing_without_gaps(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params, max_ticks=50)
        recorder = Recorder()
        bus.subscribe(recorder)
        bus.start()
        bus.join(timeout=10)

        sequences = [s.sequence for s in recorder.snapshots]
        assert sequences == list(range(1, 51))

    def test_every_tick_is_a_new_snapshot(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params, max_ticks=10)
        recorder = Recorder()
        bus.subscribe(recorder)
        bus.start()
        bus.join(timeout=5)

        ids = {id(s) for s in recorder.snapshots}
        assert len(ids) == 10
        assert initial_snapshot.price_of("AAPL") == 150.0
        assert initial_snapshot.sequence == 0

    def test_published_snapshots_are_never_mutated(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params, max_ticks=20)
        captured = []
        bus.subscribe(lambda s: captured.append((s, dict(s.quotes))))
        bus.start()
        bus.join(timeout=5)

        for snapshot, contents in captured:
            assert dict(snapshot.quotes) == contents
            with pytest.raises(TypeError):
                snapshot.quotes["AAPL"] = None

    def test_subscribers_notified_in_registration_order(self, initial_snapshot, fast_params):
        log = []
        bus = make_bus(initial_snapshot, fast_params, max_ticks=3)
        bus.subscribe(Recorder("first", log))
        bus.subscribe(Recorder("second", log))
        bus.start()
        bus.join(timeout=5)

        assert log == [
            ("first", 1), ("second", 1),
            ("first", 2), ("second", 2),
            ("first", 3), ("second", 3),
        ]

    def test_one_draw_per_stock_per_tick(self, initial_snapshot, fast_params, zero_source):
        bus = make_bus(initial_snapshot, fast_params, rng=zero_source, max_ticks=4)
        bus.start()
        bus.join(timeout=5)
        assert zero_source.calls == 4 * len(initial_snapshot)

    def test_zero_draws_give_drift_only_prices(self, initial_snapshot, fast_params, zero_source):
        bus = make_bus(initial_snapshot, fast_params, rng=zero_source, max_ticks=1)
        bus.start()
        bus.join(timeout=5)

        fraction = fast_params.time_step_seconds / fast_params.horizon_seconds
        assert bus.current().price_of("AAPL") == pytest.approx(150.0 * (1 + 0.15 * fraction))
        assert bus.current().price_of("TSLA") == pytest.approx(400.0 * (1 + 0.35 * fraction))

    def test_seeded_runs_are_reproducible(self, initial_snapshot, fast_params):
        results = []
        for _ in range(2):
            bus = make_bus(initial_snapshot, fast_params, rng=np.random.default_rng(5), max_ticks=5)
            bus.start()
            bus.join(timeout=5)
            results.append(dict(bus.current().quotes))
        assert results[0] == results[1]

    def test_prices_stay_within_bounds(self, initial_snapshot):
        params = SimulationParams(tick_interval_seconds=0.0, horizon_seconds=1.0, seed=3)
        bus = make_bus(initial_snapshot, params, max_ticks=200)
        recorder = Recorder()
        bus.subscribe(recorder)
        bus.start()
        bus.join(timeout=10)

        for snapshot in recorder.snapshots:
            for quote in snapshot.quotes.values():
                assert 0.5 <= quote.price <= 1000.0

    def test_readers_see_whole_snapshots(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params, max_ticks=200)
        seen = []
        done = threading.Event()

        def reader():
            last = None
            while not done.is_set():
                snapshot = bus.current()
                if snapshot is not last:
                    seen.append((snapshot.sequence, set(snapshot.quotes)))
                    last = snapshot
                time.sleep(0)

        thread = threading.Thread(target=reader)
        thread.start()
        bus.start()
        bus.join(timeout=10)
        done.set()
        thread.join(timeout=5)

        sequences = [sequence for sequence, _ in seen]
        assert sequences == sorted(sequences)
        assert all(tickers == {"AAPL", "TSLA"} for _, tickers in seen)


class TestMarketBusFaults:
    """Consumer and environment fault handling."""

    def test_consumer_fault_is_isolated(self, initial_snapshot, fast_params):
        def failing(snapshot):
            raise ValueError("boom")

        recorder = Recorder()
        bus = make_bus(initial_snapshot, fast_params, max_ticks=5)
        bus.subscribe(failing)
        bus.subscribe(recorder)
        bus.start()
        bus.join(timeout=5)

        assert [s.sequence for s in recorder.snapshots] == [1, 2, 3, 4, 5]
        assert bus.consumer_fault_count == 5
        last = bus.last_consumer_fault
        assert isinstance(last, ConsumerFaultError)
        assert last.sequence == 5
        assert isinstance(last.__cause__, ValueError)
        assert bus.fault is None

    def test_repeated_consumer_faults_keep_count_and_latest(self, initial_snapshot, fast_params):
        seen = []

        def always_failing(snapshot):
            seen.append(snapshot.sequence)
            raise OSError("disk full")

        bus = make_bus(initial_snapshot, fast_params, max_ticks=500)
        bus.subscribe(always_failing)
        bus.start()
        bus.join(timeout=10)

        assert len(seen) == 500
        assert bus.consumer_fault_count == 500
        assert bus.last_consumer_fault.sequence == 500

    def test_random_source_failure_is_fatal(self, initial_snapshot, fast_params):
        recorder = Recorder()
        bus = make_bus(initial_snapshot, fast_params, rng=BrokenSource())
        bus.subscribe(recorder)
        bus.start()

        with pytest.raises(EnvironmentFaultError) as exc_info:
            bus.join(timeout=5)

        assert exc_info.value.component == "random_source"
        assert bus.state == BusState.STOPPED
        assert bus.current() is initial_snapshot
        assert recorder.snapshots == []

    def test_subscribe_rejects_non_consumers(self, initial_snapshot, fast_params):
        bus = make_bus(initial_snapshot, fast_params)
        with pytest.raises(TypeError):
            bus.subscribe(object())


class TestTickSchedule:
    """Fixed and randomized cadence."""

    def test_fixed_interval(self):
        schedule = TickSchedule(interval_seconds=2.0)
        assert not schedule.randomized
        assert schedule.next_interval(np.random.default_rng(0)) == 2.0

    def test_randomized_interval_within_bounds(self):
        schedule = TickSchedule(interval_seconds=0.5, max_interval_seconds=1.5)
        rng = np.random.default_rng(0)
        draws = [schedule.next_interval(rng) for _ in range(500)]
        assert schedule.randomized
        assert all(0.5 <= d <= 1.5 for d in draws)
        assert len(set(draws)) > 1

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            TickSchedule(interval_seconds=2.0, max_interval_seconds=1.0)

    def test_from_params(self):
        params = SimulationParams(tick_interval_seconds=0.2, tick_interval_max_seconds=0.4)
        schedule = TickSchedule.from_params(params)
        assert schedule.interval_seconds == 0.2
        assert schedule.max_interval_seconds == 0.4
