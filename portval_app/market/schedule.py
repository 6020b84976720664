"""Tick cadence: a fixed wait, or a uniform draw between two bounds."""

from dataclasses import dataclass
from typing import Any, Optional

from ..config.defaults import SimulationParams


@dataclass(frozen=True)
class TickSchedule:
    """Inter-tick wait policy."""
    interval_seconds: float = 1.0
    max_interval_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        if self.interval_seconds < 0:
            raise ValueError("Tick interval cannot be negative")
        if self.max_interval_seconds is not None and self.max_interval_seconds < self.interval_seconds:
            raise ValueError("Maximum tick interval must not be below the minimum")

    @classmethod
    def from_params(cls, params: SimulationParams) -> "TickSchedule":
        return cls(
            interval_seconds=params.tick_interval_seconds,
            max_interval_seconds=params.tick_interval_max_seconds,
        )

    @property
    def randomized(self) -> bool:
        return self.max_interval_seconds is not None

    def next_interval(self, rng: Any) -> float:
        """Seconds to wait before the next tick. Randomized mode draws from rng."""
        if self.max_interval_seconds is None:
            return self.interval_seconds
        return float(rng.uniform(self.interval_seconds, self.max_interval_seconds))
