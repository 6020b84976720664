"""Default configuration parameters for the portfolio valuation system."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SimulationParams:
    """Market simulation and tick cadence parameters."""
    # Tick cadence
    tick_interval_seconds: float = 1.0               # Fixed wait, or lower bound when randomized
    tick_interval_max_seconds: Optional[float] = None  # Upper bound enables randomized waits

    # Growth model normalization
    time_step_seconds: float = 1.0                   # Delta t per tick
    horizon_seconds: float = 7257600.0               # Total horizon T (12 weeks)

    # Hard price bounds
    price_floor: float = 0.5
    price_ceiling: float = 1000.0

    # Random source
    seed: Optional[int] = None

    @property
    def randomized_interval(self) -> bool:
        return self.tick_interval_max_seconds is not None


@dataclass(frozen=True)
class PricingParams:
    """Option pricing parameters."""
    risk_free_rate: float = 0.02
    contract_multiplier: int = 100
    days_per_year: float = 365.0


@dataclass(frozen=True)
class ReportParams:
    """Valuation report delivery parameters."""
    format: str = "pretty"                           # pretty, json
    output_path: Optional[str] = None                # JSONL file in addition to stdout
    include_timestamp: bool = False                  # Stamp stdout JSON lines with delivery time


@dataclass(frozen=True)
class DataParams:
    """Reference data and position file locations, relative to the project root."""
    reference_path: str = "data/reference.sql"
    positions_path: str = "data/portfolio.csv"


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    simulation: SimulationParams
    pricing: PricingParams
    report: ReportParams
    data: DataParams


def get_default_config() -> AppConfig:
    """Get the default configuration instance."""
    return AppConfig(
        simulation=SimulationParams(),
        pricing=PricingParams(),
        report=ReportParams(),
        data=DataParams(),
    )
