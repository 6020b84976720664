"""Command-line entry point for the portfolio valuation simulation."""

from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from . import __version__
from .config.loader import ConfigLoader
from .engine import PortfolioValuationEngine
from .errors import ConfigurationError, EnvironmentFaultError
from .logging.config import configure_logging

app = typer.Typer(help="Simulated portfolio valuation")
# Reports own stdout
console = Console(stderr=True)


@app.command()
def version() -> None:
    console.print(f"v{__version__}")


@app.command()
def run(
    config_dir: Optional[Path] = typer.Option(None, help="Directory holding simulation.yaml"),
    duration: Optional[float] = typer.Option(None, help="Seconds to run (default: until Ctrl+C)"),
    ticks: Optional[int] = typer.Option(None, help="Stop after this many market updates"),
    interval: Optional[float] = typer.Option(None, help="Seconds between market updates"),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible prices"),
    json_output: bool = typer.Option(False, "--json", help="Print reports as JSON lines"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """
    Run the market simulation and print a valuation report on every tick.
    """
    configure_logging(level=log_level)

    overrides: dict[str, Any] = {"simulation": {}, "report": {}}
    if interval is not None:
        overrides["simulation"]["tick_interval_seconds"] = interval
    if seed is not None:
        overrides["simulation"]["seed"] = seed
    if json_output:
        overrides["report"]["format"] = "json"

    try:
        config = ConfigLoader.create(config_dir).build(overrides)
        engine = PortfolioValuationEngine.from_config(config, max_ticks=ticks)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=2) from e

    console.print("[green]Market simulation started. Press Ctrl+C to stop.[/green]")

    try:
        engine.run(duration)
    except EnvironmentFaultError as e:
        console.print(f"[red]Simulation stopped:[/red] {e}")
        raise typer.Exit(code=1) from e


def main() -> None:
    app()
