"""Position loading from a ``ticker,quantity`` CSV file."""

import csv
from collections.abc import Iterable
from pathlib import Path
from typing import Union

import structlog

from ..errors import ConfigurationError, DataGapError
from ..models.securities import Position
from .reference import SecurityReference

logger = structlog.get_logger(__name__)


def load_positions_csv(path: Union[str, Path]) -> list[tuple[str, int]]:
    """
    Read position rows in file order.

    The first line is a header. Blank lines are ignored.

    Raises:
        ConfigurationError: file missing or a quantity is not an integer
    """
    path = Path(path)
    rows: list[tuple[str, int]] = []

    try:
        with open(path, newline="") as f:
            reader = csv.reader(f)
            next(reader, None)
            for line_no, row in enumerate(reader, start=2):
                if not row or not "".join(row).strip():
                    continue
                if len(row) < 2:
                    raise ConfigurationError(
                        f"{path.name}:{line_no}: expected ticker,quantity",
                        context={"path": str(path), "line": line_no, "row": row}
                    )
                ticker, quantity = row[0].strip(), row[1].strip()
                try:
                    rows.append((ticker, int(quantity)))
                except ValueError as e:
                    raise ConfigurationError(
                        f"{path.name}:{line_no}: invalid quantity {quantity!r}",
                        context={"path": str(path), "line": line_no, "row": row}
                    ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read positions file: {e}",
            context={"path": str(path)}
        ) from e

    logger.info("Position file loaded", path=str(path), rows=len(rows))
    return rows


def resolve_positions(
    rows: Iterable[tuple[str, int]],
    reference: SecurityReference,
) -> list[Position]:
    """Attach securities to position rows, dropping tickers with no reference data."""
    positions = []
    skipped = []

    for ticker, quantity in rows:
        try:
            positions.append(_resolve_one(ticker, quantity, reference))
        except DataGapError as e:
            skipped.append(e.ticker)
            logger.warning(
                "Position skipped - ticker not in reference data",
                ticker=e.ticker,
                quantity=quantity
            )

    logger.info("Positions resolved", positions=len(positions), skipped=len(skipped))
    return positions


def _resolve_one(ticker: str, quantity: int, reference: SecurityReference) -> Position:
    security = reference.get(ticker)
    if security is None:
        raise DataGapError(ticker, context={"quantity": quantity})
    return Position(security=security, quantity=quantity)
