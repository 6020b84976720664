"""Configuration for valuation report delivery mechanisms."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .defaults import ReportParams


class DeliveryMethod(Enum):
    """Supported report delivery methods."""
    FILE_OUTPUT = "file_output"
    STDOUT = "stdout"


@dataclass(frozen=True)
class FileDeliveryConfig:
    """Configuration for JSONL file delivery."""
    output_path: str
    append_mode: bool = True
    create_dirs: bool = True


@dataclass(frozen=True)
class StdoutDeliveryConfig:
    """Configuration for stdout delivery."""
    format: str = "pretty"  # pretty, json
    include_timestamp: bool = False


@dataclass(frozen=True)
class DeliveryDestination:
    """Single report delivery destination."""
    name: str
    method: DeliveryMethod
    config: Any  # FileDeliveryConfig | StdoutDeliveryConfig
    enabled: bool = True


def destinations_from_params(params: ReportParams) -> list[DeliveryDestination]:
    """Stdout always; a JSONL file as well when output_path is set."""
    destinations = [
        DeliveryDestination(
            name="stdout",
            method=DeliveryMethod.STDOUT,
            config=StdoutDeliveryConfig(
                format=params.format,
                include_timestamp=params.include_timestamp,
            ),
        )
    ]

    if params.output_path:
        destinations.append(DeliveryDestination(
            name="file",
            method=DeliveryMethod.FILE_OUTPUT,
            config=FileDeliveryConfig(output_path=params.output_path),
        ))

    return destinations
