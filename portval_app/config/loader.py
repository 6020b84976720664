"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from ..errors import ConfigurationError
from .defaults import (
    AppConfig,
    DataParams,
    PricingParams,
    ReportParams,
    SimulationParams,
    get_default_config,
)
from .validation import ConfigValidator

logger = structlog.get_logger(__name__)

_SECTIONS = {
    "simulation": SimulationParams,
    "pricing": PricingParams,
    "report": ReportParams,
    "data": DataParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: AppConfig

    CONFIG_FILE = "simulation.yaml"

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from the YAML config file, if present."""
        config_file = self.config_dir / self.CONFIG_FILE

        if not config_file.exists():
            return {}

        try:
            with open(config_file) as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Cannot parse {config_file}: {e}",
                context={"path": str(config_file)}
            ) from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{config_file} must contain a mapping at top level",
                context={"path": str(config_file)}
            )

        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. simulation.yaml in the config directory
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def build(self, overrides: Optional[dict[str, Any]] = None) -> AppConfig:
        """Merge, validate and return a typed configuration."""
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            logger.error("Configuration validation failed", errors=error_msgs)
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(error_msgs),
                context={"errors": error_msgs}
            )

        unknown_sections = set(merged) - set(_SECTIONS)
        if unknown_sections:
            raise ConfigurationError(
                f"Unknown configuration section(s): {', '.join(sorted(unknown_sections))}",
                context={"unknown": sorted(unknown_sections)}
            )

        sections = {}
        for name, params_cls in _SECTIONS.items():
            values = merged.get(name) or {}
            if not isinstance(values, dict):
                raise ConfigurationError(
                    f"Section '{name}' must be a mapping, got {type(values).__name__}",
                    context={"section": name}
                )
            known = {f.name for f in fields(params_cls)}
            unknown = set(values) - known
            if unknown:
                raise ConfigurationError(
                    f"Unknown {name} option(s): {', '.join(sorted(unknown))}",
                    context={"section": name, "unknown": sorted(unknown)}
                )
            sections[name] = params_cls(**values)

        return AppConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
