"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

REPORT_FORMATS = ("pretty", "json")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_simulation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate market simulation parameters."""
        errors = []

        for name in ("tick_interval_seconds", "time_step_seconds", "horizon_seconds"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        # Randomized cadence upper bound
        if params.get("tick_interval_max_seconds") is not None:
            value = params["tick_interval_max_seconds"]
            lower = params.get("tick_interval_seconds")
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="tick_interval_max_seconds",
                    message="Must be a positive number or null",
                    value=value
                ))
            elif _is_number(lower) and value < lower:
                errors.append(ValidationError(
                    field="tick_interval_max_seconds",
                    message="Must not be less than tick_interval_seconds",
                    value=value
                ))

        floor = params.get("price_floor")
        ceiling = params.get("price_ceiling")
        if "price_floor" in params and (not _is_number(floor) or floor <= 0):
            errors.append(ValidationError(
                field="price_floor",
                message="Must be a positive number",
                value=floor
            ))
        elif "price_ceiling" in params and (not _is_number(ceiling) or ceiling <= (floor or 0)):
            errors.append(ValidationError(
                field="price_ceiling",
                message="Must be a number greater than price_floor",
                value=ceiling
            ))

        if params.get("seed") is not None:
            value = params["seed"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="seed",
                    message="Must be a non-negative integer or null",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_pricing_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate option pricing parameters."""
        errors = []

        if "risk_free_rate" in params:
            value = params["risk_free_rate"]
            if not _is_number(value):
                errors.append(ValidationError(
                    field="risk_free_rate",
                    message="Must be a number",
                    value=value
                ))

        if "contract_multiplier" in params:
            value = params["contract_multiplier"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="contract_multiplier",
                    message="Must be a positive integer",
                    value=value
                ))

        if "days_per_year" in params:
            value = params["days_per_year"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="days_per_year",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_report_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate report delivery parameters."""
        errors = []

        if "format" in params and params["format"] not in REPORT_FORMATS:
            errors.append(ValidationError(
                field="format",
                message=f"Must be one of {', '.join(REPORT_FORMATS)}",
                value=params["format"]
            ))

        if "include_timestamp" in params and not isinstance(params["include_timestamp"], bool):
            errors.append(ValidationError(
                field="include_timestamp",
                message="Must be true or false",
                value=params["include_timestamp"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if isinstance(config.get("simulation"), dict):
            errors.extend(ConfigValidator.validate_simulation_params(config["simulation"]))

        if isinstance(config.get("pricing"), dict):
            errors.extend(ConfigValidator.validate_pricing_params(config["pricing"]))

        if isinstance(config.get("report"), dict):
            errors.extend(ConfigValidator.validate_report_params(config["report"]))

        return errors
