"""Configuration checks run before any query is executed."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .config import ConfigurationError, WidgetConfig
from .errors import AxisMismatch, ConfigError, MissingConfig, MissingFacet

FACET_KEYWORD = "FACET"

ConfigLike = Union[WidgetConfig, Mapping[str, Any]]


@dataclass(frozen=True)
class ValidationResult:
    error: Optional[ConfigError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is None:
            return {"ok": True, "error": None, "message": None, "placeholder": None}
        return {
            "ok": False,
            "error": type(self.error).__name__,
            "message": self.error.message,
            "placeholder": self.error.placeholder,
        }


def as_config(config: ConfigLike) -> WidgetConfig:
    if isinstance(config, WidgetConfig):
        return config
    return WidgetConfig.from_mapping(config)


def missing_values(config: WidgetConfig) -> list[str]:
    values = {
        "data_source_id": config.data_source_id,
        "query": config.query,
        "x_field": config.x_field,
        "y_field": config.y_field,
    }
    return [name for name, value in values.items() if not value]


def validate_config(config: ConfigLike) -> ValidationResult:
    """Check presence, axis/query consistency and faceting, stopping at the first failure."""
    try:
        cfg = as_config(config)
    except ConfigurationError:
        # an id that is not a number cannot name a data source
        return ValidationResult(MissingConfig(["data_source_id"]))

    missing = missing_values(cfg)
    if missing:
        return ValidationResult(MissingConfig(missing))
    if cfg.x_field not in cfg.query:
        return ValidationResult(AxisMismatch("x"))
    if cfg.y_field not in cfg.query:
        return ValidationResult(AxisMismatch("y"))
    if FACET_KEYWORD not in cfg.query.upper():
        return ValidationResult(MissingFacet())
    return ValidationResult()


def ensure_valid(config: ConfigLike) -> WidgetConfig:
    """Return the normalised config or raise the first validation error."""
    result = validate_config(config)
    if result.error is not None:
        raise result.error
    return as_config(config)


__all__ = ["FACET_KEYWORD", "ValidationResult", "as_config", "validate_config", "ensure_valid", "missing_values"]
