"""Widget configuration loading (YAML/JSON with ``${ENV}`` expansion)."""
from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv

from .alignment import CONFLICT_POLICIES, CONFLICT_ERROR

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "widget.yaml"
CONFIG_ENV_VAR = "ALTAXIS_CONFIG"

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z0-9_]+)\}")

_KEY_ALIASES: Dict[str, tuple[str, ...]] = {
    "data_source_id": ("data_source_id", "dataSourceId", "account_id", "accountId"),
    "query": ("query", "nrql"),
    "x_field": ("x_field", "xField", "x_axis", "xAxis"),
    "y_field": ("y_field", "yField", "y_axis", "yAxis"),
}


class ConfigurationError(RuntimeError):
    """Raised when the configuration file is missing or invalid."""


@dataclass(slots=True)
class WidgetConfig:
    data_source_id: Optional[int] = None
    query: str = ""
    x_field: str = ""
    y_field: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "WidgetConfig":
        """Build from snake_case or the widget's camelCase prop names."""
        values: Dict[str, Any] = {}
        for attr, aliases in _KEY_ALIASES.items():
            for alias in aliases:
                if alias in raw and raw[alias] is not None:
                    values[attr] = raw[alias]
                    break
        return cls(
            data_source_id=_coerce_source_id(values.get("data_source_id")),
            query=str(values.get("query", "")),
            x_field=str(values.get("x_field", "")),
            y_field=str(values.get("y_field", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataSourceId": self.data_source_id,
            "query": self.query,
            "xField": self.x_field,
            "yField": self.y_field,
        }


@dataclass(slots=True)
class PollingConfig:
    interval_s: int = 60
    sync_to_wall_clock: bool = True
    sync_tolerance_s: float = 0.5
    sync_max_drift_s: float = 3.0


@dataclass(slots=True)
class WidgetSettings:
    widget: WidgetConfig = field(default_factory=WidgetConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    results_path: Optional[Path] = None
    locale: str = "en"
    conflict_policy: str = CONFLICT_ERROR
    source: Optional[Path] = None


def _coerce_source_id(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ConfigurationError("data source id must be a number")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"data source id must be a number, got {value!r}") from exc


def _expand_env_values(value: object, *, source: Optional[Path] = None) -> object:
    if isinstance(value, dict):
        return {key: _expand_env_values(val, source=source) for key, val in value.items()}
    if isinstance(value, list):
        return [_expand_env_values(item, source=source) for item in value]
    if isinstance(value, str):
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            if var_name not in os.environ:
                location = f" in config '{source}'" if source else ""
                raise ConfigurationError(f"Environment variable '{var_name}' referenced{location} is not set")
            return os.environ[var_name]

        return _ENV_VAR_PATTERN.sub(replacer, value)
    return value


def _load_file(path: Path) -> Dict[str, object]:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text) or {}
        elif suffix == ".json":
            data = json.loads(text)
        else:
            raise ConfigurationError("Unsupported configuration format; use YAML or JSON")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Invalid configuration format in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {path} must be a mapping")
    return data


def _resolve_path(value: str, base_dir: Path) -> Path:
    candidate = Path(value).expanduser()
    if candidate.is_absolute():
        return candidate
    return (base_dir / candidate).resolve()


def settings_from_mapping(raw: Mapping[str, Any], *, base_dir: Optional[Path] = None) -> WidgetSettings:
    base_dir = base_dir or Path.cwd()
    widget_raw = raw.get("widget", {}) or {}
    polling_raw = raw.get("polling", {}) or {}
    executor_raw = raw.get("executor", {}) or {}
    display_raw = raw.get("display", {}) or {}
    transform_raw = raw.get("transform", {}) or {}
    for name, block in (
        ("widget", widget_raw),
        ("polling", polling_raw),
        ("executor", executor_raw),
        ("display", display_raw),
        ("transform", transform_raw),
    ):
        if not isinstance(block, Mapping):
            raise ConfigurationError(f"`{name}` section must be a mapping")

    try:
        polling = PollingConfig(**polling_raw)
        polling.interval_s = int(polling.interval_s)
        polling.sync_tolerance_s = float(polling.sync_tolerance_s)
        polling.sync_max_drift_s = float(polling.sync_max_drift_s)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid polling section: {exc}") from exc
    if polling.interval_s <= 0:
        raise ConfigurationError("polling.interval_s must be positive")

    conflict_policy = str(transform_raw.get("conflict_policy", CONFLICT_ERROR))
    if conflict_policy not in CONFLICT_POLICIES:
        raise ConfigurationError(
            f"transform.conflict_policy must be one of {sorted(CONFLICT_POLICIES)}, got {conflict_policy!r}"
        )

    results_path = executor_raw.get("results_path")
    return WidgetSettings(
        widget=WidgetConfig.from_mapping(widget_raw),
        polling=polling,
        results_path=_resolve_path(str(results_path), base_dir) if results_path else None,
        locale=str(display_raw.get("locale", "en")),
        conflict_policy=conflict_policy,
    )


def load_settings(path: Optional[Path | str] = None) -> WidgetSettings:
    candidate_paths: List[Path] = []
    if path:
        candidate_paths.append(Path(path))
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        candidate_paths.append(Path(env_path))
    candidate_paths.append(DEFAULT_CONFIG_PATH)

    for candidate in candidate_paths:
        if candidate.exists():
            config_path = candidate
            break
    else:
        tried = ", ".join(str(candidate) for candidate in candidate_paths)
        raise ConfigurationError(f"No configuration file found (tried {tried})")

    config_dir = config_path.resolve().parent
    load_dotenv(config_dir / ".env")
    load_dotenv()

    raw = _expand_env_values(_load_file(config_path), source=config_path)
    settings = settings_from_mapping(raw, base_dir=config_dir)
    settings.source = config_path
    return settings


__all__ = [
    "ConfigurationError",
    "WidgetConfig",
    "PollingConfig",
    "WidgetSettings",
    "DEFAULT_CONFIG_PATH",
    "load_settings",
    "settings_from_mapping",
]
