"""
System configuration.

One YAML file configures the whole tool: analytics defaults, the metrics
cache and logging. Every key is optional; missing keys fall back to the
dataclass defaults below.

Search order for SystemConfig.load() without an explicit path:
1. $TRADEJOURNAL_CONFIG
2. config/system.yaml (relative to the working directory)
3. Built-in defaults

Values may reference environment variables as ``${VAR}`` or
``${VAR:-default}``.
"""

import os
import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from tradejournal.system.log_system import LoggingConfig as LoggerConfig

CONFIG_ENV_VAR = "TRADEJOURNAL_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/system.yaml")

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


@dataclass
class AnalyticsConfig:
    """Defaults applied when the caller does not pass a value."""

    starting_balance: Decimal = Decimal("10000")
    risk_free_rate: Decimal = Decimal("0.02")
    trading_days_per_year: int = 252
    group_by: str = "strategy"
    group_sort: str = "total_pnl"

    def __post_init__(self) -> None:
        # YAML yields floats/ints; keep money exact
        self.starting_balance = Decimal(str(self.starting_balance))
        self.risk_free_rate = Decimal(str(self.risk_free_rate))
        self.trading_days_per_year = int(self.trading_days_per_year)


@dataclass
class CacheConfig:
    """Metrics cache settings."""

    enabled: bool = True
    ttl_seconds: int = 300
    max_entries: int = 100

    def __post_init__(self) -> None:
        # Env-substituted values arrive as strings
        self.ttl_seconds = int(self.ttl_seconds)
        self.max_entries = int(self.max_entries)


@dataclass
class LoggingConfig:
    """Logging section of system.yaml."""

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = False
    file_path: str = "logs/tradejournal.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        """Convert to the pydantic model consumed by LoggerFactory."""
        return LoggerConfig(
            level=self.level,  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration."""

    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, merged over the defaults.

        Args:
            path: Explicit config file. A missing file gives the defaults.

        Raises:
            ValueError: If the file does not contain a YAML mapping
            yaml.YAMLError: If the file is not valid YAML
        """
        config_path = cls._resolve_path(path)
        if config_path is None or not config_path.exists():
            return cls()

        with open(config_path) as f:
            raw = yaml.safe_load(f)

        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping, got {type(raw).__name__}")

        return cls._from_dict(_substitute_env_vars(raw))

    @staticmethod
    def _resolve_path(path: Path | str | None) -> Path | None:
        if path is not None:
            return Path(path)
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        if DEFAULT_CONFIG_PATH.exists():
            return DEFAULT_CONFIG_PATH
        return None

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        defaults = {
            "analytics": AnalyticsConfig().__dict__,
            "cache": CacheConfig().__dict__,
            "logging": LoggingConfig().__dict__,
        }
        unknown_sections = set(data) - set(defaults)
        if unknown_sections:
            raise ValueError(f"Unknown config sections: {sorted(unknown_sections)}")

        # An empty section ("cache:") parses as None
        data = {section: values or {} for section, values in data.items()}
        for section, values in data.items():
            if not isinstance(values, dict):
                raise ValueError(f"Config section '{section}' must be a mapping")

        merged = _deep_merge(defaults, data)
        for section, values in merged.items():
            unknown_keys = set(values) - set(defaults[section])
            if unknown_keys:
                raise ValueError(f"Unknown keys in '{section}': {sorted(unknown_keys)}")

        return cls(
            analytics=AnalyticsConfig(**merged["analytics"]),
            cache=CacheConfig(**merged["cache"]),
            logging=LoggingConfig(**merged["logging"]),
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """
    Replace ``${VAR}`` and ``${VAR:-default}`` in strings, recursively.

    An undefined variable without a default keeps its placeholder.
    """
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if not isinstance(value, str):
        return value

    def replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        if name in os.environ:
            return os.environ[name]
        if default is not None:
            return default
        return match.group(0)

    return _ENV_PATTERN.sub(replace, value)


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """
    Get the process-wide configuration, loading it on first use.

    An explicit ``path`` always loads that file and replaces the cached one.
    """
    global _system_config
    if path is not None or _system_config is None:
        _system_config = SystemConfig.load(path)
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Discard the cached configuration and load it again."""
    global _system_config
    _system_config = None
    return get_system_config(path)
