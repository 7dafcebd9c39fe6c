"""Configuration management for procfilter."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from procfilter.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)

DEFAULT_COLUMNS = "pid,name,cpu,mem,rps,wps,read,write"
DEFAULT_SORT = "-cpu"
DEFAULT_INTERVAL = 0.5


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "procfilter" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        whole_word: Default for the whole-word search toggle.
        ignore_case: Default for the ignore-case search toggle.
        use_regex: Default for the regex search toggle.
        colored_output: Whether to use colored terminal output.
        sort: Default sort column; a leading "-" sorts descending.
        columns: Comma-separated default table columns.
        interval: Seconds between the two process samples.
        config_path: Path where config was loaded from (None if defaults).
    """

    whole_word: bool = False
    ignore_case: bool = True
    use_regex: bool = False
    colored_output: bool = True
    sort: str = DEFAULT_SORT
    columns: str = DEFAULT_COLUMNS
    interval: float = DEFAULT_INTERVAL
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.
        """
        warnings: list[str] = []

        if self.interval < 0:
            warnings.append(f"sampling.interval={self.interval} is negative, using 0")
            self.interval = 0.0
        elif self.interval > 10:
            warnings.append(f"sampling.interval={self.interval} is unusually long")

        if not self.columns.strip():
            warnings.append("display.columns is empty, using defaults")
            self.columns = DEFAULT_COLUMNS

        return warnings


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: procfilter init-config"
        )
        return config, warnings + config.validate()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _read_bool(section: dict[str, Any], name: str, key: str, default: bool) -> bool:
    if name not in section:
        return default
    value = section[name]
    if not isinstance(value, bool):
        raise ConfigValidationError(key, value, "must be a boolean")
    return value


def _read_str(section: dict[str, Any], name: str, key: str, default: str) -> str:
    if name not in section:
        return default
    value = section[name]
    if not isinstance(value, str):
        raise ConfigValidationError(key, value, "must be a string")
    return value


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [search] section
    search = data.get("search", {})
    config.whole_word = _read_bool(search, "whole_word", "search.whole_word", config.whole_word)
    config.ignore_case = _read_bool(search, "ignore_case", "search.ignore_case", config.ignore_case)
    config.use_regex = _read_bool(search, "use_regex", "search.use_regex", config.use_regex)

    # Parse [display] section
    display = data.get("display", {})
    config.colored_output = _read_bool(
        display, "colored_output", "display.colored_output", config.colored_output
    )
    config.sort = _read_str(display, "sort", "display.sort", config.sort)
    config.columns = _read_str(display, "columns", "display.columns", config.columns)

    # Parse [sampling] section
    sampling = data.get("sampling", {})
    if "interval" in sampling:
        value = sampling["interval"]
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigValidationError("sampling.interval", value, "must be a number")
        config.interval = float(value)

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "search": {
            "whole_word": config.whole_word,
            "ignore_case": config.ignore_case,
            "use_regex": config.use_regex,
        },
        "display": {
            "colored_output": config.colored_output,
            "sort": config.sort,
            "columns": config.columns,
        },
        "sampling": {
            "interval": config.interval,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
