"""Loading and validating the supervisor's TOML configuration."""

from __future__ import annotations

import logging
import shlex
import tomllib
from dataclasses import dataclass
from datetime import datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = 10.0
DEFAULT_STOP_TIMEOUT = 60.0


class ConfigError(ValueError):
    """Raised when the config file is missing or malformed."""


@dataclass(frozen=True)
class WardenConfig:
    server_command: List[str]
    start_time: time
    end_time: time
    discord_webhook_url: Optional[str] = None
    check_interval: float = DEFAULT_CHECK_INTERVAL
    stop_timeout: float = DEFAULT_STOP_TIMEOUT
    source: Optional[Path] = None


def parse_clock(value: Any, *, key: str) -> time:
    """Parse an ``HH:MM`` string into a :class:`datetime.time`."""

    if not isinstance(value, str):
        raise ConfigError(f"{key} must be an HH:MM string, got {value!r}")
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError as exc:
        raise ConfigError(f"Invalid {key} format: {value!r} (expected HH:MM)") from exc


def _parse_command(value: Any) -> List[str]:
    if isinstance(value, str):
        argv = shlex.split(value)
    elif isinstance(value, list) and all(isinstance(part, str) for part in value):
        argv = list(value)
    else:
        raise ConfigError("server_command must be a string or a list of strings")
    if not argv:
        raise ConfigError("server_command is empty")
    return argv


def _parse_seconds(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number of seconds, got {value!r}")
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return float(value)


def config_from_mapping(data: Dict[str, Any], *, source: Optional[Path] = None) -> WardenConfig:
    """Build a :class:`WardenConfig` from already-parsed TOML data."""

    for key in ("server_command", "start_time", "end_time"):
        if key not in data:
            raise ConfigError(f"Missing required key: {key}")

    webhook = data.get("discord_webhook_url") or None
    if webhook is not None and not isinstance(webhook, str):
        raise ConfigError("discord_webhook_url must be a string")

    return WardenConfig(
        server_command=_parse_command(data["server_command"]),
        start_time=parse_clock(data["start_time"], key="start_time"),
        end_time=parse_clock(data["end_time"], key="end_time"),
        discord_webhook_url=webhook,
        check_interval=_parse_seconds(data, "check_interval", DEFAULT_CHECK_INTERVAL),
        stop_timeout=_parse_seconds(data, "stop_timeout", DEFAULT_STOP_TIMEOUT),
        source=source,
    )


def load_config(path: Path) -> WardenConfig:
    """Read ``path`` and return the validated configuration."""

    path = Path(path).expanduser()
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Failed to read {path}: file not found") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Failed to parse {path}: not valid UTF-8 ({exc})") from exc

    config = config_from_mapping(data, source=path.resolve())
    logger.debug("Loaded config from %s: %s", path, config)
    return config
