from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


@dataclass
class ConfigFieldError:
    """A single validation error for one configuration field.

    Attributes:
        key:     The config key that failed validation.
        value:   The offending value.
        message: Human-readable explanation of what is wrong.
    """
    key: str
    value: Any
    message: str


def default_config() -> dict[str, Any]:
    """Returns the built-in default configuration."""
    return {
        "envelope_resolution": 1000,
        "reduction_channel": 0,
        "zoom_step": 1.2,
        "time_update_interval_ms": 100,
        "viewport_width": 800,
        "fetch_timeout_seconds": 30.0,
        "log_level": "INFO",
    }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(cfg: dict[str, Any]) -> list[ConfigFieldError]:
    """Check types and ranges of every known key. Unknown keys are ignored."""
    errors: list[ConfigFieldError] = []

    for key in ("envelope_resolution", "viewport_width", "time_update_interval_ms"):
        value = cfg.get(key)
        if not _is_int(value) or value <= 0:
            errors.append(ConfigFieldError(key, value, "must be a positive integer"))

    channel = cfg.get("reduction_channel")
    if not _is_int(channel) or channel < 0:
        errors.append(ConfigFieldError(
            "reduction_channel", channel, "must be a non-negative integer"))

    step = cfg.get("zoom_step")
    if not _is_number(step) or step <= 1.0:
        errors.append(ConfigFieldError("zoom_step", step, "must be a number greater than 1"))

    timeout = cfg.get("fetch_timeout_seconds")
    if not _is_number(timeout) or timeout <= 0:
        errors.append(ConfigFieldError(
            "fetch_timeout_seconds", timeout, "must be a positive number"))

    level = cfg.get("log_level")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        errors.append(ConfigFieldError(
            "log_level", level, f"must be one of {', '.join(LOG_LEVELS)}"))

    return errors


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load a JSON config file merged over the defaults.

    Returns the defaults when *path* is None. Raises ConfigError when the
    file cannot be read, is not a JSON object, or fails validation.
    """
    cfg = default_config()
    if path is None:
        return cfg

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file must contain a JSON object, got {type(data).__name__}")

    unknown = set(data) - set(cfg)
    if unknown:
        log.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
    cfg.update({k: v for k, v in data.items() if k in cfg})

    errors = validate_config(cfg)
    if errors:
        lines = [f"  {e.key}={e.value!r}: {e.message}" for e in errors]
        raise ConfigError("Invalid configuration:\n" + "\n".join(lines))

    log.debug("Loaded config from %s", path)
    return cfg
