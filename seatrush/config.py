import math
import os
import re
import sys
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigError
from .models import RunConfig

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}

# YAML keys -> RunConfig fields
_FIELD_ALIASES = {
    "vus": "concurrency",
    "base_url": "base_url",
    "resource_id": "resource_id",
    "video_id": "resource_id",
    "concurrency": "concurrency",
    "duration": "duration",
    "pacing": "pacing_delay",
    "pacing_delay": "pacing_delay",
    "sleep": "pacing_delay",
    "username": "username",
    "password": "password",
    "timeout": "request_timeout",
    "request_timeout": "request_timeout",
    "iterations": "iterations",
    "seat_limit": "seat_limit",
    "seats": "seat_limit",
    "login_path": "login_path",
    "token_path": "token_path",
    "content_template": "content_template",
}
_DURATION_FIELDS = ("duration", "pacing_delay", "request_timeout")


def _finite(seconds: float, raw) -> float:
    if not math.isfinite(seconds):
        raise ConfigError(f"Invalid duration: {raw!r} (must be a finite number of seconds)")
    return seconds


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parses a time span into seconds.
    Plain numbers are seconds; strings use k6 style units ("500ms", "30s", "1m30s", "2h").
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return _finite(float(value), value)

    text = str(value).strip().lower()
    try:
        return _finite(float(text), value)
    except ValueError:
        pass

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ConfigError(f"Invalid duration: {value!r} (expected e.g. '500ms', '30s', '1m30s')")
    return _finite(total, value)


def _whole_number(name: str, value) -> int:
    """Accepts ints, integral floats and digit strings; rejects bools and fractions."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ConfigError(f"{name} must be a whole number, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def get_default_config_path():
    """Resolves path to the packaged default_run.yaml"""
    if getattr(sys, 'frozen', False):
        return os.path.join(sys._MEIPASS, 'seatrush', 'default_run.yaml')
    return os.path.join(os.path.dirname(__file__), 'default_run.yaml')


def load_config_file(path: str) -> Dict[str, Any]:
    """Reads a YAML run file into RunConfig field names."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    values = {}
    for key, value in data.items():
        field_name = _FIELD_ALIASES.get(str(key))
        if field_name is None:
            raise ConfigError(f"Unknown config key '{key}' in {path}")
        values[field_name] = value
    return values


def build_run_config(file_values: Optional[Dict[str, Any]] = None,
                     overrides: Optional[Dict[str, Any]] = None) -> RunConfig:
    """
    Merges file values with CLI overrides (non-None overrides win)
    and validates the result.
    """
    values = dict(file_values or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    for name in _DURATION_FIELDS:
        if name in values:
            values[name] = parse_duration(values[name])

    for name in ("concurrency", "iterations", "seat_limit"):
        if values.get(name) is not None:
            values[name] = _whole_number(name, values[name])

    if "resource_id" in values:
        values["resource_id"] = str(values["resource_id"])
    if "password" in values and values["password"] is not None:
        values["password"] = str(values["password"])

    missing = [n for n in ("base_url", "resource_id", "concurrency", "duration", "pacing_delay", "username", "password")
               if values.get(n) is None]
    if missing:
        raise ConfigError(f"Missing run settings: {', '.join(missing)}")

    return RunConfig(**values)
