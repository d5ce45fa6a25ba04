"""Configuration for the demo runner.

Values are resolved from, in increasing priority: ``DEFAULT_CONFIG``,
``RESUMABLE_*`` environment variables (``fetch.timeout`` is read from
``RESUMABLE_FETCH_TIMEOUT``), and explicit overrides.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from typing import Any

from frozendict import frozendict

from resumable.errors import ConfigError

ENV_PREFIX = "RESUMABLE_"

DEFAULT_CONFIG: dict[str, Any] = {
    "clock.virtual": False,
    "fetch.enabled": True,
    "fetch.url": "https://api.github.com/repos/rust-lang/rust",
    "fetch.timeout": 10.0,
    "log.level": "WARNING",
    "narration.preview": 100,
}

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def env_var_name(key: str) -> str:
    return ENV_PREFIX + key.replace(".", "_").upper()


def _coerce(key: str, raw: Any) -> Any:
    default = DEFAULT_CONFIG[key]
    if not isinstance(raw, str) or isinstance(default, str):
        return raw
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{env_var_name(key)} must be a boolean, got {raw!r}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def _validate(config: Mapping[str, Any]) -> None:
    timeout = config["fetch.timeout"]
    if not isinstance(timeout, int | float) or not 0 < timeout < math.inf:
        raise ValueError(f"fetch.timeout must be a positive finite number, got {timeout!r}")
    level = config["log.level"]
    if str(level).upper() not in LOG_LEVELS:
        raise ValueError(f"log.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")


def load_config(
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> frozendict[str, Any]:
    """Merge defaults, environment and overrides into an immutable mapping.

    Args:
        overrides: Dotted keys from ``DEFAULT_CONFIG``; ``None`` values are ignored.
        environ: Environment to read; defaults to ``os.environ``.

    Raises:
        ConfigError: An override names a key that is not in ``DEFAULT_CONFIG``.
        ValueError: A value cannot be coerced, or the timeout or log level is invalid.
    """
    env = os.environ if environ is None else environ
    config = dict(DEFAULT_CONFIG)
    for key in DEFAULT_CONFIG:
        name = env_var_name(key)
        if name in env:
            config[key] = _coerce(key, env[name])
    for key, value in (overrides or {}).items():
        if key not in DEFAULT_CONFIG:
            raise ConfigError(key)
        if value is not None:
            config[key] = _coerce(key, value)
    _validate(config)
    return frozendict(config)


__all__ = [
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "LOG_LEVELS",
    "env_var_name",
    "load_config",
]
