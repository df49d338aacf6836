from __future__ import annotations

"""Runtime helpers for working with environment-backed configuration.

Values are read from the process environment first and fall back to
``.env``-style files (``./.env`` then ``~/.lockwatch.env``).
"""


import os
from pathlib import Path
from typing import Optional, Sequence

from .errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".lockwatch.env")

_DEFAULT_VALUES: dict[str, str] | None = None


def _load_default_values() -> dict[str, str]:
    """Load configuration defaults from dotenv files, first file wins per key."""
    from .runtime_helpers import DotenvLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is not None:
        return _DEFAULT_VALUES

    defaults: dict[str, str] = {}
    for path in _DOTENV_CANDIDATES:
        for key, value in DotenvLoader.load_from_file(path).items():
            defaults.setdefault(key, value)

    _DEFAULT_VALUES = defaults
    return defaults


def _default_value(name: str) -> Optional[str]:
    return _load_default_values().get(name)


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
) -> str | None:
    """Fetch an environment variable as a stripped, non-blank string."""

    value = os.getenv(name)
    if value is not None:
        value = value.strip()

    if not value:
        configured_default = _default_value(name)
        if configured_default is not None:
            value = configured_default.strip()

    if not value:
        if required:
            raise ConfigurationError(f"Required environment variable {name!r} is not set")
        return or_value
    return value


def env_int(name: str, or_value: int | None = None, *, required: bool = False) -> int | None:
    """Fetch an environment variable and coerce it to ``int``."""

    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError(f"Required environment variable {name!r} is not set")
        return or_value
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Environment variable {name!r} must be an integer (got {raw!r})") from exc


def env_bool(name: str, or_value: bool | None = None, *, required: bool = False) -> bool | None:
    """Fetch an environment variable and coerce it to ``bool``."""

    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError(f"Required environment variable {name!r} is not set")
        return or_value

    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Environment variable {name!r} must be a boolean (allowed: {sorted(_TRUE_VALUES | _FALSE_VALUES)}, got {raw!r})"
    )


def env_list(
    name: str,
    *,
    or_value: Sequence[str] | None = None,
    separator: str = ",",
) -> tuple[str, ...] | None:
    """Fetch a delimited, deduplicated list from the environment."""
    from .runtime_helpers import ListNormalizer

    raw = env_str(name)
    if raw is None:
        if or_value is None:
            return None
        return tuple(or_value)

    items = ListNormalizer.split_and_normalize(raw, separator)
    if not items:
        raise ConfigurationError(f"Environment variable {name!r} must contain at least one value")
    return ListNormalizer.deduplicate_preserving_order(items)


def env_milliseconds(name: str, or_value: int | None = None) -> int | None:
    """Convenience wrapper for durations stored as whole milliseconds."""

    value = env_int(name, or_value=or_value)
    if value is None:
        return None
    if value < 0:
        raise ConfigurationError(f"Environment variable {name!r} must be non-negative (got {value})")
    return value
