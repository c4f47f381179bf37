"""Shared configuration utilities."""

import json
import logging
import math
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

import yaml

T = TypeVar('T')

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def load_yaml(path: Path) -> Any:
    """Load YAML file and return its contents."""
    with open(path) as f:
        return yaml.safe_load(f)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def parse_int(raw: str | None, fallback: int, low: int, high: int) -> int:
    """Parse an integer setting, clamping it into [low, high]."""
    try:
        parsed = int((raw or "").strip())
    except ValueError:
        return fallback
    return int(clamp(parsed, low, high))


def parse_float(raw: str | None, fallback: float, low: float, high: float) -> float:
    """Parse a float setting, clamping it into [low, high]."""
    try:
        parsed = float((raw or "").strip())
    except ValueError:
        return fallback
    if not math.isfinite(parsed):
        return fallback
    return clamp(parsed, low, high)


def parse_bool(raw: str | None, fallback: bool) -> bool:
    if not raw:
        return fallback
    normalized = raw.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    return fallback


def parse_csv(raw: str | None, fallback: list[str]) -> list[str]:
    """Split a comma-separated setting, falling back when nothing is left."""
    if not raw:
        return list(fallback)
    values = [part.strip() for part in raw.split(",") if part.strip()]
    return values or list(fallback)


def parse_weight_map(
    raw: str | None,
    defaults: dict[str, float],
    low: float,
    high: float,
) -> dict[str, float]:
    """Merge a JSON object of weights over defaults.

    Keys are trimmed and lowercased, values clamped into [low, high]. Invalid
    JSON, non-object payloads and non-numeric values are ignored.
    """
    weights = dict(defaults)
    if not raw:
        return weights

    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring invalid JSON weight map: %s", raw)
        return weights

    if not isinstance(parsed, dict):
        logger.warning("Ignoring non-object weight map: %s", raw)
        return weights

    for key, value in parsed.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if not math.isfinite(value):
            continue
        normalized_key = str(key).strip().lower()
        if not normalized_key:
            continue
        weights[normalized_key] = clamp(float(value), low, high)
    return weights


class ConfigSingleton(Generic[T]):
    """Generic config singleton manager.

    Provides get/set/reset pattern for managing a global config instance.

    Example:
        >>> def load_my_config() -> MyConfig:
        ...     return MyConfig(...)
        >>> _manager = ConfigSingleton(load_my_config)
        >>> get_config = _manager.get
        >>> set_config = _manager.set
        >>> reset_config = _manager.reset
    """

    def __init__(self, loader: Callable[[], T] | None = None):
        self._config: T | None = None
        self._loader = loader

    def get(self) -> T:
        """Get the config, loading it lazily if needed."""
        if self._config is None:
            if self._loader is None:
                raise RuntimeError("No config loaded and no loader set")
            self._config = self._loader()
        return self._config

    def set(self, config: T) -> None:
        """Set the config directly."""
        self._config = config

    def reset(self) -> None:
        """Reset the config, forcing reload on next get()."""
        self._config = None
