"""
Configuration management for the bubble registry.

Reads configuration from an optional .env file and environment variables
with sensible defaults. Every constructed or updated configuration is
validated; invalid values raise ValueError instead of producing
undefined scoring.
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from dotenv import load_dotenv

# Default .env file location (relative to the working directory)
DEFAULT_ENV_FILE = Path("bubbles.env")

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _load_env_file() -> None:
    """Load environment variables from .env file if it exists."""
    env_file = os.getenv("BUBBLES_ENV_FILE", str(DEFAULT_ENV_FILE))
    env_path = Path(env_file)

    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be an integer)")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be a number)")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid {name}: {raw} (must be one of {_TRUE_VALUES + _FALSE_VALUES})")


@dataclass(frozen=True)
class WeightedSelectionConfig:
    """Coefficients of the selection weight. Non-negative; need not sum to 1."""

    recency_weight: float = 0.3
    popularity_weight: float = 0.4
    type_balance_weight: float = 0.2
    random_weight: float = 0.1

    def validate(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"Invalid {f.name}: {value!r} (must be a number)")
            if value != value or value < 0:  # NaN or negative
                raise ValueError(f"Invalid {f.name}: {value} (must be >= 0)")


WeightedUpdate = Union[WeightedSelectionConfig, Mapping[str, float]]


@dataclass(frozen=True)
class RegistryConfig:
    """Registry configuration loaded from defaults, .env file and environment variables."""

    # Capacity
    max_displayed_items: int = 25

    # Milliseconds an item stays out of rotation, measured from its last display
    rotation_cooldown_ms: float = 30000.0

    # Strategies
    enable_weighted_selection: bool = True
    enable_rotation_strategy: bool = True
    weighted: WeightedSelectionConfig = field(default_factory=WeightedSelectionConfig)

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        self.validate()

    @classmethod
    def load_config(cls) -> "RegistryConfig":
        """
        Load configuration from environment variables.

        Returns:
            RegistryConfig instance with loaded values

        Raises:
            ValueError: If configuration is invalid
        """
        # Load .env file first (if it exists)
        _load_env_file()

        defaults = WeightedSelectionConfig()
        weighted = WeightedSelectionConfig(
            recency_weight=_env_float("BUBBLES_RECENCY_WEIGHT", defaults.recency_weight),
            popularity_weight=_env_float("BUBBLES_POPULARITY_WEIGHT", defaults.popularity_weight),
            type_balance_weight=_env_float("BUBBLES_TYPE_BALANCE_WEIGHT", defaults.type_balance_weight),
            random_weight=_env_float("BUBBLES_RANDOM_WEIGHT", defaults.random_weight),
        )

        config = cls(
            max_displayed_items=_env_int("BUBBLES_MAX_DISPLAYED_ITEMS", cls.max_displayed_items),
            rotation_cooldown_ms=_env_float("BUBBLES_ROTATION_COOLDOWN_MS", cls.rotation_cooldown_ms),
            enable_weighted_selection=_env_bool("BUBBLES_ENABLE_WEIGHTED_SELECTION", cls.enable_weighted_selection),
            enable_rotation_strategy=_env_bool("BUBBLES_ENABLE_ROTATION_STRATEGY", cls.enable_rotation_strategy),
            weighted=weighted,
            log_level=os.getenv("BUBBLES_LOG_LEVEL", cls.log_level).upper(),
        )

        logger.debug(f"[CONFIG] Loaded registry config: {config}")
        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if isinstance(self.max_displayed_items, bool) or not isinstance(self.max_displayed_items, int):
            raise ValueError(f"Invalid max_displayed_items: {self.max_displayed_items!r} (must be an integer)")
        if self.max_displayed_items <= 0:
            raise ValueError(f"Invalid max_displayed_items: {self.max_displayed_items} (must be > 0)")

        cooldown = self.rotation_cooldown_ms
        if isinstance(cooldown, bool) or not isinstance(cooldown, (int, float)) or cooldown != cooldown:
            raise ValueError(f"Invalid rotation_cooldown_ms: {cooldown!r} (must be a number)")
        if cooldown < 0:
            raise ValueError(f"Invalid rotation_cooldown_ms: {cooldown} (must be >= 0)")

        if not isinstance(self.weighted, WeightedSelectionConfig):
            raise ValueError(f"Invalid weighted config: {self.weighted!r}")
        self.weighted.validate()

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")

    def with_updates(self, weighted: Optional[WeightedUpdate] = None, **changes: Any) -> "RegistryConfig":
        """
        Return a validated copy with the given fields replaced.

        Args:
            weighted: Replacement WeightedSelectionConfig, or a mapping of
                      coefficient names merged into the current one
            **changes: Top-level fields to replace

        Raises:
            ValueError: If a field name is unknown or the result is invalid
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown config field(s): {', '.join(sorted(unknown))}")

        if weighted is not None:
            if isinstance(weighted, WeightedSelectionConfig):
                changes["weighted"] = weighted
            else:
                weight_fields = {f.name for f in fields(WeightedSelectionConfig)}
                unknown_weights = set(weighted) - weight_fields
                if unknown_weights:
                    raise ValueError(f"Unknown weighted field(s): {', '.join(sorted(unknown_weights))}")
                changes["weighted"] = replace(self.weighted, **dict(weighted))

        # replace() re-runs __post_init__, which validates
        return replace(self, **changes)
