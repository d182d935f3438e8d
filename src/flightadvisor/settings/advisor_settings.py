"""Flight advisor settings management.

This module manages the weather source configuration and the default
decision thresholds used when no aircraft is selected.

Settings are stored in ~/.flightadvisor/settings.json under the "advisor" key.

Typical usage:
    from flightadvisor.settings import get_advisor_settings

    settings = get_advisor_settings()
    settings.set_threshold("max_crosswind_kt", 12)
    settings.save()
"""

import json
import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from flightadvisor.core.logging_system import get_logger
from flightadvisor.services.decision.models import DecisionThresholds
from flightadvisor.services.weather.weather_service import (
    DEFAULT_API_BASE_URL,
    DEFAULT_USER_AGENT,
)

logger = get_logger(__name__)

THRESHOLD_NAMES = tuple(f.name for f in fields(DecisionThresholds))

# Thresholds with these suffixes are whole knots or feet
INTEGER_SUFFIXES = ("_kt", "_ft")


def coerce_threshold(name: str, value: Any) -> float | int:
    """Convert a threshold value read from settings to its numeric type.

    Args:
        name: DecisionThresholds field name.
        value: Number or numeric string.

    Returns:
        int for knot and foot thresholds, float otherwise.

    Raises:
        ValueError: If the value is not a finite number.
        TypeError: If the value is not a number or string.
    """
    if isinstance(value, bool):
        raise TypeError(f"Threshold {name} must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Threshold {name} must be finite, got {value!r}")
    if name.endswith(INTEGER_SUFFIXES):
        return int(round(number))
    return number


@dataclass
class AdvisorSettings:
    """Flight advisor settings with persistence.

    Attributes:
        api_base_url: Aviation weather API base URL.
        api_timeout: Timeout for API requests in seconds.
        cache_duration: How long fetched weather stays cached, in seconds.
        user_agent: User-Agent header sent to the weather API.
        thresholds: Default decision thresholds.
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    api_timeout: float = 10.0
    cache_duration: float = 300.0
    user_agent: str = DEFAULT_USER_AGENT
    thresholds: DecisionThresholds = field(default_factory=DecisionThresholds)
    _settings_path: Path = field(
        default_factory=lambda: Path.home() / ".flightadvisor" / "settings.json"
    )
    _dirty: bool = field(default=False, repr=False)

    def set_api_timeout(self, timeout: float) -> None:
        """Set the API request timeout.

        Args:
            timeout: Timeout in seconds; must be positive.
        """
        if timeout > 0:
            self.api_timeout = float(timeout)
            self._dirty = True

    def set_cache_duration(self, duration: float) -> None:
        """Set how long fetched weather stays cached.

        Args:
            duration: Cache duration in seconds (0 disables caching).
        """
        if duration >= 0:
            self.cache_duration = float(duration)
            self._dirty = True

    def set_threshold(self, name: str, value: float) -> None:
        """Override one decision threshold.

        Args:
            name: DecisionThresholds field name (e.g., "max_crosswind_kt").
            value: New limit.

        Raises:
            KeyError: If the name is not a known threshold.
            ValueError: If the value is not a finite number.
        """
        if name not in THRESHOLD_NAMES:
            raise KeyError(f"Unknown threshold: {name}")
        self.thresholds = DecisionThresholds(
            **{**asdict(self.thresholds), name: coerce_threshold(name, value)}
        )
        self._dirty = True

    def load(self, path: Path | str | None = None) -> bool:
        """Load settings from file.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.flightadvisor/settings.json.

        Returns:
            True if loaded successfully, False otherwise.
        """
        if path is not None:
            self._settings_path = Path(path)

        if not self._settings_path.exists():
            logger.info("No settings file found, using advisor defaults")
            return False

        try:
            with open(self._settings_path, encoding="utf-8") as f:
                data = json.load(f)

            advisor_data = data.get("advisor", {})
            api_timeout = float(advisor_data.get("api_timeout", 10.0))
            cache_duration = float(advisor_data.get("cache_duration", 300.0))

            threshold_data = advisor_data.get("thresholds", {})
            thresholds = DecisionThresholds(
                **{
                    k: coerce_threshold(k, v)
                    for k, v in threshold_data.items()
                    if k in THRESHOLD_NAMES
                }
            )

            self.api_base_url = advisor_data.get("api_base_url", DEFAULT_API_BASE_URL)
            self.api_timeout = api_timeout
            self.cache_duration = cache_duration
            self.user_agent = advisor_data.get("user_agent", DEFAULT_USER_AGENT)
            self.thresholds = thresholds

            self._dirty = False
            logger.info("Loaded advisor settings from %s", self._settings_path)
            return True

        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error("Failed to load advisor settings: %s", e)
            return False

    def save(self, path: Path | str | None = None) -> bool:
        """Save settings to file.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.flightadvisor/settings.json.

        Returns:
            True if saved successfully, False otherwise.
        """
        if path is not None:
            self._settings_path = Path(path)

        try:
            # Create directory if needed
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)

            # Load existing data to preserve other settings
            existing_data: dict[str, Any] = {}
            if self._settings_path.exists():
                with open(self._settings_path, encoding="utf-8") as f:
                    existing_data = json.load(f)

            existing_data["advisor"] = self.to_dict()

            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(existing_data, f, indent=2)

            self._dirty = False
            logger.info("Saved advisor settings to %s", self._settings_path)
            return True

        except (OSError, ValueError, TypeError) as e:
            logger.error("Failed to save advisor settings: %s", e)
            return False

    @property
    def is_dirty(self) -> bool:
        """Check if settings have unsaved changes."""
        return self._dirty

    def reset_to_defaults(self) -> None:
        """Reset all settings to defaults."""
        self.api_base_url = DEFAULT_API_BASE_URL
        self.api_timeout = 10.0
        self.cache_duration = 300.0
        self.user_agent = DEFAULT_USER_AGENT
        self.thresholds = DecisionThresholds()
        self._dirty = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary representation of settings.
        """
        return {
            "api_base_url": self.api_base_url,
            "api_timeout": self.api_timeout,
            "cache_duration": self.cache_duration,
            "user_agent": self.user_agent,
            "thresholds": asdict(self.thresholds),
        }


# Global singleton instance
_global_settings: AdvisorSettings | None = None


def get_advisor_settings() -> AdvisorSettings:
    """Get the global advisor settings singleton.

    Loads settings from disk on first access.

    Returns:
        AdvisorSettings instance.
    """
    global _global_settings
    if _global_settings is None:
        _global_settings = AdvisorSettings()
        _global_settings.load()
    return _global_settings


def reset_advisor_settings() -> None:
    """Reset the global advisor settings singleton.

    Forces reload on next access.
    """
    global _global_settings
    _global_settings = None
