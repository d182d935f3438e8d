"""User settings management for FlightAdvisor.

This package provides persistent user settings storage for the weather
source and the default decision thresholds.
"""

from flightadvisor.settings.advisor_settings import (
    DEFAULT_API_BASE_URL,
    AdvisorSettings,
    get_advisor_settings,
    reset_advisor_settings,
)

__all__ = [
    "DEFAULT_API_BASE_URL",
    "AdvisorSettings",
    "get_advisor_settings",
    "reset_advisor_settings",
]
