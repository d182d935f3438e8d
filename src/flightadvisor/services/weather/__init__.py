"""Weather services for FlightAdvisor.

Provides METAR/TAF fetching and normalization into typed records.
"""

from flightadvisor.services.weather.models import (
    CloudLayer,
    Forecast,
    ForecastPeriod,
    Observation,
    SkyCondition,
    WeatherPhenomenon,
    Wind,
)
from flightadvisor.services.weather.normalizer import (
    forecast_from_record,
    observation_from_record,
    parse_visibility,
    parse_weather_phenomena,
)
from flightadvisor.services.weather.weather_service import WeatherService

__all__ = [
    "CloudLayer",
    "Forecast",
    "ForecastPeriod",
    "Observation",
    "SkyCondition",
    "WeatherPhenomenon",
    "WeatherService",
    "Wind",
    "forecast_from_record",
    "observation_from_record",
    "parse_visibility",
    "parse_weather_phenomena",
]
