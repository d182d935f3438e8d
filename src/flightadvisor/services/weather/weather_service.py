"""Weather service for aviation weather data.

Fetches METAR, TAF and airport records from the aviationweather.gov JSON
API. Synchronous calls use requests, asynchronous calls use aiohttp; both
share one time-bounded cache per station.
"""

import json
import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import aiohttp
import requests

from flightadvisor.core.logging_system import get_logger
from flightadvisor.errors import WeatherServiceError
from flightadvisor.services.weather.models import Forecast, Observation
from flightadvisor.services.weather.normalizer import (
    forecast_from_record,
    observation_from_record,
)

if TYPE_CHECKING:
    from flightadvisor.settings.advisor_settings import AdvisorSettings

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://aviationweather.gov"
DEFAULT_USER_AGENT = "FlightAdvisor/1.0"

METAR_PATH = "/api/data/metar"
TAF_PATH = "/api/data/taf"
AIRPORT_PATH = "/api/data/airport"

# The API answers 204 when a station has nothing to report
NO_CONTENT = 204


def _first_record(payload: Any) -> Any:
    """The API returns a list of records; the first one is the latest."""
    if isinstance(payload, list):
        return payload[0] if payload else None
    return payload


class WeatherService:
    """Service for fetching aviation weather and airport data.

    Network failures raise WeatherServiceError; a station that simply has
    no data yields None.

    Attributes:
        base_url: API base URL.
        cache_duration: How long to cache results (default 5 minutes).
        api_timeout: Timeout for API requests in seconds.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        cache_duration: float = 300.0,
        api_timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize weather service.

        Args:
            base_url: API base URL.
            cache_duration: Cache duration in seconds (default 5 minutes).
            api_timeout: Timeout for API requests in seconds.
            user_agent: User-Agent header value.
        """
        self.base_url = base_url.rstrip("/")
        self.cache_duration = cache_duration
        self.api_timeout = api_timeout
        self.user_agent = user_agent

        self._cache: dict[tuple[str, str], tuple[Any, datetime]] = {}
        self._cache_lock = threading.Lock()
        self._session: aiohttp.ClientSession | None = None

    @classmethod
    def from_settings(cls, settings: "AdvisorSettings") -> "WeatherService":
        """Create a service configured from advisor settings."""
        return cls(
            base_url=settings.api_base_url,
            cache_duration=settings.cache_duration,
            api_timeout=settings.api_timeout,
            user_agent=settings.user_agent,
        )

    # Synchronous API

    def get_observation_sync(self, icao: str) -> Observation | None:
        """Get the latest observation for a station.

        Args:
            icao: Station ICAO code (e.g., "KPAO").

        Returns:
            Observation, or None if the station reported nothing.

        Raises:
            WeatherServiceError: If the API cannot be reached or read.
        """
        icao = icao.strip().upper()
        cached = self._get_cached("metar", icao)
        if cached is not None:
            return cached

        payload = self._fetch_json_sync(METAR_PATH, {"ids": icao, "format": "json", "hours": 0})
        observation = observation_from_record(_first_record(payload))
        self._store("metar", icao, observation)
        return observation

    def get_forecast_sync(self, icao: str) -> Forecast | None:
        """Get the current terminal forecast for a station.

        Raises:
            WeatherServiceError: If the API cannot be reached or read.
        """
        icao = icao.strip().upper()
        cached = self._get_cached("taf", icao)
        if cached is not None:
            return cached

        payload = self._fetch_json_sync(TAF_PATH, {"ids": icao, "format": "json", "hours": 0})
        forecast = forecast_from_record(_first_record(payload))
        self._store("taf", icao, forecast)
        return forecast

    def get_airport_sync(self, icao: str) -> Any:
        """Get the raw airport payload (including runways) for a station.

        Returns:
            Decoded JSON payload; None when the airport is unknown.

        Raises:
            WeatherServiceError: If the API cannot be reached or read.
        """
        icao = icao.strip().upper()
        cached = self._get_cached("airport", icao)
        if cached is not None:
            return cached

        payload = self._fetch_json_sync(AIRPORT_PATH, {"ids": icao, "format": "json"})
        self._store("airport", icao, payload)
        return payload

    # Asynchronous API

    async def get_observation(self, icao: str) -> Observation | None:
        """Asynchronous version of get_observation_sync."""
        icao = icao.strip().upper()
        cached = self._get_cached("metar", icao)
        if cached is not None:
            return cached

        payload = await self._fetch_json(METAR_PATH, {"ids": icao, "format": "json", "hours": 0})
        observation = observation_from_record(_first_record(payload))
        self._store("metar", icao, observation)
        return observation

    async def get_forecast(self, icao: str) -> Forecast | None:
        """Asynchronous version of get_forecast_sync."""
        icao = icao.strip().upper()
        cached = self._get_cached("taf", icao)
        if cached is not None:
            return cached

        payload = await self._fetch_json(TAF_PATH, {"ids": icao, "format": "json", "hours": 0})
        forecast = forecast_from_record(_first_record(payload))
        self._store("taf", icao, forecast)
        return forecast

    async def get_airport(self, icao: str) -> Any:
        """Asynchronous version of get_airport_sync."""
        icao = icao.strip().upper()
        cached = self._get_cached("airport", icao)
        if cached is not None:
            return cached

        payload = await self._fetch_json(AIRPORT_PATH, {"ids": icao, "format": "json"})
        self._store("airport", icao, payload)
        return payload

    # Transport

    def _fetch_json_sync(self, path: str, params: dict[str, Any]) -> Any:
        """Fetch and decode a JSON document using requests.

        Args:
            path: API path.
            params: Query parameters.

        Returns:
            Decoded JSON, or None for an empty response.

        Raises:
            WeatherServiceError: On network errors, bad status or bad JSON.
        """
        url = f"{self.base_url}{path}"
        try:
            response = requests.get(
                url,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.api_timeout,
            )
        except requests.Timeout as e:
            raise WeatherServiceError(f"Request timed out: {url}") from e
        except requests.RequestException as e:
            raise WeatherServiceError(f"Network error fetching {url}: {e}") from e

        return self._decode(url, response.status_code, response.text)

    async def _fetch_json(self, path: str, params: dict[str, Any]) -> Any:
        """Fetch and decode a JSON document using aiohttp.

        Raises:
            WeatherServiceError: On network errors, bad status or bad JSON.
        """
        url = f"{self.base_url}{path}"
        try:
            if self._session is None:
                self._session = aiohttp.ClientSession(headers={"User-Agent": self.user_agent})

            async with self._session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.api_timeout),
            ) as response:
                text = await response.text()
                status = response.status
        except TimeoutError as e:
            raise WeatherServiceError(f"Request timed out: {url}") from e
        except aiohttp.ClientError as e:
            raise WeatherServiceError(f"Network error fetching {url}: {e}") from e

        return self._decode(url, status, text)

    @staticmethod
    def _decode(url: str, status: int, text: str) -> Any:
        """Turn a response status and body into decoded JSON."""
        if status == NO_CONTENT or not text.strip():
            logger.debug("Empty response from %s", url)
            return None
        if status != 200:
            raise WeatherServiceError(f"Weather API returned status {status} for {url}")
        try:
            payload = json.loads(text)
        except ValueError as e:
            raise WeatherServiceError(f"Invalid JSON format from {url}: {e}") from e
        logger.info("Fetched %s", url)
        return payload

    # Cache

    def _get_cached(self, kind: str, icao: str) -> Any:
        """Get cached data if still valid.

        Args:
            kind: Data kind ("metar", "taf", "airport").
            icao: Station ICAO code.

        Returns:
            Cached value, or None if not cached or expired.
        """
        with self._cache_lock:
            entry = self._cache.get((kind, icao))
        if entry is None:
            return None

        value, cached_time = entry
        age = (datetime.now(UTC) - cached_time).total_seconds()
        if age < self.cache_duration:
            return value
        return None

    def _store(self, kind: str, icao: str, value: Any) -> None:
        """Cache a fetched value; "no data" results are not cached."""
        if value is None:
            return
        with self._cache_lock:
            self._cache[(kind, icao)] = (value, datetime.now(UTC))

    def invalidate_cache(self, icao: str | None = None) -> None:
        """Invalidate cached data.

        Args:
            icao: Station ICAO code to invalidate, or None to clear all.
        """
        with self._cache_lock:
            if icao is None:
                self._cache.clear()
                logger.debug("Cleared all weather cache")
                return
            icao = icao.strip().upper()
            for key in [k for k in self._cache if k[1] == icao]:
                del self._cache[key]
        logger.debug("Cleared weather cache for %s", icao)

    def get_cache_info(self) -> dict[str, Any]:
        """Get information about cached data.

        Returns:
            Dictionary with cache statistics.
        """
        now = datetime.now(UTC)
        entries = []
        with self._cache_lock:
            items = list(self._cache.items())
        for (kind, icao), (_value, cached_time) in items:
            age = (now - cached_time).total_seconds()
            entries.append(
                {
                    "icao": icao,
                    "kind": kind,
                    "age_seconds": age,
                    "expires_in": max(0, self.cache_duration - age),
                }
            )
        return {
            "count": len(items),
            "cache_duration": self.cache_duration,
            "entries": entries,
        }

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def __del__(self) -> None:
        """Cleanup on deletion."""
        session = getattr(self, "_session", None)
        if session and not session.closed:
            # Can't await in __del__, just warn
            logger.warning("WeatherService session not properly closed")
