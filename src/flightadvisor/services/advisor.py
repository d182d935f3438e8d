"""Flight advisor pipeline.

Fetches current conditions for an airport, resolves its runways, picks the
runway in use and evaluates the flight:

    fetch (observation, forecast, airport) -> resolve runways -> evaluate

Typical usage:
    from flightadvisor.services.advisor import FlightAdvisor, FlightRequest

    advisor = FlightAdvisor()
    briefing = advisor.brief(FlightRequest("KPAO", aircraft_id="c172"))
    print(briefing.decision.verdict)
"""

import asyncio
from dataclasses import dataclass

from flightadvisor.aircraft.catalog import AircraftCatalog, AircraftLimits
from flightadvisor.core.logging_system import get_logger
from flightadvisor.errors import CannotEvaluateError, WeatherServiceError
from flightadvisor.services.decision import DecisionEngine, FlightDecision, FlightType
from flightadvisor.services.runway import (
    AUTO_SELECT,
    ResolverState,
    RunwayEntry,
    RunwayResolver,
    runway_from_designator,
)
from flightadvisor.services.weather.models import Forecast, Observation, Wind
from flightadvisor.services.weather.weather_service import WeatherService
from flightadvisor.settings.advisor_settings import AdvisorSettings, get_advisor_settings

logger = get_logger(__name__)

ICAO_LENGTH = 4


def normalize_icao(icao: str) -> str:
    """Validate and normalize an ICAO identifier.

    Args:
        icao: Identifier as typed (e.g., " kpao").

    Returns:
        Upper-case identifier.

    Raises:
        CannotEvaluateError: If the identifier is not exactly 4 characters.
    """
    code = (icao or "").strip().upper()
    if len(code) != ICAO_LENGTH:
        raise CannotEvaluateError(f"Invalid ICAO code: {icao!r}")
    return code


@dataclass(frozen=True)
class FlightRequest:
    """What the pilot wants evaluated.

    Attributes:
        icao: Departure airport ICAO code.
        runway: Runway designator, or "auto" for wind-based selection.
        aircraft_id: Catalog id of the aircraft; None uses default limits.
        flight_type: Purpose of the flight.
    """

    icao: str
    runway: str = AUTO_SELECT
    aircraft_id: str | None = None
    flight_type: FlightType = FlightType.RECREATIONAL


@dataclass(frozen=True)
class Briefing:
    """Everything gathered for one flight request.

    Attributes:
        icao: Airport ICAO code.
        observation: Current observation.
        forecast: Terminal forecast, if one was available.
        runways: Runway directions known for the airport.
        runway: Runway used for wind components, if any.
        auto_selected: True if the runway was chosen from the wind.
        runway_state: Outcome of the runway lookup.
        aircraft: Aircraft limits used, if an aircraft was selected.
        decision: The flight decision.
    """

    icao: str
    observation: Observation
    forecast: Forecast | None
    runways: tuple[RunwayEntry, ...]
    runway: RunwayEntry | None
    auto_selected: bool
    runway_state: ResolverState
    aircraft: AircraftLimits | None
    decision: FlightDecision


def choose_runway(
    designator: str, resolver: RunwayResolver, wind: Wind
) -> tuple[RunwayEntry | None, bool]:
    """Pick the runway to evaluate against.

    Args:
        designator: Requested designator, or "auto".
        resolver: Resolver holding the airport's runways.
        wind: Reported wind.

    Returns:
        Tuple of (runway or None, whether it was auto-selected).
    """
    wanted = (designator or AUTO_SELECT).strip()
    if wanted.lower() != AUTO_SELECT:
        runway = resolver.find(wanted)
        if runway is None:
            logger.debug("Runway %s not in airport data, using designator heading", wanted)
            runway = runway_from_designator(wanted)
        return runway, False

    if not resolver.runways:
        return None, True
    if wind.direction is not None and wind.speed:
        return resolver.best_runway(wind.direction, wind.speed), True
    return resolver.runways[0], True


class FlightAdvisor:
    """Go/no-go advisor for one flight at a time.

    Attributes:
        weather_service: Source of observations, forecasts and airport data.
        catalog: Aircraft catalog.
        engine: Decision engine.
    """

    def __init__(
        self,
        weather_service: WeatherService | None = None,
        catalog: AircraftCatalog | None = None,
        engine: DecisionEngine | None = None,
        settings: AdvisorSettings | None = None,
    ) -> None:
        """Initialize flight advisor.

        Args:
            weather_service: Weather client; built from settings if omitted.
            catalog: Aircraft catalog; the bundled one if omitted.
            engine: Decision engine; uses the settings thresholds if omitted.
            settings: Advisor settings; the global settings if omitted.
        """
        if settings is None:
            settings = get_advisor_settings()
        if weather_service is None:
            weather_service = WeatherService.from_settings(settings)
        self.weather_service = weather_service
        self.catalog = catalog if catalog is not None else AircraftCatalog()
        self.engine = engine if engine is not None else DecisionEngine(settings.thresholds)

    def _lookup_aircraft(self, aircraft_id: str | None) -> AircraftLimits | None:
        if not aircraft_id:
            return None
        return self.catalog.get(aircraft_id)

    def brief(self, request: FlightRequest) -> Briefing:
        """Fetch conditions and evaluate a flight.

        Args:
            request: Flight request.

        Returns:
            Briefing with the decision.

        Raises:
            CannotEvaluateError: If the ICAO code is invalid, the weather source
                is unavailable or the station has no current observation.
            UnknownAircraftError: If the aircraft id is not in the catalog.
        """
        icao = normalize_icao(request.icao)
        aircraft = self._lookup_aircraft(request.aircraft_id)

        try:
            observation = self.weather_service.get_observation_sync(icao)
        except WeatherServiceError as e:
            raise CannotEvaluateError(f"Weather unavailable for {icao}: {e}") from e

        try:
            forecast = self.weather_service.get_forecast_sync(icao)
        except WeatherServiceError as e:
            logger.warning("Forecast unavailable for %s: %s", icao, e)
            forecast = None

        resolver = RunwayResolver(self.weather_service.get_airport_sync)
        resolver.resolve(icao)

        return self._evaluate(request, icao, observation, forecast, resolver, aircraft)

    async def brief_async(self, request: FlightRequest) -> Briefing:
        """Asynchronous version of brief; the three fetches run concurrently."""
        icao = normalize_icao(request.icao)
        aircraft = self._lookup_aircraft(request.aircraft_id)

        observation, forecast, airport = await asyncio.gather(
            self.weather_service.get_observation(icao),
            self.weather_service.get_forecast(icao),
            self.weather_service.get_airport(icao),
            return_exceptions=True,
        )

        if isinstance(observation, WeatherServiceError):
            raise CannotEvaluateError(
                f"Weather unavailable for {icao}: {observation}"
            ) from observation
        if isinstance(observation, BaseException):
            raise observation

        if isinstance(forecast, WeatherServiceError):
            logger.warning("Forecast unavailable for %s: %s", icao, forecast)
            forecast = None
        elif isinstance(forecast, BaseException):
            raise forecast

        resolver = RunwayResolver()
        resolver.begin(icao)
        if isinstance(airport, WeatherServiceError):
            resolver.fail(airport)
        elif isinstance(airport, BaseException):
            raise airport
        else:
            resolver.accept(airport)

        return self._evaluate(request, icao, observation, forecast, resolver, aircraft)

    def _evaluate(
        self,
        request: FlightRequest,
        icao: str,
        observation: Observation | None,
        forecast: Forecast | None,
        resolver: RunwayResolver,
        aircraft: AircraftLimits | None,
    ) -> Briefing:
        if observation is None:
            raise CannotEvaluateError(f"No current observation for {icao}")

        runway, auto_selected = choose_runway(request.runway, resolver, observation.wind)
        if runway is not None:
            logger.info(
                "Using runway %s for %s%s",
                runway.display_name,
                icao,
                " (auto)" if auto_selected else "",
            )

        decision = self.engine.evaluate(
            observation,
            forecast,
            aircraft=aircraft,
            runway_heading=runway.heading if runway is not None else None,
            flight_type=request.flight_type,
        )

        return Briefing(
            icao=icao,
            observation=observation,
            forecast=forecast,
            runways=tuple(resolver.runways),
            runway=runway,
            auto_selected=auto_selected,
            runway_state=resolver.state,
            aircraft=aircraft,
            decision=decision,
        )

    async def close(self) -> None:
        """Release the weather service's HTTP session."""
        await self.weather_service.close()
