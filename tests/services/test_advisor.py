"""Tests for the flight advisor pipeline."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from flightadvisor.aircraft.catalog import AircraftCatalog
from flightadvisor.errors import CannotEvaluateError, UnknownAircraftError, WeatherServiceError
from flightadvisor.services.advisor import (
    FlightAdvisor,
    FlightRequest,
    choose_runway,
    normalize_icao,
)
from flightadvisor.services.decision import FlightType, Verdict
from flightadvisor.services.runway import ResolverState, RunwayEntry, RunwayResolver
from flightadvisor.services.weather.models import Observation, Wind
from flightadvisor.services.weather.weather_service import WeatherService
from flightadvisor.settings.advisor_settings import AdvisorSettings

NOW = datetime(2024, 3, 1, 18, 0, tzinfo=UTC)

AIRPORT = [
    {
        "icaoId": "KPAO",
        "runways": [{"id": "13/31", "dimension": "2443x70", "surface": "A", "alignment": "-"}],
    }
]


def make_observation(wind: Wind, visibility_m: float = 16093.4) -> Observation:
    """Observation fixture helper."""
    return Observation(
        icao="KPAO",
        observation_time=NOW,
        wind=wind,
        visibility_m=visibility_m,
        temperature=15,
        altimeter=29.92,
        elevation=2,
    )


@pytest.fixture
def weather_service() -> MagicMock:
    """Weather service double with synchronous and asynchronous fetches."""
    service = MagicMock(spec=WeatherService)
    observation = make_observation(Wind(direction=300, speed=12))
    service.get_observation_sync.return_value = observation
    service.get_forecast_sync.return_value = None
    service.get_airport_sync.return_value = AIRPORT
    service.get_observation = AsyncMock(return_value=observation)
    service.get_forecast = AsyncMock(return_value=None)
    service.get_airport = AsyncMock(return_value=AIRPORT)
    service.close = AsyncMock()
    return service


@pytest.fixture
def advisor(weather_service: MagicMock) -> FlightAdvisor:
    """Advisor wired to the weather service double."""
    return FlightAdvisor(
        weather_service=weather_service,
        catalog=AircraftCatalog(),
        settings=AdvisorSettings(),
    )


class TestNormalizeIcao:
    """Test ICAO validation."""

    def test_normalized(self) -> None:
        """Test whitespace and case are normalized."""
        assert normalize_icao(" kpao ") == "KPAO"

    @pytest.mark.parametrize("icao", ["", "KPA", "KPAOX", None])
    def test_invalid(self, icao: str) -> None:
        """Test identifiers must be four characters."""
        with pytest.raises(CannotEvaluateError):
            normalize_icao(icao)


class TestChooseRunway:
    """Test runway choice for a request."""

    @pytest.fixture
    def resolver(self) -> RunwayResolver:
        """Resolver holding runway 13/31."""
        resolver = RunwayResolver()
        resolver.begin("KPAO")
        resolver.accept(AIRPORT)
        return resolver

    def test_auto_uses_wind(self, resolver: RunwayResolver) -> None:
        """Test auto picks the runway into the wind."""
        runway, auto = choose_runway("auto", resolver, Wind(direction=300, speed=12))
        assert runway is not None
        assert runway.designator == "31"
        assert auto is True

    def test_auto_calm_uses_first(self, resolver: RunwayResolver) -> None:
        """Test calm or variable wind keeps the first runway."""
        assert choose_runway("AUTO", resolver, Wind(direction=0, speed=0))[0].designator == "13"
        assert choose_runway("auto", resolver, Wind(speed=8))[0].designator == "13"

    def test_auto_without_runways(self) -> None:
        """Test auto with no runway data selects nothing."""
        assert choose_runway("auto", RunwayResolver(), Wind(300, 12)) == (None, True)

    def test_explicit_known(self, resolver: RunwayResolver) -> None:
        """Test an explicit designator found in the airport data."""
        runway, auto = choose_runway("13", resolver, Wind(300, 12))
        assert runway == RunwayEntry("13", 130, "A", 2443, 70)
        assert auto is False

    def test_explicit_unknown(self, resolver: RunwayResolver) -> None:
        """Test an unknown designator gets its heading from its digits."""
        runway, _ = choose_runway("27L", resolver, Wind(300, 12))
        assert runway == RunwayEntry("27L", 270)


class TestFlightAdvisor:
    """Test the synchronous pipeline."""

    def test_brief_go(self, advisor: FlightAdvisor, weather_service: MagicMock) -> None:
        """Test a normal briefing."""
        briefing = advisor.brief(FlightRequest("kpao", aircraft_id="c172"))

        weather_service.get_observation_sync.assert_called_once_with("KPAO")
        assert briefing.icao == "KPAO"
        assert briefing.runway is not None
        assert briefing.runway.designator == "31"
        assert briefing.auto_selected is True
        assert briefing.runway_state is ResolverState.RESOLVED
        assert len(briefing.runways) == 2
        assert briefing.aircraft is not None
        assert briefing.aircraft.id == "c172"
        assert briefing.decision.verdict is Verdict.GO
        assert briefing.decision.weather_summary.runway_heading == 310

    def test_explicit_runway_crosswind(
        self, advisor: FlightAdvisor, weather_service: MagicMock
    ) -> None:
        """Test an explicit runway is used even with a strong crosswind."""
        weather_service.get_observation_sync.return_value = make_observation(
            Wind(direction=40, speed=18)
        )

        briefing = advisor.brief(FlightRequest("KPAO", runway="31"))

        assert briefing.auto_selected is False
        assert briefing.decision.verdict is Verdict.CAUTION

    def test_missing_observation(self, advisor: FlightAdvisor, weather_service: MagicMock) -> None:
        """Test no observation means the flight cannot be evaluated."""
        weather_service.get_observation_sync.return_value = None

        with pytest.raises(CannotEvaluateError):
            advisor.brief(FlightRequest("KPAO"))

    def test_weather_unavailable(self, advisor: FlightAdvisor, weather_service: MagicMock) -> None:
        """Test an unreachable weather source is never a Go."""
        weather_service.get_observation_sync.side_effect = WeatherServiceError("down")

        with pytest.raises(CannotEvaluateError) as exc_info:
            advisor.brief(FlightRequest("KPAO"))

        assert isinstance(exc_info.value.__cause__, WeatherServiceError)

    def test_forecast_failure_ignored(
        self, advisor: FlightAdvisor, weather_service: MagicMock
    ) -> None:
        """Test a forecast failure leaves the forecast out."""
        weather_service.get_forecast_sync.side_effect = WeatherServiceError("down")

        briefing = advisor.brief(FlightRequest("KPAO"))

        assert briefing.forecast is None
        assert briefing.decision.verdict is Verdict.GO

    def test_airport_failure_evaluates_without_runway(
        self, advisor: FlightAdvisor, weather_service: MagicMock
    ) -> None:
        """Test a failed runway lookup still gives a decision."""
        weather_service.get_airport_sync.side_effect = WeatherServiceError("down")

        briefing = advisor.brief(FlightRequest("KPAO"))

        assert briefing.runway is None
        assert briefing.runway_state is ResolverState.FAILED
        assert briefing.decision.weather_summary.crosswind_component is None

    def test_unknown_aircraft(self, advisor: FlightAdvisor, weather_service: MagicMock) -> None:
        """Test unknown aircraft ids are rejected before fetching."""
        with pytest.raises(UnknownAircraftError):
            advisor.brief(FlightRequest("KPAO", aircraft_id="b747"))

        weather_service.get_observation_sync.assert_not_called()

    def test_invalid_icao(self, advisor: FlightAdvisor, weather_service: MagicMock) -> None:
        """Test invalid ICAO codes are rejected before fetching."""
        with pytest.raises(CannotEvaluateError):
            advisor.brief(FlightRequest("PAO"))

        weather_service.get_observation_sync.assert_not_called()

    def test_just_looking(self, advisor: FlightAdvisor) -> None:
        """Test information-only briefings."""
        briefing = advisor.brief(FlightRequest("KPAO", flight_type=FlightType.JUST_LOOKING))
        assert briefing.decision.verdict is Verdict.INFORMATION_ONLY

    def test_settings_thresholds_used(self, weather_service: MagicMock) -> None:
        """Test the default engine uses thresholds from settings."""
        settings = AdvisorSettings()
        settings.set_threshold("min_visibility_m", 20000)
        advisor = FlightAdvisor(weather_service=weather_service, settings=settings)

        assert advisor.brief(FlightRequest("KPAO")).decision.verdict is Verdict.NO_GO


class TestFlightAdvisorAsync:
    """Test the asynchronous pipeline."""

    @pytest.mark.asyncio
    async def test_brief_async(self, advisor: FlightAdvisor, weather_service: MagicMock) -> None:
        """Test the three fetches feed one briefing."""
        briefing = await advisor.brief_async(FlightRequest("KPAO"))

        weather_service.get_observation.assert_awaited_once_with("KPAO")
        weather_service.get_forecast.assert_awaited_once_with("KPAO")
        weather_service.get_airport.assert_awaited_once_with("KPAO")
        assert briefing.runway is not None
        assert briefing.runway.designator == "31"
        assert briefing.decision.verdict is Verdict.GO

    @pytest.mark.asyncio
    async def test_brief_async_matches_sync(self, advisor: FlightAdvisor) -> None:
        """Test both pipelines reach the same decision."""
        sync_briefing = advisor.brief(FlightRequest("KPAO"))
        async_briefing = await advisor.brief_async(FlightRequest("KPAO"))

        assert sync_briefing.decision == async_briefing.decision

    @pytest.mark.asyncio
    async def test_brief_async_weather_unavailable(
        self, advisor: FlightAdvisor, weather_service: MagicMock
    ) -> None:
        """Test an unreachable weather source raises CannotEvaluateError."""
        weather_service.get_observation.side_effect = WeatherServiceError("down")

        with pytest.raises(CannotEvaluateError):
            await advisor.brief_async(FlightRequest("KPAO"))

    @pytest.mark.asyncio
    async def test_brief_async_partial_failures(
        self, advisor: FlightAdvisor, weather_service: MagicMock
    ) -> None:
        """Test forecast and airport failures are tolerated."""
        weather_service.get_forecast.side_effect = WeatherServiceError("taf down")
        weather_service.get_airport.side_effect = WeatherServiceError("airport down")

        briefing = await advisor.brief_async(FlightRequest("KPAO"))

        assert briefing.forecast is None
        assert briefing.runway_state is ResolverState.FAILED
        assert briefing.decision.verdict is Verdict.GO

    @pytest.mark.asyncio
    async def test_close(self, advisor: FlightAdvisor, weather_service: MagicMock) -> None:
        """Test closing releases the weather service."""
        await advisor.close()
        weather_service.close.assert_awaited_once()
