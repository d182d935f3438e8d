"""Tests for the command line entry point."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from flightadvisor.errors import CannotEvaluateError, UnknownAircraftError
from flightadvisor.main import (
    EXIT_CANNOT_EVALUATE,
    EXIT_NO_GO,
    EXIT_OK,
    format_briefing,
    main,
    parse_args,
)
from flightadvisor.services.advisor import Briefing, FlightRequest
from flightadvisor.services.decision import DecisionEngine, FlightType
from flightadvisor.services.runway import ResolverState, RunwayEntry
from flightadvisor.services.weather.models import CloudLayer, Observation, Wind
from flightadvisor.version import get_version

NOW = datetime(2024, 3, 1, 18, 0, tzinfo=UTC)


def make_briefing(visibility_m: float = 16093.4) -> Briefing:
    """Build a briefing for runway 31 at KPAO."""
    observation = Observation(
        icao="KPAO",
        observation_time=NOW,
        wind=Wind(direction=300, speed=12),
        visibility_m=visibility_m,
        visibility_raw="10+",
        temperature=15,
        altimeter=29.92,
        elevation=2,
        sky=(CloudLayer("FEW", 3500),),
        raw_metar="KPAO 011800Z 30012KT 10SM FEW035 15/05 A2992",
        name="Palo Alto",
    )
    runway = RunwayEntry("31", 310)
    decision = DecisionEngine().evaluate(observation, runway_heading=runway.heading)
    return Briefing(
        icao="KPAO",
        observation=observation,
        forecast=None,
        runways=(RunwayEntry("13", 130), runway),
        runway=runway,
        auto_selected=True,
        runway_state=ResolverState.RESOLVED,
        aircraft=None,
        decision=decision,
    )


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self) -> None:
        """Test default options."""
        args = parse_args(["KPAO"])

        assert args.icao == "KPAO"
        assert args.runway == "auto"
        assert args.aircraft is None
        assert args.flight_type == "Recreational"
        assert args.verbose is False

    def test_options(self) -> None:
        """Test all options."""
        args = parse_args(
            ["KPAO", "--runway", "31", "--aircraft", "c172", "--flight-type", "FlightLesson"]
        )

        assert args.runway == "31"
        assert args.aircraft == "c172"
        assert FlightType(args.flight_type) is FlightType.FLIGHT_LESSON

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test --version prints the package version and exits."""
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])

        assert exc_info.value.code == 0
        assert get_version() in capsys.readouterr().out

    def test_invalid_flight_type(self) -> None:
        """Test unknown flight types are rejected by the parser."""
        with pytest.raises(SystemExit):
            parse_args(["KPAO", "--flight-type", "Aerobatics"])


class TestFormatBriefing:
    """Test briefing rendering."""

    def test_go_briefing(self) -> None:
        """Test the main lines of a Go briefing."""
        text = format_briefing(make_briefing())

        assert "Palo Alto (KPAO)" in text
        assert "Go: Conditions are favorable" in text
        assert "300@12kts" in text
        assert "31 (310°) (auto)" in text
        assert "FEW at 3500ft" in text
        assert "METAR: KPAO 011800Z" in text
        assert "Hazards:" not in text

    def test_hazards_listed(self) -> None:
        """Test hazards are rendered with severity."""
        text = format_briefing(make_briefing(visibility_m=400))

        assert "NoGo" in text
        assert "[Critical] Visibility: Visibility is 400m" in text


class TestMain:
    """Test the main entry point."""

    def test_list_aircraft(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test listing the catalog."""
        assert main(["--list-aircraft"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "c172" in out
        assert "ask21" in out

    def test_missing_icao(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test an ICAO code is required."""
        assert main([]) == EXIT_CANNOT_EVALUATE
        assert "ICAO" in capsys.readouterr().err

    def test_go_exit_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test Go exits with 0 and prints the briefing."""
        with patch("flightadvisor.main.FlightAdvisor") as advisor_cls:
            advisor_cls.return_value.brief.return_value = make_briefing()

            assert main(["kpao", "--aircraft", "c172"]) == EXIT_OK

            request = advisor_cls.return_value.brief.call_args[0][0]
            assert request == FlightRequest(icao="kpao", aircraft_id="c172")
        assert "Palo Alto" in capsys.readouterr().out

    def test_no_go_exit_code(self) -> None:
        """Test NoGo exits with 2."""
        with patch("flightadvisor.main.FlightAdvisor") as advisor_cls:
            advisor_cls.return_value.brief.return_value = make_briefing(visibility_m=400)

            assert main(["KPAO"]) == EXIT_NO_GO

    @pytest.mark.parametrize(
        "error", [CannotEvaluateError("no data"), UnknownAircraftError("Unknown aircraft: x")]
    )
    def test_cannot_evaluate(
        self, error: Exception, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test evaluation failures exit with 1."""
        with patch("flightadvisor.main.FlightAdvisor") as advisor_cls:
            advisor_cls.return_value.brief.side_effect = error

            assert main(["KPAO"]) == EXIT_CANNOT_EVALUATE

        assert "Error:" in capsys.readouterr().err
