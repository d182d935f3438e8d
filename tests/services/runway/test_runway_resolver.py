"""Tests for runway resolution and wind-based runway selection."""

from unittest.mock import MagicMock

import pytest

from flightadvisor.errors import WeatherServiceError
from flightadvisor.physics.performance import headwind
from flightadvisor.services.runway.runway_resolver import (
    UNKNOWN_SURFACE,
    ResolverState,
    RunwayEntry,
    RunwayResolver,
    parse_runway_records,
    runway_from_designator,
    select_best_runway,
)


@pytest.fixture
def airport_payload() -> list[dict]:
    """Airport response with two runways, one without alignment."""
    return [
        {
            "icaoId": "KSJC",
            "runways": [
                {"id": "12R/30L", "dimension": "11000x150", "surface": "A", "alignment": 124},
                {"id": "11/29", "dimension": "4599x100", "surface": "A", "alignment": "-"},
            ],
        }
    ]


class TestParseRunwayRecords:
    """Test airport payload parsing."""

    def test_paired_designator_with_alignment(self) -> None:
        """Test "11R/29L" at 112 gives headings 112 and 292."""
        entries = parse_runway_records({"runways": [{"id": "11R/29L", "alignment": 112}]})

        assert [(e.designator, e.heading) for e in entries] == [("11R", 112), ("29L", 292)]

    def test_paired_designator_without_alignment(self) -> None:
        """Test each end derives its own heading from its digits."""
        entries = parse_runway_records({"runways": [{"id": "04/23", "alignment": "-"}]})

        assert [(e.designator, e.heading) for e in entries] == [("04", 40), ("23", 230)]

    def test_zero_alignment_ignored(self) -> None:
        """Test a zero alignment falls back to the designator."""
        entries = parse_runway_records({"runways": [{"id": "09/27", "alignment": 0}]})

        assert [e.heading for e in entries] == [90, 270]

    def test_single_designator(self) -> None:
        """Test a runway id without a slash."""
        entries = parse_runway_records({"runways": [{"id": "36"}]})

        assert entries == [RunwayEntry(designator="36", heading=0)]

    def test_attributes(self, airport_payload: list[dict]) -> None:
        """Test surface and dimensions are carried to both ends."""
        entries = parse_runway_records(airport_payload)

        assert len(entries) == 4
        assert entries[0] == RunwayEntry("12R", 124, "A", 11000, 150)
        assert entries[1] == RunwayEntry("30L", 304, "A", 11000, 150)
        assert entries[2].heading == 110
        assert entries[3].heading == 290

    def test_missing_surface(self) -> None:
        """Test unknown surface marker."""
        entries = parse_runway_records({"runways": [{"id": "13/31"}]})
        assert all(e.surface == UNKNOWN_SURFACE for e in entries)
        assert entries[0].length_ft is None

    def test_single_runway_object(self) -> None:
        """Test runways given as one object instead of a list."""
        entries = parse_runway_records([{"runways": {"id": "13/31", "alignment": 133}}])
        assert [e.heading for e in entries] == [133, 313]

    def test_non_ascii_digits(self) -> None:
        """Test designators with non-ASCII digits fall back to heading 0."""
        entries = parse_runway_records({"runways": [{"id": "\u00b2"}, {"id": "\u00b9\u2083/31"}]})

        assert [(e.designator, e.heading) for e in entries] == [
            ("\u00b2", 0),
            ("\u00b9\u2083", 0),
            ("31", 310),
        ]

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {},
            "KPAO",
            [None],
            {"runways": None},
            {"runways": [{"alignment": 90}]},
        ],
    )
    def test_no_runway_data(self, payload: object) -> None:
        """Test payloads without usable runways give an empty list."""
        assert parse_runway_records(payload) == []


class TestRunwayEntry:
    """Test RunwayEntry helpers."""

    def test_display_name(self) -> None:
        """Test zero-padded display heading."""
        assert RunwayEntry("09", 90).display_name == "09 (090°)"

    def test_reciprocal_heading(self) -> None:
        """Test opposite direction."""
        assert RunwayEntry("31", 310).reciprocal_heading == 130

    def test_wind_components(self) -> None:
        """Test components against the runway heading."""
        components = RunwayEntry("31", 310).wind_components(270, 15)
        assert (components.headwind, components.crosswind) == (11, 10)

    def test_from_designator(self) -> None:
        """Test entries built from a bare designator."""
        assert runway_from_designator(" 27L ") == RunwayEntry("27L", 270)


class TestSelectBestRunway:
    """Test wind-based runway selection."""

    @pytest.fixture
    def runways(self) -> list[RunwayEntry]:
        """Runway 13/31 fixture."""
        return [RunwayEntry("13", 130), RunwayEntry("31", 310)]

    def test_picks_most_headwind(self, runways: list[RunwayEntry]) -> None:
        """Test the runway facing the wind wins."""
        best = select_best_runway(runways, 300, 10)
        assert best is not None
        assert best.designator == "31"

    def test_calm_wind_returns_first(self, runways: list[RunwayEntry]) -> None:
        """Test calm wind keeps the first runway."""
        assert select_best_runway(runways, 300, 0) is runways[0]

    def test_no_runways(self) -> None:
        """Test no runways stays in auto-select mode."""
        assert select_best_runway([], 300, 10) is None

    def test_tie_keeps_first(self) -> None:
        """Test equal headwinds keep the earlier runway."""
        runways = [RunwayEntry("09", 90), RunwayEntry("27", 270)]
        assert select_best_runway(runways, 0, 10) is runways[0]

    @pytest.mark.parametrize("direction", [0, 45, 120, 180, 230, 300, 359])
    def test_best_is_maximal(self, direction: int) -> None:
        """Test no runway has more headwind than the selected one."""
        runways = [
            RunwayEntry("04", 40),
            RunwayEntry("22", 220),
            RunwayEntry("11R", 112),
            RunwayEntry("29L", 292),
        ]
        best = select_best_runway(runways, direction, 16)
        assert best is not None
        best_headwind = headwind(direction, 16, best.heading)
        assert all(headwind(direction, 16, r.heading) <= best_headwind for r in runways)


class TestRunwayResolver:
    """Test the lookup state machine."""

    def test_initial_state(self) -> None:
        """Test a new resolver is empty."""
        resolver = RunwayResolver()
        assert resolver.state is ResolverState.EMPTY
        assert resolver.runways == []

    def test_resolve_success(self, airport_payload: list[dict]) -> None:
        """Test successful lookup."""
        fetch = MagicMock(return_value=airport_payload)
        resolver = RunwayResolver(fetch)

        runways = resolver.resolve("ksjc")

        fetch.assert_called_once_with("KSJC")
        assert resolver.state is ResolverState.RESOLVED
        assert resolver.icao == "KSJC"
        assert len(runways) == 4

    def test_resolve_failure(self) -> None:
        """Test failed lookup leaves no runways."""
        error = WeatherServiceError("down")
        resolver = RunwayResolver(MagicMock(side_effect=error))

        assert resolver.resolve("KSJC") == []
        assert resolver.state is ResolverState.FAILED
        assert resolver.error is error

    def test_resolve_without_fetcher(self) -> None:
        """Test resolve needs a fetcher."""
        with pytest.raises(ValueError):
            RunwayResolver().resolve("KSJC")

    def test_new_lookup_replaces_runways(self, airport_payload: list[dict]) -> None:
        """Test beginning a lookup drops the previous airport."""
        resolver = RunwayResolver()
        resolver.begin("KSJC")
        assert resolver.state is ResolverState.FETCHING
        resolver.accept(airport_payload)

        resolver.begin("KPAO")
        assert resolver.runways == []
        assert resolver.state is ResolverState.FETCHING

    def test_best_and_find(self, airport_payload: list[dict]) -> None:
        """Test selection and lookup over resolved runways."""
        resolver = RunwayResolver()
        resolver.begin("KSJC")
        resolver.accept(airport_payload)

        best = resolver.best_runway(300, 12)
        assert best is not None
        assert best.designator == "30L"
        assert resolver.find("12r") == RunwayEntry("12R", 124, "A", 11000, 150)
        assert resolver.find("01") is None
