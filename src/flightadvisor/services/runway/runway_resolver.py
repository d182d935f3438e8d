"""Runway resolution and wind-based runway selection.

Turns a raw airport record into directional runway entries and picks the
runway with the most headwind:
- Paired designators ("11R/29L") become two opposite-direction entries
- Headings come from the alignment when supplied, otherwise from the
  designator digits
- Best runway is the first one with the maximum headwind component

Typical usage:
    from flightadvisor.services.runway.runway_resolver import RunwayResolver

    resolver = RunwayResolver(weather_service.get_airport_sync)
    runways = resolver.resolve("KPAO")
    best = resolver.best_runway(wind_direction=300, wind_speed=12)
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from flightadvisor.core.logging_system import get_logger
from flightadvisor.errors import WeatherServiceError
from flightadvisor.physics.performance import WindComponents, headwind, wind_components
from flightadvisor.services.weather.normalizer import (
    parse_dimension,
    resolve_alignment,
    runway_heading_from_designator,
)

logger = get_logger(__name__)

UNKNOWN_SURFACE = "Unknown"

# Designator used by callers to ask for wind-based selection
AUTO_SELECT = "auto"


@dataclass(frozen=True)
class RunwayEntry:
    """One usable runway direction.

    Attributes:
        designator: Runway designator (e.g., "09L").
        heading: Heading in degrees, 0 <= heading < 360.
        surface: Surface description from the airport record.
        length_ft: Runway length in feet, if known.
        width_ft: Runway width in feet, if known.
    """

    designator: str
    heading: float
    surface: str = UNKNOWN_SURFACE
    length_ft: int | None = None
    width_ft: int | None = None

    @property
    def reciprocal_heading(self) -> float:
        """Heading of the opposite direction."""
        return (self.heading + 180) % 360

    @property
    def display_name(self) -> str:
        """Display name such as ``09 (090°)``."""
        return f"{self.designator} ({self.heading:03.0f}°)"

    def wind_components(self, wind_direction: float, wind_speed: float) -> WindComponents:
        """Resolve a wind vector along and across this runway."""
        return wind_components(wind_direction, wind_speed, self.heading)


class ResolverState(Enum):
    """Runway lookup state for one ICAO identifier."""

    EMPTY = auto()
    FETCHING = auto()
    RESOLVED = auto()
    FAILED = auto()


def _normalize_heading(heading: float) -> float:
    return heading % 360


def _runway_records(raw: Any) -> list[dict[str, Any]]:
    """Extract runway records from an airport payload.

    The airport endpoint answers with a list of airports or, for some
    stations, a single airport object. The ``runways`` attribute itself may
    be a list or a single record.
    """
    airport = raw
    if isinstance(raw, list):
        if not raw:
            return []
        airport = raw[0]
    if not isinstance(airport, dict):
        if airport is not None:
            logger.debug("Unexpected airport payload type: %s", type(airport).__name__)
        return []

    runways = airport.get("runways")
    if isinstance(runways, dict):
        return [runways]
    if isinstance(runways, list):
        return [r for r in runways if isinstance(r, dict)]
    return []


def _entries_from_record(record: dict[str, Any]) -> list[RunwayEntry]:
    """Expand one runway record into its directional entries."""
    runway_id = record.get("id")
    if not isinstance(runway_id, str) or not runway_id.strip():
        logger.debug("Runway record without id skipped: %r", record)
        return []
    runway_id = runway_id.strip()

    alignment = resolve_alignment(record.get("alignment"))
    has_alignment = alignment is not None and alignment > 0
    length_ft, width_ft = parse_dimension(record.get("dimension"))
    surface = record.get("surface")
    if not isinstance(surface, str) or not surface.strip():
        surface = UNKNOWN_SURFACE

    def make(designator: str, heading: float) -> RunwayEntry:
        return RunwayEntry(
            designator=designator,
            heading=_normalize_heading(heading),
            surface=surface,
            length_ft=length_ft,
            width_ft=width_ft,
        )

    if "/" not in runway_id:
        heading = alignment if has_alignment else runway_heading_from_designator(runway_id)
        return [make(runway_id, heading)]

    entries = []
    parts = [part.strip() for part in runway_id.split("/")]

    if parts[0]:
        heading = alignment if has_alignment else runway_heading_from_designator(parts[0])
        entries.append(make(parts[0], heading))

    # Without an alignment each end keeps its own digits; paired designators
    # are not always exactly 180 degrees apart.
    if len(parts) > 1 and parts[1]:
        if has_alignment:
            heading = (alignment + 180) % 360
        else:
            heading = runway_heading_from_designator(parts[1])
        entries.append(make(parts[1], heading))

    return entries


def parse_runway_records(raw: Any) -> list[RunwayEntry]:
    """Parse an airport payload into directional runway entries.

    Args:
        raw: Airport record, list of airport records, or None.

    Returns:
        Runway entries in record order; empty when there is no runway data.
    """
    entries: list[RunwayEntry] = []
    for record in _runway_records(raw):
        entries.extend(_entries_from_record(record))
    logger.debug("Parsed %d runway directions", len(entries))
    return entries


def select_best_runway(
    runways: list[RunwayEntry],
    wind_direction: float,
    wind_speed: float,
) -> RunwayEntry | None:
    """Select the runway with the greatest headwind component.

    With calm wind the direction carries no information and the first
    runway is returned.

    Args:
        runways: Candidate runway entries.
        wind_direction: Wind direction (from) in degrees.
        wind_speed: Wind speed in knots.

    Returns:
        Best runway (first maximal entry on ties), or None when there are no
        runways and the caller should stay in auto-select mode.

    Examples:
        >>> runways = [RunwayEntry("31", 310), RunwayEntry("13", 130)]
        >>> select_best_runway(runways, 300, 10).designator
        '31'
    """
    if not runways:
        return None
    if wind_speed == 0:
        return runways[0]

    best = runways[0]
    best_headwind = headwind(wind_direction, wind_speed, best.heading)
    for runway in runways[1:]:
        component = headwind(wind_direction, wind_speed, runway.heading)
        if component > best_headwind:
            best = runway
            best_headwind = component
    return best


def runway_from_designator(designator: str) -> RunwayEntry:
    """Build an entry for a designator that has no airport data behind it."""
    designator = designator.strip()
    return RunwayEntry(designator=designator, heading=runway_heading_from_designator(designator))


class RunwayResolver:
    """Runway lookup for one airport at a time.

    Tracks the lookup through EMPTY -> FETCHING -> RESOLVED or FAILED.
    Each lookup replaces the previous airport's runways; nothing is cached
    across airports.

    Attributes:
        state: Current lookup state.
        icao: Airport of the last lookup.
        runways: Runway entries of the last successful lookup.
        error: Error of the last failed lookup.
    """

    def __init__(self, fetch_airport: Callable[[str], Any] | None = None) -> None:
        """Initialize runway resolver.

        Args:
            fetch_airport: Callable returning the raw airport payload for an
                ICAO code; may raise WeatherServiceError.
        """
        self._fetch_airport = fetch_airport
        self.state = ResolverState.EMPTY
        self.icao: str | None = None
        self.runways: list[RunwayEntry] = []
        self.error: Exception | None = None

    def begin(self, icao: str) -> None:
        """Start a new lookup, dropping the previous airport's runways."""
        self.icao = icao.upper()
        self.runways = []
        self.error = None
        self.state = ResolverState.FETCHING

    def resolve(self, icao: str) -> list[RunwayEntry]:
        """Fetch and parse runways for an airport.

        Args:
            icao: Airport ICAO code.

        Returns:
            Runway entries; empty if the airport has none or the fetch failed.
        """
        if self._fetch_airport is None:
            raise ValueError("RunwayResolver has no airport fetcher")

        self.begin(icao)
        try:
            raw = self._fetch_airport(self.icao)
        except WeatherServiceError as e:
            self.fail(e)
            return []
        return self.accept(raw)

    def accept(self, raw: Any) -> list[RunwayEntry]:
        """Complete the current lookup with an already-fetched payload."""
        self.runways = parse_runway_records(raw)
        self.state = ResolverState.RESOLVED
        logger.info("Resolved %d runway directions for %s", len(self.runways), self.icao)
        return self.runways

    def fail(self, error: Exception) -> None:
        """Mark the current lookup as failed."""
        self.runways = []
        self.error = error
        self.state = ResolverState.FAILED
        logger.warning("Runway lookup failed for %s: %s", self.icao, error)

    def best_runway(self, wind_direction: float, wind_speed: float) -> RunwayEntry | None:
        """Select the best of the resolved runways for the given wind."""
        return select_best_runway(self.runways, wind_direction, wind_speed)

    def find(self, designator: str) -> RunwayEntry | None:
        """Find a resolved runway by designator (case-insensitive)."""
        wanted = designator.strip().upper()
        for runway in self.runways:
            if runway.designator.upper() == wanted:
                return runway
        return None
