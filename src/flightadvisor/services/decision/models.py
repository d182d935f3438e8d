"""Decision data models: hazards, verdicts and the flight decision.

Severity and verdict are both ordered: hazards sort by severity, and the
verdict only ever moves up the Go < Caution < NoGo lattice during one
evaluation.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum, IntEnum
from typing import TYPE_CHECKING

from flightadvisor.services.weather.models import Wind

if TYPE_CHECKING:
    from flightadvisor.aircraft.catalog import AircraftLimits


class HazardSeverity(IntEnum):
    """Hazard severity; compares by rank."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        """Display label (e.g., "Critical")."""
        return self.name.capitalize()


class Verdict(Enum):
    """Overall go/no-go decision."""

    GO = "Go"
    CAUTION = "Caution"
    NO_GO = "NoGo"
    INFORMATION_ONLY = "InformationOnly"

    @property
    def rank(self) -> int:
        """Position in the Go < Caution < NoGo lattice.

        Raises:
            ValueError: For INFORMATION_ONLY, which is not on the lattice.
        """
        return VERDICT_LATTICE.index(self)

    @property
    def icon(self) -> str:
        """Status icon for display."""
        return VERDICT_ICONS[self]

    @property
    def color(self) -> str:
        """Status color (hex) for display."""
        return VERDICT_COLORS[self]


VERDICT_LATTICE = (Verdict.GO, Verdict.CAUTION, Verdict.NO_GO)

VERDICT_ICONS = {
    Verdict.GO: "✅",
    Verdict.CAUTION: "⚠️",
    Verdict.NO_GO: "❌",
    Verdict.INFORMATION_ONLY: "ℹ️",
}

VERDICT_COLORS = {
    Verdict.GO: "#22c55e",
    Verdict.CAUTION: "#f59e0b",
    Verdict.NO_GO: "#ef4444",
    Verdict.INFORMATION_ONLY: "#6b7280",
}


def escalate(current: Verdict, floor: Verdict) -> Verdict:
    """Return the more restrictive of two lattice verdicts."""
    return floor if floor.rank > current.rank else current


class HazardCategory(Enum):
    """Kind of hazard detected by the decision checks."""

    VISIBILITY = "Visibility"
    CROSSWIND = "Crosswind"
    WIND_GUST = "Wind Gust"
    LOW_TEMPERATURE = "Low Temperature"
    HIGH_TEMPERATURE = "High Temperature"
    DENSITY_ALTITUDE = "Density Altitude"
    SNOW = "Snow"
    THUNDERSTORMS = "Thunderstorms"
    ICING = "Icing"
    WIND_SHEAR = "Wind Shear"
    LOW_CEILING = "Low Ceiling"


class FlightType(Enum):
    """Purpose of the planned flight."""

    FLIGHT_LESSON = "FlightLesson"
    GLIDING = "Gliding"
    RECREATIONAL = "Recreational"
    DISCOVERY_FLIGHT = "DiscoveryFlight"
    JUST_LOOKING = "JustLooking"

    @property
    def is_training(self) -> bool:
        """Lessons and discovery flights get training-specific advice."""
        return self in (FlightType.FLIGHT_LESSON, FlightType.DISCOVERY_FLIGHT)


@dataclass(frozen=True)
class Hazard:
    """One detected weather hazard.

    Attributes:
        category: Hazard kind.
        description: Human-readable description.
        severity: Severity level; the sort key for presentation.
        value: Observed value as display text.
        threshold: Limit that was exceeded, as display text.
        advisory: Short pilot-facing explanation of the risk.
    """

    category: HazardCategory
    description: str
    severity: HazardSeverity
    value: str
    threshold: str
    advisory: str


@dataclass(frozen=True)
class DecisionThresholds:
    """Limits applied by the decision checks.

    Attributes:
        min_visibility_m: Minimum visibility in meters.
        max_crosswind_kt: Maximum crosswind component in knots.
        max_gust_kt: Maximum gust speed in knots.
        min_temperature_c: Lowest acceptable temperature.
        max_temperature_c: Highest acceptable temperature.
        max_density_altitude_ft: Highest acceptable density altitude.
        min_wind_shear_ft: Forecast wind shear below this height is hazardous.
        min_ceiling_ft: Lowest acceptable ceiling.
    """

    min_visibility_m: float = 550
    max_crosswind_kt: int = 15
    max_gust_kt: int = 20
    min_temperature_c: float = -10
    max_temperature_c: float = 35
    max_density_altitude_ft: int = 5500
    min_wind_shear_ft: int = 2000
    min_ceiling_ft: int = 1000

    def with_aircraft(self, aircraft: "AircraftLimits | None") -> "DecisionThresholds":
        """Apply an aircraft's own limits over these thresholds.

        Args:
            aircraft: Aircraft limits, or None to keep the thresholds as-is.

        Returns:
            Thresholds with crosswind, gust, altitude and (when specified)
            visibility limits taken from the aircraft.
        """
        if aircraft is None:
            return self
        changes: dict[str, float] = {
            "max_crosswind_kt": aircraft.max_crosswind_kt,
            "max_gust_kt": aircraft.max_wind_kt,
            "max_density_altitude_ft": aircraft.max_altitude_ft,
        }
        if aircraft.min_visibility_m > 0:
            changes["min_visibility_m"] = aircraft.min_visibility_m
        return replace(self, **changes)


@dataclass(frozen=True)
class WeatherSummary:
    """Conditions used for the decision, plus values derived from them.

    Attributes:
        icao: Station ICAO code.
        name: Station name (falls back to the ICAO code).
        observation_time: Observation time (UTC).
        wind: Reported wind.
        visibility_raw: Visibility as reported.
        visibility_m: Visibility in meters.
        temperature: Temperature in Celsius.
        dewpoint: Dewpoint in Celsius.
        altimeter: Altimeter setting in inches Hg.
        elevation: Field elevation in feet (0 if not reported).
        weather_conditions: Present weather string.
        cloud_layers: Cloud layers as display strings.
        raw_metar: Original METAR.
        raw_taf: Original TAF, if a forecast was supplied.
        runway_heading: Runway heading used for wind components.
        crosswind_component: Crosswind on that runway, in knots.
        headwind_component: Headwind on that runway (negative = tailwind).
        density_altitude: Computed density altitude in feet.
        has_precipitation: Any precipitation phenomenon reported.
        has_icing: Freezing rain reported.
        has_thunderstorms: Thunderstorms reported.
    """

    icao: str
    name: str
    observation_time: datetime
    wind: Wind
    visibility_raw: str | None
    visibility_m: float
    temperature: float | None
    dewpoint: float | None
    altimeter: float | None
    elevation: int
    weather_conditions: str | None
    cloud_layers: tuple[str, ...] = ()
    raw_metar: str | None = None
    raw_taf: str | None = None
    runway_heading: float | None = None
    crosswind_component: int | None = None
    headwind_component: int | None = None
    density_altitude: int | None = None
    has_precipitation: bool = False
    has_icing: bool = False
    has_thunderstorms: bool = False


@dataclass(frozen=True)
class FlightDecision:
    """Result of one flight evaluation.

    Equality ignores ``evaluated_at`` so repeated evaluations of the same
    inputs compare equal.

    Attributes:
        verdict: Overall decision.
        hazards: Detected hazards, most severe first.
        summary: One-line summary text.
        recommendations: Suggested actions for the verdict.
        cautions: Descriptions of hazards with severity Medium or above.
        weather_summary: Conditions and derived values used.
        evaluated_at: Evaluation time (UTC).
    """

    verdict: Verdict
    hazards: tuple[Hazard, ...]
    summary: str
    recommendations: tuple[str, ...]
    cautions: tuple[str, ...]
    weather_summary: WeatherSummary
    evaluated_at: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)

    @property
    def is_go(self) -> bool:
        """Check if the flight can proceed without restrictions."""
        return self.verdict is Verdict.GO

    def hazards_at_least(self, severity: HazardSeverity) -> list[Hazard]:
        """Get hazards at or above a severity level."""
        return [h for h in self.hazards if h.severity >= severity]
