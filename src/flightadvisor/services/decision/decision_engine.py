"""Go/no-go decision engine.

Runs a fixed, ordered battery of weather checks against one observation,
an optional forecast and the aircraft limits. Each check independently
yields at most one hazard and a verdict floor; the verdict is the fold of
those floors over Go < Caution < NoGo, so it can only escalate.

Typical usage:
    from flightadvisor.services.decision import DecisionEngine

    engine = DecisionEngine()
    decision = engine.evaluate(observation, forecast, runway_heading=310)
    print(decision.verdict, decision.summary)
"""

from collections.abc import Callable
from dataclasses import dataclass
from functools import reduce
from typing import NamedTuple

from flightadvisor.aircraft.catalog import AircraftLimits
from flightadvisor.core.logging_system import get_logger
from flightadvisor.errors import CannotEvaluateError
from flightadvisor.physics.performance import WindComponents, density_altitude, wind_components
from flightadvisor.services.decision.models import (
    DecisionThresholds,
    FlightDecision,
    FlightType,
    Hazard,
    HazardCategory,
    HazardSeverity,
    Verdict,
    WeatherSummary,
    escalate,
)
from flightadvisor.services.weather.models import Forecast, Observation, WeatherPhenomenon
from flightadvisor.services.weather.normalizer import parse_weather_phenomena

logger = get_logger(__name__)


class Finding(NamedTuple):
    """A hazard together with the verdict it forces at minimum."""

    hazard: Hazard
    floor: Verdict


@dataclass(frozen=True)
class EvaluationContext:
    """Inputs and derived values shared by all checks of one evaluation."""

    observation: Observation
    forecast: Forecast | None
    thresholds: DecisionThresholds
    runway_heading: float | None
    components: WindComponents | None
    density_altitude: int | None
    phenomena: tuple[WeatherPhenomenon, ...]


Check = Callable[[EvaluationContext], Finding | None]


def _fmt(value: float) -> str:
    """Format a number without a trailing ``.0``."""
    return f"{value:g}"


def check_visibility(ctx: EvaluationContext) -> Finding | None:
    """Visibility below minimum; unknown visibility counts as 0 m."""
    visibility = int(ctx.observation.visibility_m)
    minimum = ctx.thresholds.min_visibility_m
    if ctx.observation.visibility_m >= minimum:
        return None
    hazard = Hazard(
        category=HazardCategory.VISIBILITY,
        description=f"Visibility is {visibility}m, below safe minimum.",
        severity=HazardSeverity.CRITICAL,
        value=f"{visibility}m",
        threshold=f"{_fmt(minimum)}m minimum",
        advisory=(
            "Low visibility can make it difficult to maintain visual reference with the "
            "ground and see other traffic. VFR flight requires adequate visibility for "
            "safe navigation."
        ),
    )
    return Finding(hazard, Verdict.NO_GO)


def check_crosswind(ctx: EvaluationContext) -> Finding | None:
    """Crosswind on the selected runway above the limit."""
    if ctx.components is None:
        return None
    crosswind = ctx.components.crosswind
    limit = ctx.thresholds.max_crosswind_kt
    if crosswind <= limit:
        return None
    hazard = Hazard(
        category=HazardCategory.CROSSWIND,
        description=f"Crosswind component is {crosswind}kts, exceeding recommended limit.",
        severity=HazardSeverity.HIGH,
        value=f"{crosswind}kts",
        threshold=f"{limit}kts maximum",
        advisory=(
            "Excessive crosswinds make landing challenging. Student pilots should avoid "
            "crosswinds above their skill level. Consider a different runway or postponing "
            "the flight."
        ),
    )
    return Finding(hazard, Verdict.CAUTION)


def check_wind_gust(ctx: EvaluationContext) -> Finding | None:
    """Gusts above the limit."""
    gust = ctx.observation.wind.gust
    limit = ctx.thresholds.max_gust_kt
    if gust is None or gust <= limit:
        return None
    hazard = Hazard(
        category=HazardCategory.WIND_GUST,
        description=f"Wind gusts of {gust}kts exceed safe limits.",
        severity=HazardSeverity.HIGH,
        value=f"{gust}kts",
        threshold=f"{limit}kts maximum",
        advisory=(
            "Gusty winds can cause sudden changes in aircraft performance and control. "
            "They're especially challenging during takeoff and landing."
        ),
    )
    return Finding(hazard, Verdict.NO_GO)


def check_low_temperature(ctx: EvaluationContext) -> Finding | None:
    """Temperature below the cold limit."""
    temperature = ctx.observation.temperature
    limit = ctx.thresholds.min_temperature_c
    if temperature is None or temperature >= limit:
        return None
    hazard = Hazard(
        category=HazardCategory.LOW_TEMPERATURE,
        description=f"Temperature is {_fmt(temperature)}°C, below safe operating limit.",
        severity=HazardSeverity.HIGH,
        value=f"{_fmt(temperature)}°C",
        threshold=f"{_fmt(limit)}°C minimum",
        advisory=(
            "Cold temperatures can affect aircraft performance, fuel systems, and increase "
            "icing risk. Pre-heat the engine and check for ice accumulation."
        ),
    )
    return Finding(hazard, Verdict.CAUTION)


def check_high_temperature(ctx: EvaluationContext) -> Finding | None:
    """Temperature above the hot limit."""
    temperature = ctx.observation.temperature
    limit = ctx.thresholds.max_temperature_c
    if temperature is None or temperature <= limit:
        return None
    hazard = Hazard(
        category=HazardCategory.HIGH_TEMPERATURE,
        description=f"Temperature is {_fmt(temperature)}°C, approaching maximum safe limit.",
        severity=HazardSeverity.MEDIUM,
        value=f"{_fmt(temperature)}°C",
        threshold=f"{_fmt(limit)}°C maximum",
        advisory=(
            "High temperatures reduce air density, degrading aircraft performance. Expect "
            "longer takeoff rolls and reduced climb rates. Calculate density altitude "
            "before flight."
        ),
    )
    return Finding(hazard, Verdict.CAUTION)


def check_density_altitude(ctx: EvaluationContext) -> Finding | None:
    """Density altitude above the performance limit."""
    if ctx.density_altitude is None:
        return None
    limit = ctx.thresholds.max_density_altitude_ft
    if ctx.density_altitude <= limit:
        return None
    hazard = Hazard(
        category=HazardCategory.DENSITY_ALTITUDE,
        description=(
            f"Density altitude is {ctx.density_altitude}ft, significantly degrading performance."
        ),
        severity=HazardSeverity.HIGH,
        value=f"{ctx.density_altitude}ft",
        threshold=f"{limit}ft recommended limit",
        advisory=(
            "High density altitude reduces engine power, propeller efficiency, and wing "
            "lift. Performance will be noticeably degraded, so plan for longer takeoff "
            "and landing distances."
        ),
    )
    return Finding(hazard, Verdict.CAUTION)


def check_snow(ctx: EvaluationContext) -> Finding | None:
    """Snow reported."""
    if WeatherPhenomenon.SNOW not in ctx.phenomena:
        return None
    hazard = Hazard(
        category=HazardCategory.SNOW,
        description="Snow conditions present. VFR flight not recommended.",
        severity=HazardSeverity.CRITICAL,
        value="Active",
        threshold="None acceptable",
        advisory=(
            "Snow reduces visibility dramatically and can cause icing. Most GA aircraft "
            "lack adequate anti-icing equipment. Do not fly in snow unless properly "
            "equipped and rated."
        ),
    )
    return Finding(hazard, Verdict.NO_GO)


def check_thunderstorms(ctx: EvaluationContext) -> Finding | None:
    """Thunderstorms reported."""
    if WeatherPhenomenon.THUNDERSTORM not in ctx.phenomena:
        return None
    hazard = Hazard(
        category=HazardCategory.THUNDERSTORMS,
        description="Thunderstorm activity reported. Flight is unsafe.",
        severity=HazardSeverity.CRITICAL,
        value="Active",
        threshold="None acceptable",
        advisory=(
            "Never fly near thunderstorms. They contain extreme turbulence, hail, "
            "lightning, and severe icing. Maintain at least 20nm distance from any "
            "thunderstorm cell."
        ),
    )
    return Finding(hazard, Verdict.NO_GO)


def check_freezing_rain(ctx: EvaluationContext) -> Finding | None:
    """Freezing rain reported."""
    if WeatherPhenomenon.FREEZING_RAIN not in ctx.phenomena:
        return None
    hazard = Hazard(
        category=HazardCategory.ICING,
        description="Freezing rain creates severe icing conditions.",
        severity=HazardSeverity.CRITICAL,
        value="Active",
        threshold="None acceptable",
        advisory=(
            "Freezing rain is one of the most dangerous weather conditions. Ice "
            "accumulates rapidly on aircraft surfaces. Do not fly without certified "
            "anti-ice/de-ice equipment."
        ),
    )
    return Finding(hazard, Verdict.NO_GO)


def check_wind_shear(ctx: EvaluationContext) -> Finding | None:
    """Forecast low-level wind shear; reports the lowest shear height."""
    if ctx.forecast is None:
        return None
    period = ctx.forecast.lowest_wind_shear()
    limit = ctx.thresholds.min_wind_shear_ft
    if period is None or period.wind_shear_height >= limit:
        return None
    height = period.wind_shear_height
    hazard = Hazard(
        category=HazardCategory.WIND_SHEAR,
        description=f"Wind shear forecast at {height}ft.",
        severity=HazardSeverity.HIGH,
        value=f"{height}ft",
        threshold=f"Below {limit}ft is hazardous",
        advisory=(
            "Wind shear causes sudden changes in wind speed/direction. It's particularly "
            "dangerous during takeoff and landing. Expect significant airspeed fluctuations."
        ),
    )
    return Finding(hazard, Verdict.CAUTION)


def check_ceiling(ctx: EvaluationContext) -> Finding | None:
    """Lowest broken or overcast layer below the minimum ceiling."""
    ceiling = ctx.observation.ceiling
    limit = ctx.thresholds.min_ceiling_ft
    if ceiling is None or ceiling.base >= limit:
        return None
    hazard = Hazard(
        category=HazardCategory.LOW_CEILING,
        description=f"Cloud ceiling at {ceiling.base}ft is below VFR minimums.",
        severity=HazardSeverity.HIGH,
        value=f"{ceiling.base}ft {ceiling.cover}",
        threshold=f"{limit}ft minimum for training",
        advisory=(
            "Low ceilings limit maneuvering room and can lead to inadvertent IMC "
            "(instrument meteorological conditions). VFR requires maintaining cloud "
            "clearances."
        ),
    )
    return Finding(hazard, Verdict.CAUTION)


# Evaluation order; hazards of equal severity are presented in this order
CHECKS: tuple[Check, ...] = (
    check_visibility,
    check_crosswind,
    check_wind_gust,
    check_low_temperature,
    check_high_temperature,
    check_density_altitude,
    check_snow,
    check_thunderstorms,
    check_freezing_rain,
    check_wind_shear,
    check_ceiling,
)


def fold_verdict(findings: list[Finding]) -> Verdict:
    """Fold finding floors into the most restrictive verdict, starting at Go."""
    return reduce(escalate, (finding.floor for finding in findings), Verdict.GO)


def generate_summary(verdict: Verdict, hazards: tuple[Hazard, ...]) -> str:
    """One-line summary for a verdict.

    The NoGo summary counts only hazards of High severity or above.
    """
    if verdict is Verdict.GO:
        return "Conditions are favorable for VFR flight. Standard precautions apply."
    if verdict is Verdict.CAUTION:
        return (
            f"⚠️ Flight possible with caution. {len(hazards)} concern(s) identified. "
            "Review all hazards before departure."
        )
    if verdict is Verdict.NO_GO:
        critical = sum(1 for h in hazards if h.severity >= HazardSeverity.HIGH)
        return f"❌ Flight NOT recommended. {critical} critical hazard(s) present."
    return "Weather information displayed for reference only."


def generate_recommendations(
    verdict: Verdict, hazards: tuple[Hazard, ...], flight_type: FlightType
) -> tuple[str, ...]:
    """Suggested actions for a verdict."""
    recommendations: list[str] = []

    if verdict is Verdict.NO_GO:
        recommendations.append("Consider postponing the flight until conditions improve.")
        recommendations.append("Monitor weather updates and TAF forecasts for improvement.")
        if any("wind" in h.category.value.lower() for h in hazards):
            recommendations.append(
                "If winds are the primary concern, consider flying later in the day "
                "when winds typically calm."
            )
    elif verdict is Verdict.CAUTION:
        recommendations.append("Ensure you have recent flight experience in similar conditions.")
        recommendations.append(
            "Consider flying with a CFI if you're not current on these conditions."
        )
        recommendations.append("Have alternate plans ready in case conditions deteriorate.")
        if flight_type.is_training:
            recommendations.append(
                "For training flights, consider postponing to provide better learning "
                "conditions."
            )
    elif verdict is Verdict.GO:
        recommendations.append("Complete a thorough preflight inspection.")
        recommendations.append("File a flight plan or use flight following for added safety.")
        recommendations.append("Monitor weather updates during flight.")

    return tuple(recommendations)


def generate_cautions(hazards: tuple[Hazard, ...]) -> tuple[str, ...]:
    """Descriptions of hazards of Medium severity or above."""
    return tuple(h.description for h in hazards if h.severity >= HazardSeverity.MEDIUM)


class DecisionEngine:
    """Evaluate weather against limits and produce a flight decision.

    The engine holds no state between calls: evaluating the same inputs
    twice gives equal decisions.

    Examples:
        >>> engine = DecisionEngine()
        >>> decision = engine.evaluate(observation, runway_heading=310)
        >>> decision.verdict
        <Verdict.GO: 'Go'>
    """

    def __init__(
        self,
        thresholds: DecisionThresholds | None = None,
        checks: tuple[Check, ...] = CHECKS,
    ) -> None:
        """Initialize decision engine.

        Args:
            thresholds: Default limits, used when no aircraft is given.
            checks: Ordered check battery.
        """
        self.thresholds = thresholds or DecisionThresholds()
        self.checks = checks

    def evaluate(
        self,
        observation: Observation | None,
        forecast: Forecast | None = None,
        aircraft: AircraftLimits | None = None,
        runway_heading: float | None = None,
        flight_type: FlightType = FlightType.RECREATIONAL,
    ) -> FlightDecision:
        """Evaluate one flight.

        Args:
            observation: Current conditions (required).
            forecast: Terminal forecast, if available.
            aircraft: Aircraft limits; None falls back to the default thresholds.
            runway_heading: Heading of the runway in use; without it the
                crosswind check is skipped.
            flight_type: Purpose of the flight. JUST_LOOKING gives an
                information-only decision.

        Returns:
            FlightDecision with hazards sorted by descending severity.

        Raises:
            CannotEvaluateError: If there is no observation.
        """
        if observation is None:
            raise CannotEvaluateError("No current observation to evaluate")

        ctx = self._build_context(observation, forecast, aircraft, runway_heading)

        findings = [finding for check in self.checks if (finding := check(ctx)) is not None]
        hazards = tuple(
            sorted((f.hazard for f in findings), key=lambda h: h.severity, reverse=True)
        )

        if flight_type is FlightType.JUST_LOOKING:
            verdict = Verdict.INFORMATION_ONLY
        else:
            verdict = fold_verdict(findings)

        logger.debug(
            "Evaluated %s: %s with %d hazard(s)", observation.icao, verdict.value, len(hazards)
        )

        return FlightDecision(
            verdict=verdict,
            hazards=hazards,
            summary=generate_summary(verdict, hazards),
            recommendations=generate_recommendations(verdict, hazards, flight_type),
            cautions=generate_cautions(hazards),
            weather_summary=self._build_summary(ctx),
        )

    def _build_context(
        self,
        observation: Observation,
        forecast: Forecast | None,
        aircraft: AircraftLimits | None,
        runway_heading: float | None,
    ) -> EvaluationContext:
        """Compute the values several checks and the summary depend on."""
        wind = observation.wind
        components = None
        if runway_heading is not None and wind.direction is not None and wind.speed is not None:
            components = wind_components(wind.direction, wind.speed, runway_heading)

        computed_density_altitude = None
        if (
            observation.temperature is not None
            and observation.altimeter is not None
            and observation.elevation is not None
        ):
            computed_density_altitude = density_altitude(
                observation.elevation, observation.temperature, observation.altimeter
            )

        return EvaluationContext(
            observation=observation,
            forecast=forecast,
            thresholds=self.thresholds.with_aircraft(aircraft),
            runway_heading=runway_heading,
            components=components,
            density_altitude=computed_density_altitude,
            phenomena=tuple(parse_weather_phenomena(observation.weather_string)),
        )

    @staticmethod
    def _build_summary(ctx: EvaluationContext) -> WeatherSummary:
        observation = ctx.observation
        return WeatherSummary(
            icao=observation.icao,
            name=observation.name or observation.icao,
            observation_time=observation.observation_time,
            wind=observation.wind,
            visibility_raw=observation.visibility_raw,
            visibility_m=observation.visibility_m,
            temperature=observation.temperature,
            dewpoint=observation.dewpoint,
            altimeter=observation.altimeter,
            elevation=observation.elevation or 0,
            weather_conditions=observation.weather_string,
            cloud_layers=tuple(layer.to_summary_string() for layer in observation.sky),
            raw_metar=observation.raw_metar,
            raw_taf=ctx.forecast.raw_taf if ctx.forecast is not None else None,
            runway_heading=ctx.runway_heading,
            crosswind_component=ctx.components.crosswind if ctx.components is not None else None,
            headwind_component=ctx.components.headwind if ctx.components is not None else None,
            density_altitude=ctx.density_altitude,
            has_precipitation=any(p.is_precipitation for p in ctx.phenomena),
            has_icing=WeatherPhenomenon.FREEZING_RAIN in ctx.phenomena,
            has_thunderstorms=WeatherPhenomenon.THUNDERSTORM in ctx.phenomena,
        )
