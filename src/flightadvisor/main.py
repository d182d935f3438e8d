"""FlightAdvisor - weather go/no-go briefing for VFR flights.

Main entry point. Fetches current conditions for a departure airport,
evaluates them against the aircraft limits and prints a briefing.

Typical usage:
    flightadvisor KPAO
    flightadvisor KPAO --aircraft c172 --runway 31
    flightadvisor KPAO --flight-type FlightLesson --verbose
    flightadvisor --list-aircraft

Exit codes:
    0: Go, Caution or information only
    1: Flight could not be evaluated
    2: NoGo
"""

import argparse
import logging
import sys

from flightadvisor.aircraft.catalog import AircraftCatalog
from flightadvisor.core.logging_system import get_logger, initialize_logging
from flightadvisor.errors import CannotEvaluateError, UnknownAircraftError
from flightadvisor.services.advisor import Briefing, FlightAdvisor, FlightRequest
from flightadvisor.services.decision import FlightType, Verdict
from flightadvisor.services.runway import AUTO_SELECT
from flightadvisor.version import get_version

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CANNOT_EVALUATE = 1
EXIT_NO_GO = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Argument list; defaults to sys.argv.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="flightadvisor",
        description="FlightAdvisor - weather go/no-go briefing for VFR flights",
    )

    parser.add_argument(
        "icao",
        nargs="?",
        help="Departure airport ICAO code (e.g., KPAO, LFPG)",
    )

    parser.add_argument(
        "--runway",
        type=str,
        default=AUTO_SELECT,
        help="Runway designator (e.g., 31, 09L) or 'auto' to pick from the wind",
    )

    parser.add_argument(
        "--aircraft",
        type=str,
        help="Aircraft id from the catalog (e.g., c172); see --list-aircraft",
    )

    parser.add_argument(
        "--flight-type",
        choices=[t.value for t in FlightType],
        default=FlightType.RECREATIONAL.value,
        help="Purpose of the flight",
    )

    parser.add_argument(
        "--list-aircraft",
        action="store_true",
        help="List catalog aircraft and exit",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write log output to this file",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")

    return parser.parse_args(argv)


def format_aircraft_list(catalog: AircraftCatalog) -> str:
    """Render the catalog as one line per aircraft."""
    lines = []
    for aircraft in catalog.all():
        lines.append(
            f"{aircraft.id:<8} {aircraft.name:<28} "
            f"xwind {aircraft.max_crosswind_kt}kt, wind {aircraft.max_wind_kt}kt"
        )
    return "\n".join(lines)


def format_briefing(briefing: Briefing) -> str:
    """Render a briefing as plain text.

    Args:
        briefing: Briefing to render.

    Returns:
        Multi-line text.
    """
    decision = briefing.decision
    summary = decision.weather_summary
    lines = [
        f"{summary.name} ({summary.icao}) at {summary.observation_time:%Y-%m-%d %H:%MZ}",
        f"{decision.verdict.icon} {decision.verdict.value}: {decision.summary}",
        "",
        f"Wind:        {summary.wind.to_summary_string()}",
        f"Visibility:  {summary.visibility_raw or 'not reported'} ({summary.visibility_m:.0f}m)",
    ]

    if summary.temperature is not None:
        lines.append(f"Temperature: {summary.temperature:g}°C")
    if summary.altimeter is not None:
        lines.append(f"Altimeter:   {summary.altimeter:.2f} inHg")
    if summary.cloud_layers:
        lines.append(f"Clouds:      {', '.join(summary.cloud_layers)}")
    if summary.weather_conditions:
        lines.append(f"Weather:     {summary.weather_conditions}")
    if summary.density_altitude is not None:
        lines.append(f"Density alt: {summary.density_altitude}ft")

    if briefing.runway is not None:
        mode = " (auto)" if briefing.auto_selected else ""
        lines.append(f"Runway:      {briefing.runway.display_name}{mode}")
        if summary.headwind_component is not None:
            lines.append(
                f"Components:  headwind {summary.headwind_component}kt, "
                f"crosswind {summary.crosswind_component}kt"
            )
    if briefing.aircraft is not None:
        lines.append(f"Aircraft:    {briefing.aircraft}")

    if decision.hazards:
        lines.append("")
        lines.append("Hazards:")
        for hazard in decision.hazards:
            lines.append(
                f"  [{hazard.severity.label}] {hazard.category.value}: {hazard.description} "
                f"({hazard.value}; limit {hazard.threshold})"
            )

    if decision.recommendations:
        lines.append("")
        lines.append("Recommendations:")
        lines.extend(f"  - {item}" for item in decision.recommendations)

    if summary.raw_metar:
        lines.append("")
        lines.append(f"METAR: {summary.raw_metar}")
    if summary.raw_taf:
        lines.append(f"TAF:   {summary.raw_taf}")

    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for Go/Caution, 1 if evaluation failed, 2 for NoGo).
    """
    args = parse_args(argv)
    initialize_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    catalog = AircraftCatalog()
    if args.list_aircraft:
        print(format_aircraft_list(catalog))
        return EXIT_OK

    if not args.icao:
        print("Error: an airport ICAO code is required", file=sys.stderr)
        return EXIT_CANNOT_EVALUATE

    request = FlightRequest(
        icao=args.icao,
        runway=args.runway,
        aircraft_id=args.aircraft,
        flight_type=FlightType(args.flight_type),
    )

    advisor = FlightAdvisor(catalog=catalog)
    try:
        briefing = advisor.brief(request)
    except (CannotEvaluateError, UnknownAircraftError) as e:
        logger.error("Briefing failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CANNOT_EVALUATE

    print(format_briefing(briefing))
    return EXIT_NO_GO if briefing.decision.verdict is Verdict.NO_GO else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
