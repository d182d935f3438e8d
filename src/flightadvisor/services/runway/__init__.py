"""Runway resolution and wind-based runway selection."""

from flightadvisor.services.runway.runway_resolver import (
    AUTO_SELECT,
    ResolverState,
    RunwayEntry,
    RunwayResolver,
    parse_runway_records,
    runway_from_designator,
    select_best_runway,
)

__all__ = [
    "AUTO_SELECT",
    "ResolverState",
    "RunwayEntry",
    "RunwayResolver",
    "parse_runway_records",
    "runway_from_designator",
    "select_best_runway",
]
