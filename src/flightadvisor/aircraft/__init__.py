"""Aircraft operating limits."""

from flightadvisor.aircraft.catalog import (
    DEFAULT_CATALOG_PATH,
    AircraftCatalog,
    AircraftLimits,
)

__all__ = [
    "DEFAULT_CATALOG_PATH",
    "AircraftCatalog",
    "AircraftLimits",
]
