"""Wind component and aircraft performance calculations."""

from flightadvisor.physics.performance import (
    WindComponents,
    crosswind,
    density_altitude,
    headwind,
    wind_components,
)

__all__ = [
    "WindComponents",
    "crosswind",
    "density_altitude",
    "headwind",
    "wind_components",
]
