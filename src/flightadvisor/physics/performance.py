"""Wind component and density altitude calculations.

Pure functions over plain numbers so they can be checked directly against
hand-computed values. Results are rounded to whole knots or feet.

Typical usage:
    from flightadvisor.physics.performance import crosswind, headwind

    headwind(270, 15, 310)  # 11 (knots, positive = headwind)
    crosswind(270, 15, 310)  # 10
"""

import math
from dataclasses import dataclass

STANDARD_PRESSURE_INHG = 29.92
SEA_LEVEL_ISA_TEMP_C = 15.0
ISA_LAPSE_RATE_C_PER_1000FT = 2.0
FEET_PER_INHG = 1000.0
DENSITY_ALTITUDE_FT_PER_C = 120.0


@dataclass(frozen=True)
class WindComponents:
    """Wind resolved along and across one runway heading.

    Attributes:
        headwind: Along-runway component; negative means tailwind.
        crosswind: Across-runway component magnitude (never negative).
    """

    headwind: int
    crosswind: int

    @property
    def is_tailwind(self) -> bool:
        """Check if the along-runway component is a tailwind."""
        return self.headwind < 0


def _angle_between(wind_direction: float, runway_heading: float) -> float:
    """Smallest angle in degrees between wind and runway heading (0-180)."""
    angle_diff = abs(wind_direction - runway_heading)
    if angle_diff > 180:
        angle_diff = 360 - angle_diff
    return angle_diff


def headwind(wind_direction: float, wind_speed: float, runway_heading: float) -> int:
    """Calculate the headwind component.

    Args:
        wind_direction: Direction the wind blows FROM, degrees.
        wind_speed: Wind speed.
        runway_heading: Runway heading, degrees.

    Returns:
        Headwind in the wind speed unit; negative for a tailwind.
    """
    angle_rad = math.radians(_angle_between(wind_direction, runway_heading))
    return round(wind_speed * math.cos(angle_rad))


def crosswind(wind_direction: float, wind_speed: float, runway_heading: float) -> int:
    """Calculate the crosswind component magnitude.

    Args:
        wind_direction: Direction the wind blows FROM, degrees.
        wind_speed: Wind speed.
        runway_heading: Runway heading, degrees.

    Returns:
        Crosswind in the wind speed unit, always >= 0.
    """
    angle_rad = math.radians(_angle_between(wind_direction, runway_heading))
    return round(abs(wind_speed * math.sin(angle_rad)))


def wind_components(
    wind_direction: float, wind_speed: float, runway_heading: float
) -> WindComponents:
    """Calculate both wind components for one runway heading."""
    return WindComponents(
        headwind=headwind(wind_direction, wind_speed, runway_heading),
        crosswind=crosswind(wind_direction, wind_speed, runway_heading),
    )


def density_altitude(elevation_ft: float, temperature_c: float, altimeter_inhg: float) -> int:
    """Calculate density altitude with the standard rule of thumb.

    Pressure altitude corrected by 120 ft per degree Celsius of deviation
    from ISA temperature at field elevation. The result is not clamped and
    may be negative.

    Args:
        elevation_ft: Field elevation in feet.
        temperature_c: Outside air temperature in Celsius.
        altimeter_inhg: Altimeter setting in inches of mercury.

    Returns:
        Density altitude in feet.
    """
    pressure_altitude = elevation_ft + (STANDARD_PRESSURE_INHG - altimeter_inhg) * FEET_PER_INHG
    standard_temp = SEA_LEVEL_ISA_TEMP_C - (elevation_ft / 1000.0 * ISA_LAPSE_RATE_C_PER_1000FT)
    return round(pressure_altitude + DENSITY_ALTITUDE_FT_PER_C * (temperature_c - standard_temp))
