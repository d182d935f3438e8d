"""Weather data models for aviation weather services.

Observations and forecasts as delivered by the aviation weather feed, with
every attribute that a station may omit modeled as optional.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SkyCondition(Enum):
    """Sky condition categories per aviation standards."""

    CLEAR = "CLR"  # Clear below 12,000 ft
    SKY_CLEAR = "SKC"  # Clear, manual station
    FEW = "FEW"  # 1/8 to 2/8 coverage
    SCATTERED = "SCT"  # 3/8 to 4/8 coverage
    BROKEN = "BKN"  # 5/8 to 7/8 coverage (ceiling)
    OVERCAST = "OVC"  # 8/8 coverage (ceiling)
    VERTICAL_VISIBILITY = "VV"  # Obscured sky
    CAVOK = "CAVOK"  # Ceiling and visibility OK


CEILING_CONDITIONS = (SkyCondition.BROKEN, SkyCondition.OVERCAST)


class WeatherPhenomenon(Enum):
    """Present weather codes, in matching priority order.

    Values are the METAR substrings that identify each phenomenon.
    """

    THUNDERSTORM = "TS"
    SNOW = "SN"
    FREEZING_RAIN = "FZRA"
    FOG = "FG"
    MIST = "BR"
    RAIN = "RA"
    DRIZZLE = "DZ"
    SHOWERS = "SH"
    HAIL = "GR"
    ICE_CRYSTALS = "IC"

    @property
    def label(self) -> str:
        """Human-readable name."""
        return PHENOMENON_LABELS[self]

    @property
    def is_precipitation(self) -> bool:
        """Whether the phenomenon is a form of precipitation."""
        return self in PRECIPITATION


PHENOMENON_LABELS = {
    WeatherPhenomenon.THUNDERSTORM: "Thunderstorms",
    WeatherPhenomenon.SNOW: "Snow",
    WeatherPhenomenon.FREEZING_RAIN: "Freezing Rain",
    WeatherPhenomenon.FOG: "Fog",
    WeatherPhenomenon.MIST: "Mist",
    WeatherPhenomenon.RAIN: "Rain",
    WeatherPhenomenon.DRIZZLE: "Drizzle",
    WeatherPhenomenon.SHOWERS: "Showers",
    WeatherPhenomenon.HAIL: "Hail",
    WeatherPhenomenon.ICE_CRYSTALS: "Ice Crystals",
}

PRECIPITATION = frozenset(
    {
        WeatherPhenomenon.SNOW,
        WeatherPhenomenon.FREEZING_RAIN,
        WeatherPhenomenon.RAIN,
        WeatherPhenomenon.DRIZZLE,
        WeatherPhenomenon.SHOWERS,
        WeatherPhenomenon.HAIL,
        WeatherPhenomenon.ICE_CRYSTALS,
    }
)


@dataclass(frozen=True)
class Wind:
    """Wind information.

    Attributes:
        direction: Wind direction in degrees true, or None when variable or
            not reported.
        speed: Wind speed in knots, or None when not reported.
        gust: Gust speed in knots, or None if no gusts.
    """

    direction: int | None = None
    speed: int | None = None
    gust: int | None = None

    @property
    def is_calm(self) -> bool:
        """Check if wind is calm (0 knots)."""
        return self.speed == 0

    @property
    def is_variable(self) -> bool:
        """Check if a speed is reported without a usable direction."""
        return self.direction is None and bool(self.speed)

    def to_summary_string(self) -> str:
        """Convert to a short display string such as ``270@12G20kts``."""
        if self.speed is None:
            return "wind not reported"
        if self.is_calm:
            return "calm"
        direction_str = "VRB" if self.direction is None else f"{self.direction:03d}"
        result = f"{direction_str}@{self.speed}"
        if self.gust:
            result += f"G{self.gust}"
        return result + "kts"


@dataclass(frozen=True)
class CloudLayer:
    """Single cloud layer.

    Attributes:
        cover: Cover code as reported (FEW, SCT, BKN, OVC, ...).
        base: Cloud base in feet AGL, or None if not reported.
    """

    cover: str
    base: int | None = None

    @property
    def condition(self) -> SkyCondition | None:
        """Sky condition for the cover code, or None for unknown codes."""
        try:
            return SkyCondition(self.cover.upper())
        except ValueError:
            return None

    @property
    def is_ceiling(self) -> bool:
        """Broken and overcast layers form a ceiling."""
        return self.condition in CEILING_CONDITIONS

    def to_summary_string(self) -> str:
        """Convert to display string such as ``BKN at 800ft``."""
        if self.base is None:
            return self.cover
        return f"{self.cover} at {self.base}ft"


@dataclass(frozen=True)
class Observation:
    """Current conditions at one station (METAR).

    Attributes:
        icao: Station ICAO code.
        observation_time: Time of observation (UTC), or UNKNOWN_TIME.
        wind: Wind information.
        visibility_m: Visibility in meters; 0 when unknown.
        visibility_raw: Visibility text as reported (e.g. "10+").
        temperature: Temperature in Celsius.
        dewpoint: Dewpoint in Celsius.
        altimeter: Altimeter setting in inches Hg.
        elevation: Field elevation in feet.
        sky: Cloud layers in reported order.
        weather_string: Present weather codes (e.g. "-TSRA BR").
        raw_metar: Original METAR string.
        name: Station name.
    """

    icao: str
    observation_time: datetime
    wind: Wind = field(default_factory=Wind)
    visibility_m: float = 0.0
    visibility_raw: str | None = None
    temperature: float | None = None
    dewpoint: float | None = None
    altimeter: float | None = None
    elevation: int | None = None
    sky: tuple[CloudLayer, ...] = ()
    weather_string: str | None = None
    raw_metar: str | None = None
    name: str | None = None

    @property
    def ceiling(self) -> CloudLayer | None:
        """Get the lowest broken or overcast layer with a known base."""
        ceilings = [layer for layer in self.sky if layer.is_ceiling and layer.base is not None]
        if not ceilings:
            return None
        return min(ceilings, key=lambda layer: layer.base)


@dataclass(frozen=True)
class ForecastPeriod:
    """One validity period of a terminal forecast.

    Attributes:
        time_from: Start of the period (UTC).
        time_to: End of the period (UTC).
        change_indicator: FM, BECMG, TEMPO, PROB, or None for the base period.
        probability: Probability percentage for PROB groups.
        wind: Forecast wind.
        wind_shear_height: Wind shear height in feet AGL.
        wind_shear_direction: Wind direction at the shear height.
        wind_shear_speed: Wind speed at the shear height in knots.
        visibility_raw: Forecast visibility text.
        weather_string: Forecast weather codes.
        sky: Forecast cloud layers.
    """

    time_from: datetime
    time_to: datetime
    change_indicator: str | None = None
    probability: int | None = None
    wind: Wind = field(default_factory=Wind)
    wind_shear_height: int | None = None
    wind_shear_direction: int | None = None
    wind_shear_speed: int | None = None
    visibility_raw: str | None = None
    weather_string: str | None = None
    sky: tuple[CloudLayer, ...] = ()

    @property
    def has_wind_shear(self) -> bool:
        """Check if the period forecasts low-level wind shear."""
        return self.wind_shear_height is not None


@dataclass(frozen=True)
class Forecast:
    """Terminal aerodrome forecast (TAF).

    Attributes:
        icao: Station ICAO code.
        issue_time: Time the forecast was issued.
        valid_from: Start of forecast validity.
        valid_to: End of forecast validity.
        periods: Forecast periods in order.
        raw_taf: Original TAF text.
    """

    icao: str
    issue_time: datetime
    valid_from: datetime
    valid_to: datetime
    periods: tuple[ForecastPeriod, ...] = ()
    raw_taf: str | None = None

    def lowest_wind_shear(self) -> ForecastPeriod | None:
        """Get the period with the lowest forecast wind shear, if any."""
        sheared = [p for p in self.periods if p.wind_shear_height is not None]
        if not sheared:
            return None
        return min(sheared, key=lambda p: p.wind_shear_height)
