"""Normalization of raw aviation weather and airport fields.

The aviation weather feed mixes numbers, strings, sentinels and missing keys
for the same attribute. Everything here turns those raw values into typed,
canonical ones and never raises for data-shape reasons: malformed input is
replaced by a conservative sentinel (0 m visibility, UNKNOWN_TIME, None).

Typical usage:
    from flightadvisor.services.weather.normalizer import parse_visibility

    parse_visibility("10+")  # 16093.4 meters
"""

import math
import re
from datetime import UTC, datetime
from typing import Any

from flightadvisor.core.logging_system import get_logger
from flightadvisor.services.weather.models import (
    CloudLayer,
    Forecast,
    ForecastPeriod,
    Observation,
    WeatherPhenomenon,
    Wind,
)

logger = get_logger(__name__)

METERS_PER_STATUTE_MILE = 1609.34
INHG_PER_HPA = 0.02953

# Altimeter values above this are hectopascals, below are inches of mercury
HPA_THRESHOLD = 100.0

# Sentinel for timestamps that could not be parsed
UNKNOWN_TIME = datetime.min.replace(tzinfo=UTC)

# Placeholder some airport records use instead of a missing alignment
NO_ALIGNMENT = "-"

LEADING_DIGITS = re.compile(r"\d+", re.ASCII)

TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d %H:%M:%S.%f",
    "%m/%d/%Y %H:%M:%S",
    "%Y-%m-%d",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_float(value: Any) -> float | None:
    """Parse a finite float from a number or numeric string."""
    if _is_number(value):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def parse_int(value: Any) -> int | None:
    """Parse an integer from a number or numeric string (floats are rounded)."""
    result = parse_float(value)
    if result is None:
        return None
    return int(round(result))


def parse_visibility(raw: Any) -> float:
    """Parse reported visibility into meters.

    A trailing "+" ("at least") is dropped, so "10+" reads as exactly 10
    statute miles. Empty or unparseable input yields 0, which downstream
    checks treat as below minimums.

    Args:
        raw: Visibility in statute miles as text or number.

    Returns:
        Visibility in meters, never negative.
    """
    if raw is None:
        return 0.0
    if _is_number(raw):
        miles = parse_float(raw)
    else:
        text = str(raw).replace("+", "").strip()
        if not text:
            return 0.0
        miles = parse_float(text)

    if miles is None or miles < 0:
        logger.debug("Unparseable visibility %r, treating as 0 m", raw)
        return 0.0
    return miles * METERS_PER_STATUTE_MILE


def parse_weather_phenomena(raw: str | None) -> list[WeatherPhenomenon]:
    """Find every known phenomenon code in a present-weather string.

    Matching is by case-insensitive substring, so "TSRA" reports both
    thunderstorms and rain.

    Args:
        raw: Present weather string such as "-TSRA BR".

    Returns:
        Matched phenomena in priority order, without duplicates.
    """
    if not raw:
        return []
    wx = raw.upper()
    return [phenomenon for phenomenon in WeatherPhenomenon if phenomenon.value in wx]


def resolve_alignment(value: Any) -> float | None:
    """Resolve a runway alignment that may be a number, text, or placeholder.

    Returns:
        Alignment in degrees, or None when no alignment was supplied.
    """
    if value is None:
        return None
    if _is_number(value):
        return parse_float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text or text == NO_ALIGNMENT:
            return None
        return parse_float(text)
    return None


def runway_heading_from_designator(designator: str) -> int:
    """Derive a heading from a runway designator's leading digits.

    "09" gives 90, "27L" gives 270, "36" gives 0. Designators without
    leading digits give 0.
    """
    match = LEADING_DIGITS.match(designator.strip())
    if match is None:
        return 0
    return (int(match.group()) * 10) % 360


def parse_dimension(raw: Any) -> tuple[int | None, int | None]:
    """Parse a "LENGTHxWIDTH" runway dimension string into feet."""
    if not isinstance(raw, str) or "x" not in raw.lower():
        return None, None
    length_str, _, width_str = raw.lower().partition("x")
    return parse_int(length_str), parse_int(width_str)


def parse_wind_direction(value: Any) -> int | None:
    """Parse a wind direction; "VRB" and missing values give None."""
    direction = parse_int(value)
    if direction is None:
        return None
    return direction % 360


def normalize_altimeter(value: Any) -> float | None:
    """Normalize an altimeter setting to inches of mercury.

    The feed reports either inHg (29.92) or hPa (1013.2); values above
    HPA_THRESHOLD are taken as hPa and converted.
    """
    altimeter = parse_float(value)
    if altimeter is None or altimeter <= 0:
        return None
    if altimeter > HPA_THRESHOLD:
        return round(altimeter * INHG_PER_HPA, 2)
    return altimeter


def parse_timestamp(value: Any) -> datetime:
    """Parse a feed timestamp into an aware UTC datetime.

    Accepts Unix epoch seconds or any of TIMESTAMP_FORMATS, then ISO-8601.

    Returns:
        Parsed time, or UNKNOWN_TIME when the value cannot be read.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    if _is_number(value):
        try:
            return datetime.fromtimestamp(value, UTC)
        except (OverflowError, OSError, ValueError):
            logger.debug("Epoch timestamp out of range: %r", value)
            return UNKNOWN_TIME

    if not isinstance(value, str) or not value.strip():
        return UNKNOWN_TIME

    text = value.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable timestamp: %r", value)
        return UNKNOWN_TIME
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _first(record: dict[str, Any], *keys: str) -> Any:
    """Get the first key present with a non-None value."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_cloud_layers(raw: Any) -> tuple[CloudLayer, ...]:
    """Parse a list of ``{"cover": ..., "base": ...}`` records."""
    if not isinstance(raw, list):
        return ()
    layers = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        cover = _optional_str(item.get("cover"))
        if cover is None:
            continue
        layers.append(CloudLayer(cover=cover.upper(), base=parse_int(item.get("base"))))
    return tuple(layers)


def _parse_wind(record: dict[str, Any]) -> Wind:
    return Wind(
        direction=parse_wind_direction(record.get("wdir")),
        speed=parse_int(record.get("wspd")),
        gust=parse_int(record.get("wgst")),
    )


def observation_from_record(record: Any) -> Observation | None:
    """Build an Observation from one METAR JSON record.

    Args:
        record: One element of the ``/api/data/metar?format=json`` response.

    Returns:
        Observation, or None if the record has no station identifier.
    """
    if not isinstance(record, dict):
        logger.debug("METAR record is not an object: %r", type(record).__name__)
        return None

    icao = _optional_str(record.get("icaoId"))
    if icao is None:
        logger.debug("METAR record without station id skipped")
        return None

    visibility_raw = _optional_str(record.get("visib"))
    observed = _first(record, "obsTime", "reportTime", "receiptTime")

    return Observation(
        icao=icao.upper(),
        observation_time=parse_timestamp(observed),
        wind=_parse_wind(record),
        visibility_m=parse_visibility(visibility_raw),
        visibility_raw=visibility_raw,
        temperature=parse_float(record.get("temp")),
        dewpoint=parse_float(record.get("dewp")),
        altimeter=normalize_altimeter(record.get("altim")),
        elevation=parse_int(record.get("elev")),
        sky=parse_cloud_layers(record.get("clouds")),
        weather_string=_optional_str(record.get("wxString")),
        raw_metar=_optional_str(record.get("rawOb")),
        name=_optional_str(record.get("name")),
    )


def _period_from_record(record: dict[str, Any]) -> ForecastPeriod:
    return ForecastPeriod(
        time_from=parse_timestamp(_first(record, "timeFrom", "fcst_time_from")),
        time_to=parse_timestamp(_first(record, "timeTo", "fcst_time_to")),
        change_indicator=_optional_str(_first(record, "fcstChange", "change_indicator")),
        probability=parse_int(record.get("probability")),
        wind=_parse_wind(record),
        wind_shear_height=parse_int(record.get("wshearHgt")),
        wind_shear_direction=parse_wind_direction(record.get("wshearDir")),
        wind_shear_speed=parse_int(record.get("wshearSpd")),
        visibility_raw=_optional_str(record.get("visib")),
        weather_string=_optional_str(record.get("wxString")),
        sky=parse_cloud_layers(_first(record, "clouds", "sky")),
    )


def forecast_from_record(record: Any) -> Forecast | None:
    """Build a Forecast from one TAF JSON record.

    Args:
        record: One element of the ``/api/data/taf?format=json`` response.

    Returns:
        Forecast, or None if the record is not usable.
    """
    if not isinstance(record, dict):
        return None

    icao = _optional_str(record.get("icaoId"))
    if icao is None:
        logger.debug("TAF record without station id skipped")
        return None

    raw_periods = record.get("fcsts")
    periods = []
    if isinstance(raw_periods, list):
        periods = [_period_from_record(p) for p in raw_periods if isinstance(p, dict)]

    return Forecast(
        icao=icao.upper(),
        issue_time=parse_timestamp(_first(record, "issueTime", "bulletinTime")),
        valid_from=parse_timestamp(record.get("validTimeFrom")),
        valid_to=parse_timestamp(record.get("validTimeTo")),
        periods=tuple(periods),
        raw_taf=_optional_str(record.get("rawTAF")),
    )
