"""Aircraft catalog with per-aircraft operating limits.

Aircraft are listed in a YAML file grouped by kind (``trainers:``,
``gliders:``). The bundled catalog lives in ``flightadvisor/data``.

Typical usage:
    from flightadvisor.aircraft import AircraftCatalog

    catalog = AircraftCatalog()
    limits = catalog.get("c172")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from flightadvisor.core.logging_system import get_logger
from flightadvisor.errors import UnknownAircraftError

logger = get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "aircraft.yaml"

# Top-level YAML sections, in listing order
CATALOG_SECTIONS = ("trainers", "gliders")


@dataclass(frozen=True)
class AircraftLimits:
    """Operating limits for one aircraft.

    Attributes:
        id: Catalog identifier (e.g., "c172").
        name: Display name.
        type: Aircraft type description.
        category: Catalog category (trainer, glider, ...).
        max_crosswind_kt: Maximum crosswind component in knots.
        max_wind_kt: Maximum wind or gust speed in knots.
        max_altitude_ft: Maximum operating altitude in feet.
        min_visibility_m: Minimum visibility in meters (0 = not specified).
        min_runway_length_ft: Minimum runway length in feet.
        notes: Free-form notes.
    """

    id: str
    name: str
    type: str = ""
    category: str = ""
    max_crosswind_kt: int = 15
    max_wind_kt: int = 20
    max_altitude_ft: int = 5500
    min_visibility_m: int = 0
    min_runway_length_ft: int = 0
    notes: str = ""

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AircraftLimits":
        """Create limits from one catalog entry.

        Args:
            data: Mapping with camelCase catalog keys.

        Returns:
            AircraftLimits instance.

        Raises:
            ValueError: If the entry has no id.
        """
        aircraft_id = str(data.get("id") or "").strip()
        if not aircraft_id:
            raise ValueError("Aircraft entry without id")

        return cls(
            id=aircraft_id,
            name=str(data.get("name") or aircraft_id),
            type=str(data.get("type") or ""),
            category=str(data.get("category") or ""),
            max_crosswind_kt=int(data.get("maxCrosswind", 15)),
            max_wind_kt=int(data.get("maxWindSpeed", 20)),
            max_altitude_ft=int(data.get("maxOperatingAltitude", 5500)),
            min_visibility_m=int(data.get("minVisibility", 0)),
            min_runway_length_ft=int(data.get("minRunwayLength", 0)),
            notes=str(data.get("notes") or ""),
        )


class AircraftCatalog:
    """Read-only aircraft catalog loaded from YAML.

    Examples:
        >>> catalog = AircraftCatalog()
        >>> catalog.get("c172").max_crosswind_kt
        15
    """

    def __init__(self, path: Path | str | None = None) -> None:
        """Initialize the catalog.

        Args:
            path: YAML catalog file; defaults to the bundled catalog.
        """
        self.path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
        self._aircraft: dict[str, AircraftLimits] | None = None

    def _load(self) -> dict[str, AircraftLimits]:
        """Load the catalog file, skipping malformed entries."""
        aircraft: dict[str, AircraftLimits] = {}

        if not self.path.exists():
            logger.warning("Aircraft catalog not found: %s", self.path)
            return aircraft

        with open(self.path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            logger.warning("Aircraft catalog %s is not a mapping", self.path)
            return aircraft

        for section in CATALOG_SECTIONS:
            for entry in config.get(section) or []:
                if not isinstance(entry, dict):
                    continue
                try:
                    limits = AircraftLimits.from_dict(entry)
                except (TypeError, ValueError) as e:
                    logger.warning("Skipping aircraft entry in %s: %s", section, e)
                    continue
                aircraft[limits.id.lower()] = limits

        logger.info("Loaded %d aircraft from %s", len(aircraft), self.path)
        return aircraft

    @property
    def aircraft(self) -> dict[str, AircraftLimits]:
        """All aircraft keyed by lowercase id (loaded on first access)."""
        if self._aircraft is None:
            self._aircraft = self._load()
        return self._aircraft

    def all(self) -> list[AircraftLimits]:
        """List all aircraft in catalog order."""
        return list(self.aircraft.values())

    def get(self, aircraft_id: str) -> AircraftLimits:
        """Get limits for an aircraft.

        Args:
            aircraft_id: Catalog id (case-insensitive).

        Returns:
            AircraftLimits for the aircraft.

        Raises:
            UnknownAircraftError: If the id is not in the catalog.
        """
        limits = self.aircraft.get(aircraft_id.strip().lower())
        if limits is None:
            raise UnknownAircraftError(f"Unknown aircraft: {aircraft_id}")
        return limits

    def __contains__(self, aircraft_id: object) -> bool:
        return isinstance(aircraft_id, str) and aircraft_id.strip().lower() in self.aircraft

    def __len__(self) -> int:
        return len(self.aircraft)
