"""Version information for FlightAdvisor."""

from importlib.metadata import PackageNotFoundError, version

# Version info
__version__ = "0.1.0"  # Fallback version


def get_version() -> str:
    """Get the current version string.

    Reads the installed distribution metadata or falls back to __version__.

    Returns:
        Version string (e.g., "0.1.0").
    """
    try:
        return version("flightadvisor")
    except PackageNotFoundError:
        return __version__
