"""FlightAdvisor - go/no-go weather decisions for general aviation."""

from flightadvisor.version import __version__

__all__ = ["__version__"]
