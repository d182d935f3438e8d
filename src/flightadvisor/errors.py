"""Exceptions raised by FlightAdvisor services."""


class FlightAdvisorError(Exception):
    """Base class for all FlightAdvisor errors."""


class WeatherServiceError(FlightAdvisorError):
    """Raised when the aviation weather source cannot be reached or read."""


class CannotEvaluateError(FlightAdvisorError):
    """Raised when there is not enough input to produce a flight decision.

    Never replaced by a Go verdict: callers must surface it as-is.
    """


class UnknownAircraftError(FlightAdvisorError):
    """Raised when an aircraft id is not in the catalog."""
