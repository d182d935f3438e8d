"""Weather hazard detection and go/no-go decisions."""

from flightadvisor.services.decision.decision_engine import (
    CHECKS,
    DecisionEngine,
    Finding,
    fold_verdict,
    generate_summary,
)
from flightadvisor.services.decision.models import (
    DecisionThresholds,
    FlightDecision,
    FlightType,
    Hazard,
    HazardCategory,
    HazardSeverity,
    Verdict,
    WeatherSummary,
)

__all__ = [
    "CHECKS",
    "DecisionEngine",
    "DecisionThresholds",
    "Finding",
    "FlightDecision",
    "FlightType",
    "Hazard",
    "HazardCategory",
    "HazardSeverity",
    "Verdict",
    "WeatherSummary",
    "fold_verdict",
    "generate_summary",
]
