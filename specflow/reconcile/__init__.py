"""Status reconciliation module."""

from .contracts import DriftEntry, DriftReport, PhaseValidation, ReconciliationResult
from .engine import ReconciliationEngine
from .rules import ReconciliationRule, build_rules

__all__ = [
    "DriftEntry",
    "DriftReport",
    "PhaseValidation",
    "ReconciliationResult",
    "ReconciliationEngine",
    "ReconciliationRule",
    "build_rules",
]
