"""Reconciliation result structures."""

from dataclasses import dataclass, field

from ..workflow.contracts import StatusRecord


@dataclass
class DriftEntry:
    """One phase whose recorded completion the files no longer support."""

    rule_id: str
    description: str
    stored_status: str = "complete"
    fixed_to: str = "not-started"


@dataclass
class ReconciliationResult:
    had_drift: bool
    status: StatusRecord | None
    drift_details: list[DriftEntry] = field(default_factory=list)


@dataclass
class DriftReport:
    """Read-only drift diagnosis."""

    has_drift: bool
    issues: list[str] = field(default_factory=list)


@dataclass
class PhaseValidation:
    """Whether the current phase's prerequisite artifacts are in place."""

    is_valid: bool
    suggested_phase: str | None = None
    reason: str | None = None
    failures: list[str] = field(default_factory=list)
