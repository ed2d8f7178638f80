"""Detects and repairs drift between recorded status and the files on disk.

The status file is a fast-path cache of workflow intent; the artifact files
are the ground truth. Reconciliation runs on every project load and is the
only path that may move a phase from complete back to not-started.
"""

from __future__ import annotations

import logging

from ..artifacts.table import inspect_phase
from ..status.store import StatusStore
from ..workflow import catalog
from ..workflow.catalog import Role
from ..workflow.contracts import PhaseStatus, RoleState, StatusRecord
from .contracts import DriftEntry, DriftReport, PhaseValidation, ReconciliationResult
from .rules import ReconciliationRule, build_rules

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Applies reconciliation rules to persisted project status."""

    def __init__(self, store: StatusStore) -> None:
        self.store = store
        self._rules = build_rules(store.layout)

    def rules(self) -> tuple[ReconciliationRule, ...]:
        return self._rules

    def reconcile(self, project_id: str) -> ReconciliationResult:
        """Downgrade every complete phase whose artifacts fail their rule.

        Rules run independently in declaration order, so when several phases
        drift the earliest one ends up as the current position.
        """
        record = self.store.read(project_id)
        if record is None:
            logger.debug("No status for %s, skipping reconciliation", project_id)
            return ReconciliationResult(had_drift=False, status=None)

        drift: list[DriftEntry] = []
        for rule in self._rules:
            role_status = record.roles[rule.role]
            phase_record = role_status.phases.get(rule.phase)
            if phase_record is None or phase_record.status is not PhaseStatus.COMPLETE:
                continue
            if rule.predicate(project_id):
                continue

            logger.info(f"Drift detected for {project_id}: {rule.id}")
            drift.append(DriftEntry(rule_id=rule.id, description=rule.description))

            phase_record.status = PhaseStatus.NOT_STARTED
            phase_record.completed_at = None
            if role_status.status is RoleState.COMPLETE:
                role_status.status = RoleState.NOT_STARTED
                role_status.completed_at = None

            if _at_or_past(record, rule.role, rule.phase):
                _rewind(record, rule.role, rule.phase)

        if drift:
            self.store.write(project_id, record)
            logger.info(f"Repaired {len(drift)} drifted phase(s) for {project_id}")
        return ReconciliationResult(had_drift=bool(drift), status=record, drift_details=drift)

    def get_reconciled(self, project_id: str) -> StatusRecord | None:
        """Read and repair in one call; use instead of a raw store read."""
        return self.reconcile(project_id).status

    def check_for_drift(self, project_id: str) -> DriftReport:
        """Report drift without modifying anything."""
        record = self.store.read(project_id)
        if record is None:
            return DriftReport(has_drift=False)

        issues = [
            f"{rule.id}: {rule.description}"
            for rule in self._rules
            if _is_complete(record, rule.role, rule.phase) and not rule.predicate(project_id)
        ]
        return DriftReport(has_drift=bool(issues), issues=issues)

    def validate_current_phase(self, project_id: str) -> PhaseValidation:
        """Check that the files the current phase builds on actually exist.

        Answer and review phases depend on the generate phase before them; a
        generate phase waiting for review depends on its own output.
        """
        record = self.store.read(project_id)
        if record is None or record.current_role is None or record.current_phase is None:
            return PhaseValidation(is_valid=True)

        role = record.current_role
        source_phase = _source_phase(record, role, record.current_phase)
        if source_phase is None:
            return PhaseValidation(is_valid=True)

        inspection = inspect_phase(self.store.layout, project_id, role, source_phase)
        if inspection.is_complete:
            return PhaseValidation(is_valid=True)
        return PhaseValidation(
            is_valid=False,
            suggested_phase=catalog.phase_key(role, source_phase),
            reason=f"{role.value} {source_phase} output is missing or incomplete",
            failures=inspection.failures,
        )

    def recover_current_phase(self, project_id: str) -> StatusRecord | None:
        """Rewind to the generate phase whose output the current phase lacks."""
        validation = self.validate_current_phase(project_id)
        record = self.store.read(project_id)
        if record is None or validation.is_valid or record.current_role is None:
            return record

        role = record.current_role
        source_phase = _source_phase(record, role, record.current_phase or "")
        if source_phase is None:
            return record

        logger.info(f"Recovering {project_id} to {validation.suggested_phase}: {validation.reason}")
        phase_record = record.roles[role].phase(source_phase)
        phase_record.status = PhaseStatus.NOT_STARTED
        phase_record.started_at = None
        phase_record.completed_at = None
        _rewind(record, role, source_phase)
        return self.store.write(project_id, record)


def _is_complete(record: StatusRecord, role: Role, phase: str) -> bool:
    phase_record = record.roles[role].phases.get(phase)
    return phase_record is not None and phase_record.status is PhaseStatus.COMPLETE


def _at_or_past(record: StatusRecord, role: Role, phase: str) -> bool:
    current = catalog.key_position(record.current_phase_key)
    if current is None:
        return False
    return current >= catalog.position(role, phase)


def _rewind(record: StatusRecord, role: Role, phase: str) -> None:
    record.current_role = role
    record.current_phase_key = catalog.phase_key(role, phase)
    record.roles[role].current_phase = phase


def _source_phase(record: StatusRecord, role: Role, phase: str) -> str | None:
    if catalog.is_generate_phase(phase):
        phase_record = record.roles[role].phases.get(phase)
        if phase_record is not None and phase_record.status is PhaseStatus.USER_REVIEWING:
            return phase
        return None

    phases = catalog.phases_for(role)
    if phase not in phases:
        return None
    earlier = phases[: phases.index(phase)]
    if not earlier or not catalog.is_generate_phase(earlier[-1]):
        return None
    return earlier[-1]
