"""Phase and role transitions for the specification workflow."""

from __future__ import annotations

import logging
from datetime import datetime

from ..artifacts.table import inspect_phase
from ..status.store import StatusStore
from ..workflow import catalog
from ..workflow.catalog import CompletionMode, Role
from ..workflow.contracts import (
    HistoryEntry,
    PhaseRecord,
    PhaseStatus,
    RoleState,
    StatusRecord,
)

logger = logging.getLogger(__name__)


class ProgressionController:
    """The only writer that moves a project forward through its phases.

    Every operation reads the whole record, mutates it in memory and writes it
    back once. Requests that do not apply to the current position return the
    record unchanged without writing.
    """

    STALE_PHASE_SECONDS = 600  # 10 minutes

    def __init__(self, store: StatusStore, stale_after_seconds: int | None = None) -> None:
        self.store = store
        self.stale_after_seconds = (
            self.STALE_PHASE_SECONDS if stale_after_seconds is None else stale_after_seconds
        )

    def start_work(self, project_id: str) -> StatusRecord | None:
        """Mark the current phase as ai-working."""
        record = self.store.read(project_id)
        if record is None or record.current_role is None:
            return record

        phase_record = record.current_phase_record()
        if phase_record is None:
            return record
        if phase_record.status is PhaseStatus.AI_WORKING:
            logger.debug("%s already ai-working", record.current_phase_key)
            return record

        phase_record.status = PhaseStatus.AI_WORKING
        phase_record.started_at = datetime.now()
        phase_record.completed_at = None
        record.roles[record.current_role].status = RoleState.IN_PROGRESS
        _log_history(record, record.current_phase_key, phase_record)
        logger.info(f"Started AI work on {project_id} {record.current_phase_key}")
        return self.store.write(project_id, record)

    def complete_and_advance(self, project_id: str, role: Role, phase: str) -> StatusRecord | None:
        """Complete `phase` and move to the next phase or role.

        Stale requests naming anything other than the current position are
        dropped and the stored record is returned unchanged.
        """
        record = self.store.read(project_id)
        if record is None:
            return None
        if record.current_role is not role or record.current_phase != phase:
            logger.debug(
                "Ignoring stale completion %s for %s (current %s)",
                catalog.phase_key(role, phase), project_id, record.current_phase_key,
            )
            return record

        now = datetime.now()
        role_status = record.roles[role]
        phase_record = role_status.phase(phase)
        phase_record.status = PhaseStatus.COMPLETE
        phase_record.started_at = phase_record.started_at or now
        phase_record.completed_at = now
        _log_history(record, catalog.phase_key(role, phase), phase_record)

        following = catalog.next_phase(role, phase)
        if following is not None:
            role_status.status = RoleState.IN_PROGRESS
            role_status.current_phase = following
            entry = role_status.phase(following)
            entry.status = PhaseStatus(catalog.entry_status(following))
            entry.completed_at = None
            record.current_phase_key = catalog.phase_key(role, following)
        else:
            role_status.status = RoleState.COMPLETE
            role_status.completed_at = now
            self._enter_next_role(record, role)

        logger.info(f"Completed {catalog.phase_key(role, phase)} for {project_id}, now at {record.current_phase_key}")
        return self.store.write(project_id, record)

    def mark_ai_work_complete(self, project_id: str) -> StatusRecord | None:
        """Record that the assistant finished the current phase.

        Generate phases wait for the user to review the output; answer phases
        advance immediately. Other phases are left unchanged.
        """
        record = self.store.read(project_id)
        if record is None or record.current_role is None or record.current_phase is None:
            return record

        role = record.current_role
        phase = record.current_phase
        mode = catalog.completion_mode(phase)

        if mode is CompletionMode.ADVANCE:
            return self.complete_and_advance(project_id, role, phase)
        if mode is not CompletionMode.REVIEW:
            logger.debug("No AI completion step for %s", record.current_phase_key)
            return record

        phase_record = record.roles[role].phase(phase)
        if phase_record.status in (PhaseStatus.USER_REVIEWING, PhaseStatus.COMPLETE):
            return record
        phase_record.status = PhaseStatus.USER_REVIEWING
        phase_record.started_at = phase_record.started_at or datetime.now()
        _log_history(record, record.current_phase_key, phase_record)
        logger.info(f"AI work complete for {project_id} {record.current_phase_key}, awaiting review")
        return self.store.write(project_id, record)

    def recover_stale_phase(self, project_id: str, now: datetime | None = None) -> StatusRecord | None:
        """Reset an ai-working phase that ran too long without usable output."""
        record = self.store.read(project_id)
        if record is None or record.current_role is None or record.current_phase is None:
            return record

        phase_record = record.current_phase_record()
        if phase_record is None or phase_record.status is not PhaseStatus.AI_WORKING:
            return record

        now = now or datetime.now()
        started_at = phase_record.started_at
        if started_at is not None:
            age = (now - started_at).total_seconds()
            if age <= self.stale_after_seconds:
                return record

        inspection = inspect_phase(self.store.layout, project_id, record.current_role, record.current_phase)
        if inspection.is_complete:
            return record

        phase_record.status = PhaseStatus.NOT_STARTED
        phase_record.started_at = None
        _log_history(record, record.current_phase_key, phase_record)
        logger.warning(f"Reset stale phase {record.current_phase_key} for {project_id}")
        return self.store.write(project_id, record)

    def _enter_next_role(self, record: StatusRecord, finished: Role) -> None:
        upcoming = catalog.next_role(finished)
        if upcoming is None:
            record.current_role = None
            record.current_phase_key = catalog.TERMINAL
            return

        first = catalog.first_phase(upcoming)
        role_status = record.roles[upcoming]
        role_status.current_phase = first
        role_status.phases[first] = PhaseRecord()
        record.current_role = upcoming
        record.current_phase_key = catalog.phase_key(upcoming, first)


def _log_history(record: StatusRecord, key: str, phase_record: PhaseRecord) -> None:
    record.history.append(
        HistoryEntry(
            phase_key=key,
            status=phase_record.status,
            started_at=phase_record.started_at,
            completed_at=phase_record.completed_at,
        )
    )
