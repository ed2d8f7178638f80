"""Turns artifact file changes into phase completions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..artifacts.table import freshness_cutoff, inspect_phase, match_artifact
from ..progression.controller import ProgressionController
from ..status.store import StatusStore
from ..workflow import catalog
from ..workflow.catalog import Role
from ..workflow.contracts import PhaseStatus

logger = logging.getLogger(__name__)


@dataclass
class SignalResult:
    """Outcome of evaluating one completion signal."""

    accepted: bool
    reason: str
    project_id: str | None = None
    role: Role | None = None
    phase: str | None = None


class CompletionSignalDispatcher:
    """Decides whether a changed file finishes the project's current phase."""

    SIGNAL_FLOOR_BYTES = 50
    MIN_PHASE_SECONDS = 5.0

    def __init__(
        self,
        store: StatusStore,
        controller: ProgressionController,
        signal_floor_bytes: int | None = None,
        min_phase_seconds: float | None = None,
    ) -> None:
        self.store = store
        self.controller = controller
        self.signal_floor_bytes = (
            self.SIGNAL_FLOOR_BYTES if signal_floor_bytes is None else signal_floor_bytes
        )
        self.min_phase_seconds = (
            self.MIN_PHASE_SECONDS if min_phase_seconds is None else min_phase_seconds
        )

    def handle_change(self, path: Path, event: str = "change") -> SignalResult:
        """Evaluate a (debounced) file notification.

        Anything that is not a complete artifact for the current phase leaves
        the status untouched; the next event gets another chance. Once the
        phase has started, files written within MIN_PHASE_SECONDS of the start
        are treated as templates.
        """
        path = Path(path)
        location = self.store.layout.locate(path)
        if location is None:
            return SignalResult(False, "not a project file")
        project_id, directory, filename = location

        record = self.store.read(project_id)
        if record is None:
            return SignalResult(False, "no status record", project_id)
        if record.current_role is None:
            return SignalResult(False, "project complete", project_id)

        spec = match_artifact(directory, filename)
        if spec is None:
            logger.debug("File not tracked for completion: %s/%s", directory, filename)
            return SignalResult(False, "untracked file", project_id)

        if spec.role is not record.current_role or spec.phase != record.current_phase:
            logger.debug(
                "Out-of-turn write %s during %s", catalog.phase_key(spec.role, spec.phase),
                record.current_phase_key,
            )
            return SignalResult(False, "not the current phase", project_id, spec.role, spec.phase)

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Could not read %s: %s", path, e)
            return SignalResult(False, "unreadable", project_id, spec.role, spec.phase)
        if len(content.strip()) < self.signal_floor_bytes:
            return SignalResult(False, "content below floor", project_id, spec.role, spec.phase)

        started_at = record.roles[spec.role].phase(spec.phase).started_at
        cutoff = freshness_cutoff(started_at, self.min_phase_seconds)
        inspection = inspect_phase(
            self.store.layout, project_id, spec.role, spec.phase, modified_after=cutoff
        )
        if not inspection.is_complete:
            return SignalResult(
                False, "; ".join(inspection.failures), project_id, spec.role, spec.phase
            )

        logger.info(f"{event}: {directory}/{filename} completes {record.current_phase_key} for {project_id}")
        self.controller.mark_ai_work_complete(project_id)
        return SignalResult(True, "accepted", project_id, spec.role, spec.phase)

    def retroactive_check(self, project_id: str) -> SignalResult:
        """Validate an ai-working generate phase now, without waiting for an event.

        Covers output written while nothing was watching. Files must have been
        written at least MIN_PHASE_SECONDS after the phase started so that a
        template dropped at phase start does not count.
        """
        record = self.store.read(project_id)
        if record is None or record.current_role is None or record.current_phase is None:
            return SignalResult(False, "nothing to check", project_id)

        role, phase = record.current_role, record.current_phase
        phase_record = record.roles[role].phase(phase)
        if not catalog.is_generate_phase(phase) or phase_record.status is not PhaseStatus.AI_WORKING:
            return SignalResult(False, "current phase is not generating", project_id, role, phase)

        cutoff = freshness_cutoff(phase_record.started_at, self.min_phase_seconds)
        inspection = inspect_phase(self.store.layout, project_id, role, phase, modified_after=cutoff)
        if not inspection.is_complete:
            return SignalResult(False, "; ".join(inspection.failures), project_id, role, phase)

        logger.info(f"Retroactive check completes {record.current_phase_key} for {project_id}")
        self.controller.mark_ai_work_complete(project_id)
        return SignalResult(True, "accepted", project_id, role, phase)
