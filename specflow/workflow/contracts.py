"""Data contracts for project workflow status."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .catalog import PHASES, ROLE_SEQUENCE, TERMINAL, Role, first_phase, phase_key


class PhaseStatus(Enum):
    """Status of a single phase."""
    NOT_STARTED = "not-started"
    AI_WORKING = "ai-working"
    AWAITING_USER = "awaiting-user"
    USER_REVIEWING = "user-reviewing"
    COMPLETE = "complete"


class RoleState(Enum):
    """Status of a role as a whole."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"


def _parse_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _format_time(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class PhaseRecord:
    """Progress of one phase within a role."""
    status: PhaseStatus = PhaseStatus.NOT_STARTED
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict:
        data: dict = {"status": self.status.value}
        if self.started_at:
            data["started_at"] = _format_time(self.started_at)
        if self.completed_at:
            data["completed_at"] = _format_time(self.completed_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PhaseRecord":
        return cls(
            status=PhaseStatus(data.get("status", PhaseStatus.NOT_STARTED.value)),
            started_at=_parse_time(data.get("started_at")),
            completed_at=_parse_time(data.get("completed_at")),
        )


@dataclass
class RoleStatus:
    """Progress of one role across its phases."""
    status: RoleState = RoleState.NOT_STARTED
    current_phase: str | None = None
    phases: dict[str, PhaseRecord] = field(default_factory=dict)
    completed_at: datetime | None = None

    def phase(self, name: str) -> PhaseRecord:
        """Return the record for a phase, creating it if the file predates it."""
        if name not in self.phases:
            self.phases[name] = PhaseRecord()
        return self.phases[name]

    def to_dict(self) -> dict:
        data: dict = {
            "status": self.status.value,
            "current_phase": self.current_phase,
            "phases": {name: record.to_dict() for name, record in self.phases.items()},
        }
        if self.completed_at:
            data["completed_at"] = _format_time(self.completed_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RoleStatus":
        return cls(
            status=RoleState(data.get("status", RoleState.NOT_STARTED.value)),
            current_phase=data.get("current_phase"),
            phases={
                name: PhaseRecord.from_dict(record)
                for name, record in data.get("phases", {}).items()
            },
            completed_at=_parse_time(data.get("completed_at")),
        )


@dataclass
class HistoryEntry:
    """One phase status change, appended on every transition."""
    phase_key: str
    status: PhaseStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "phase_key": self.phase_key,
            "status": self.status.value,
            "started_at": _format_time(self.started_at),
            "completed_at": _format_time(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        return cls(
            phase_key=data["phase_key"],
            status=PhaseStatus(data["status"]),
            started_at=_parse_time(data.get("started_at")),
            completed_at=_parse_time(data.get("completed_at")),
        )


@dataclass
class StatusRecord:
    """Persisted workflow progress for one project.

    `current_role` is None once every role has completed; the persisted form
    uses the terminal value "complete" for both the role and the phase key.
    """
    project_id: str
    current_role: Role | None
    current_phase_key: str
    roles: dict[Role, RoleStatus]
    history: list[HistoryEntry] = field(default_factory=list)
    created_at: datetime | None = None
    last_updated_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.current_role is None

    @property
    def current_phase(self) -> str | None:
        if self.current_role is None:
            return None
        return self.roles[self.current_role].current_phase

    def current_phase_record(self) -> PhaseRecord | None:
        phase = self.current_phase
        if self.current_role is None or phase is None:
            return None
        return self.roles[self.current_role].phase(phase)

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "project_id": self.project_id,
            "current_role": self.current_role.value if self.current_role else TERMINAL,
            "current_phase_key": self.current_phase_key,
            "roles": {role.value: status.to_dict() for role, status in self.roles.items()},
            "history": [entry.to_dict() for entry in self.history],
            "created_at": _format_time(self.created_at),
            "last_updated_at": _format_time(self.last_updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StatusRecord":
        """Deserialize from dictionary."""
        current_role = data["current_role"]
        roles = {Role(name): RoleStatus.from_dict(status) for name, status in data["roles"].items()}
        for role in ROLE_SEQUENCE:
            roles.setdefault(role, _initial_role_status(role, active=False))
        return cls(
            project_id=data["project_id"],
            current_role=None if current_role == TERMINAL else Role(current_role),
            current_phase_key=data["current_phase_key"],
            roles=roles,
            history=[HistoryEntry.from_dict(entry) for entry in data.get("history", [])],
            created_at=_parse_time(data.get("created_at")),
            last_updated_at=_parse_time(data.get("last_updated_at")),
        )


def _initial_role_status(role: Role, active: bool) -> RoleStatus:
    return RoleStatus(
        current_phase=first_phase(role) if active else None,
        phases={phase: PhaseRecord() for phase in PHASES[role]},
    )


def create_initial_status(project_id: str) -> StatusRecord:
    """Fresh record positioned at the first product phase."""
    first_role = ROLE_SEQUENCE[0]
    now = datetime.now()
    return StatusRecord(
        project_id=project_id,
        current_role=first_role,
        current_phase_key=phase_key(first_role, first_phase(first_role)),
        roles={role: _initial_role_status(role, active=role is first_role) for role in ROLE_SEQUENCE},
        created_at=now,
        last_updated_at=now,
    )
