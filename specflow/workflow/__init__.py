"""Workflow catalog and status contracts."""

from .catalog import TERMINAL, CompletionMode, Role
from .contracts import (
    HistoryEntry,
    PhaseRecord,
    PhaseStatus,
    RoleState,
    RoleStatus,
    StatusRecord,
    create_initial_status,
)

__all__ = [
    "TERMINAL",
    "CompletionMode",
    "Role",
    "HistoryEntry",
    "PhaseRecord",
    "PhaseStatus",
    "RoleState",
    "RoleStatus",
    "StatusRecord",
    "create_initial_status",
]
