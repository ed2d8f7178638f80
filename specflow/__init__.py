"""Phase-progression engine for a three-role specification workflow."""

__version__ = "0.1.0"

from .config import WorkflowConfig
from .progression import ProgressionController
from .reconcile import ReconciliationEngine
from .signals import ArtifactWatcher, CompletionSignalDispatcher
from .status import ProjectLayout, StatusStore
from .workflow import PhaseStatus, Role, RoleState, StatusRecord

__all__ = [
    "__version__",
    "WorkflowConfig",
    "ProgressionController",
    "ReconciliationEngine",
    "ArtifactWatcher",
    "CompletionSignalDispatcher",
    "ProjectLayout",
    "StatusStore",
    "PhaseStatus",
    "Role",
    "RoleState",
    "StatusRecord",
]
