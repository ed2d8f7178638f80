"""Status persistence module."""

from .paths import ProjectLayout, is_valid_project_id
from .store import StatusStore

__all__ = ["ProjectLayout", "StatusStore", "is_valid_project_id"]
