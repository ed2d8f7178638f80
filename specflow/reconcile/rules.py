"""Reconciliation rules: what must exist on disk for a phase to stay complete."""

from dataclasses import dataclass
from typing import Callable

from ..artifacts.table import ARTIFACTS, ArtifactSpec, check_artifact
from ..status.paths import ProjectLayout
from ..workflow.catalog import Role


@dataclass(frozen=True)
class ReconciliationRule:
    id: str
    description: str
    role: Role
    phase: str
    predicate: Callable[[str], bool]
    min_size: int


def _artifact_predicate(layout: ProjectLayout, spec: ArtifactSpec) -> Callable[[str], bool]:
    def predicate(project_id: str) -> bool:
        path = layout.artifact_path(project_id, spec.directory, spec.filename)
        return check_artifact(path, spec).is_complete

    return predicate


def build_rules(layout: ProjectLayout) -> tuple[ReconciliationRule, ...]:
    """One rule per artifact, in artifact-table (catalog) order."""
    return tuple(
        ReconciliationRule(
            id=spec.name,
            description=spec.description,
            role=spec.role,
            phase=spec.phase,
            predicate=_artifact_predicate(layout, spec),
            min_size=spec.min_bytes,
        )
        for spec in ARTIFACTS
    )
