"""Which files satisfy which phase, and how to check them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from ..status.paths import ProjectLayout
from ..workflow.catalog import REVIEW_DOCUMENTS, Role
from .validator import ArtifactCheck, ArtifactKind, classify, meets_minimum_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactSpec:
    """A file the assistant must produce for a role's phase."""

    name: str
    directory: str
    filename: str
    kind: ArtifactKind
    role: Role
    phase: str
    min_bytes: int = 100
    required_field: str | None = None
    signals_completion: bool = True
    description: str = ""


@dataclass
class PhaseInspection:
    """Result of checking every artifact of a phase."""

    is_complete: bool
    failures: list[str] = field(default_factory=list)


def _questions(role: Role) -> tuple[ArtifactSpec, ArtifactSpec]:
    filename = f"{role.value}_questions.json"
    return (
        ArtifactSpec(
            name=f"{role.value}-questions-generated",
            directory="questions",
            filename=filename,
            kind=ArtifactKind.QUESTION_SET,
            role=role,
            phase="questions-generate",
            min_bytes=50,
            description=f"{role.value.capitalize()} questions must be generated",
        ),
        ArtifactSpec(
            name=f"{role.value}-questions-answered",
            directory="questions",
            filename=filename,
            kind=ArtifactKind.ANSWERS,
            role=role,
            phase="questions-answer",
            min_bytes=50,
            signals_completion=False,
            description=f"Every {role.value} question must be answered",
        ),
    )


ARTIFACTS: tuple[ArtifactSpec, ...] = (
    *_questions(Role.PRODUCT),
    ArtifactSpec(
        name="product-prd-complete",
        directory="documents",
        filename="prd.md",
        kind=ArtifactKind.MARKDOWN,
        role=Role.PRODUCT,
        phase="prd-generate",
        min_bytes=500,
        description="PRD must exist for the product PRD phase to be complete",
    ),
    ArtifactSpec(
        name="product-acceptance-criteria",
        directory="documents",
        filename="acceptance_criteria.json",
        kind=ArtifactKind.JSON_FIELDS,
        role=Role.PRODUCT,
        phase="prd-generate",
        min_bytes=100,
        required_field="acceptance_criteria",
        description="Acceptance criteria must exist for the product PRD phase to be complete",
    ),
    *_questions(Role.DESIGN),
    ArtifactSpec(
        name="design-brief-complete",
        directory="documents",
        filename="design_brief.md",
        kind=ArtifactKind.MARKDOWN,
        role=Role.DESIGN,
        phase="design-brief-generate",
        min_bytes=300,
        description="Design brief must exist for the design phase to be complete",
    ),
    ArtifactSpec(
        name="design-screens-complete",
        directory="documents",
        filename="screens.json",
        kind=ArtifactKind.JSON_FIELDS,
        role=Role.DESIGN,
        phase="design-brief-generate",
        min_bytes=100,
        required_field="screens",
        description="Screens file must exist for the design phase to be complete",
    ),
    *_questions(Role.ENGINEERING),
    ArtifactSpec(
        name="engineering-spec-complete",
        directory="documents",
        filename="technical_specification.md",
        kind=ArtifactKind.MARKDOWN,
        role=Role.ENGINEERING,
        phase="spec-generate",
        min_bytes=500,
        description="Technical spec must exist for the engineering phase to be complete",
    ),
    ArtifactSpec(
        name="engineering-technology-choices",
        directory="documents",
        filename="technology_choices.json",
        kind=ArtifactKind.JSON,
        role=Role.ENGINEERING,
        phase="spec-generate",
        min_bytes=200,
        description="Technology choices must exist for the engineering phase to be complete",
    ),
)


def match_artifact(directory: str, filename: str) -> ArtifactSpec | None:
    """Find the completion-signalling artifact stored at directory/filename."""
    for spec in ARTIFACTS:
        if spec.signals_completion and spec.directory == directory and spec.filename == filename:
            return spec
    return None


def artifacts_for_phase(role: Role, phase: str) -> tuple[ArtifactSpec, ...]:
    return tuple(spec for spec in ARTIFACTS if spec.role is role and spec.phase == phase)


def review_document(role: Role, phase: str) -> str | None:
    """Project-relative path of the document the user reviews for a phase.

    Review phases name their document in the catalog; a generate phase
    waiting for review shows the primary file it produced.
    """
    if phase in REVIEW_DOCUMENTS:
        return REVIEW_DOCUMENTS[phase]
    for spec in artifacts_for_phase(role, phase):
        if spec.signals_completion:
            return f"{spec.directory}/{spec.filename}"
    return None


def check_artifact(path: Path, spec: ArtifactSpec) -> ArtifactCheck:
    """Size floor plus content classification for one artifact file."""
    if not meets_minimum_size(path, spec.min_bytes):
        return ArtifactCheck(False, f"{spec.filename} missing or under {spec.min_bytes} bytes")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return ArtifactCheck(False, f"{spec.filename} unreadable: {e}")
    check = classify(spec.kind, content, spec.required_field)
    if not check.is_complete:
        return ArtifactCheck(False, f"{spec.filename}: {check.reason}")
    return check


def inspect_phase(
    layout: ProjectLayout,
    project_id: str,
    role: Role,
    phase: str,
    modified_after: datetime | None = None,
) -> PhaseInspection:
    """Check every artifact a phase requires.

    With `modified_after`, each file must also have been written after that
    moment; older files are left over from an earlier attempt or the template.
    A phase without artifacts is never complete.
    """
    specs = artifacts_for_phase(role, phase)
    if not specs:
        return PhaseInspection(False, [f"no artifacts produce {role.value}-{phase}"])

    failures: list[str] = []
    for spec in specs:
        path = layout.artifact_path(project_id, spec.directory, spec.filename)
        check = check_artifact(path, spec)
        if not check.is_complete:
            failures.append(check.reason or spec.filename)
            continue
        if modified_after is not None and not _modified_after(path, modified_after):
            failures.append(f"{spec.filename} not updated since phase start")

    if failures:
        logger.debug("Phase %s-%s incomplete: %s", role.value, phase, failures)
    return PhaseInspection(not failures, failures)


def _modified_after(path: Path, moment: datetime) -> bool:
    try:
        modified = datetime.fromtimestamp(path.stat().st_mtime)
    except OSError:
        return False
    return modified >= moment


def freshness_cutoff(started_at: datetime | None, min_phase_seconds: float) -> datetime | None:
    """Earliest write time that can belong to the AI work of a phase."""
    if started_at is None:
        return None
    return started_at + timedelta(seconds=min_phase_seconds)
