"""Artifact classification module."""

from .table import (
    ARTIFACTS,
    ArtifactSpec,
    PhaseInspection,
    artifacts_for_phase,
    check_artifact,
    freshness_cutoff,
    inspect_phase,
    match_artifact,
    review_document,
)
from .validator import (
    ArtifactCheck,
    ArtifactKind,
    classify,
    classify_answers,
    classify_json_artifact,
    classify_json_fields,
    classify_markdown,
    classify_question_set,
    meets_minimum_size,
)

__all__ = [
    "ARTIFACTS",
    "ArtifactSpec",
    "PhaseInspection",
    "artifacts_for_phase",
    "check_artifact",
    "freshness_cutoff",
    "inspect_phase",
    "match_artifact",
    "review_document",
    "ArtifactCheck",
    "ArtifactKind",
    "classify",
    "classify_answers",
    "classify_json_artifact",
    "classify_json_fields",
    "classify_markdown",
    "classify_question_set",
    "meets_minimum_size",
]
