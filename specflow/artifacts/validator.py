"""Placeholder-vs-real classifiers for generated artifacts.

Every classifier is pure and never raises: content that cannot be parsed is
classified incomplete.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable


class ArtifactKind(Enum):
    """Content type of an artifact, selecting its classifier."""

    MARKDOWN = "markdown"
    QUESTION_SET = "question_set"
    ANSWERS = "answers"
    JSON = "json"
    JSON_FIELDS = "json_fields"


@dataclass
class ArtifactCheck:
    """Outcome of classifying one artifact."""

    is_complete: bool
    reason: str | None = None


_MARKDOWN_PLACEHOLDERS = (
    re.compile(r"\[[A-Z][A-Z0-9_]{2,}\](?!\()"),
    re.compile(r"\[[^\]\n]*PLACEHOLDER[^\]\n]*\]", re.IGNORECASE),
    re.compile(r"\[INSERT\s+[^\]\n]*\]", re.IGNORECASE),
    re.compile(r"TODO:", re.IGNORECASE),
    re.compile(r"\[TBD\]", re.IGNORECASE),
    re.compile(r"^#{1,6}\s+.+\n\s*\[[^\]\n]*\](?!\()", re.MULTILINE),
)

_JSON_PLACEHOLDERS = (
    re.compile(r"PLACEHOLDER", re.IGNORECASE),
    re.compile(r"TODO:", re.IGNORECASE),
    re.compile(r"\[TBD\]", re.IGNORECASE),
)

_WAITING_SENTINEL = "waiting for"


def classify_markdown(content: str) -> ArtifactCheck:
    """Markdown is complete when it is non-blank and carries no placeholder marker."""
    if not content.strip():
        return ArtifactCheck(False, "document is empty")
    for pattern in _MARKDOWN_PLACEHOLDERS:
        match = pattern.search(content)
        if match:
            return ArtifactCheck(False, f"placeholder marker: {match.group(0).strip()!r}")
    return ArtifactCheck(True)


def classify_question_set(content: str) -> ArtifactCheck:
    """Classify a generated question list.

    Two or more entries always count as real questions. A single entry is
    still the template while its question text says it is waiting for the
    generator.
    """
    questions = _parse_questions(content)
    if questions is None:
        return ArtifactCheck(False, "question set is not valid JSON")
    if not questions:
        return ArtifactCheck(False, "question set is empty")
    if len(questions) > 1:
        return ArtifactCheck(True)

    question = _text(questions[0], "question")
    if not question.strip():
        return ArtifactCheck(False, "only question is blank")
    if _WAITING_SENTINEL in question.lower():
        return ArtifactCheck(False, "only question is the waiting placeholder")
    return ArtifactCheck(True)


def classify_answers(content: str) -> ArtifactCheck:
    """A question set is answered when every entry has an answer or decision."""
    questions = _parse_questions(content)
    if questions is None:
        return ArtifactCheck(False, "question set is not valid JSON")
    if not questions:
        return ArtifactCheck(False, "question set is empty")
    unanswered = [
        index for index, entry in enumerate(questions, start=1)
        if not (_text(entry, "answer").strip() or _text(entry, "decision").strip())
    ]
    if unanswered:
        return ArtifactCheck(False, f"unanswered questions: {unanswered}")
    return ArtifactCheck(True)


def classify_json_artifact(content: str, required_field: str | None = None) -> ArtifactCheck:
    """JSON is complete when it parses, is non-empty and has no placeholder token."""
    for pattern in _JSON_PLACEHOLDERS:
        match = pattern.search(content)
        if match:
            return ArtifactCheck(False, f"placeholder token: {match.group(0)!r}")
    return classify_json_fields(content, required_field)


def classify_json_fields(content: str, required_field: str | None = None) -> ArtifactCheck:
    """Structure-only JSON check for documents whose values may legitimately say "placeholder"."""
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return ArtifactCheck(False, "not valid JSON")
    if not data:
        return ArtifactCheck(False, "JSON document is empty")
    if required_field is not None:
        if not isinstance(data, dict) or data.get(required_field) is None:
            return ArtifactCheck(False, f"missing field '{required_field}'")
    return ArtifactCheck(True)


def meets_minimum_size(path: Path, min_bytes: int) -> bool:
    """Reject missing files and files still too small to be a finished write."""
    try:
        return Path(path).stat().st_size >= min_bytes
    except OSError:
        return False


Classifier = Callable[..., ArtifactCheck]

CLASSIFIERS: dict[ArtifactKind, Classifier] = {
    ArtifactKind.MARKDOWN: classify_markdown,
    ArtifactKind.QUESTION_SET: classify_question_set,
    ArtifactKind.ANSWERS: classify_answers,
    ArtifactKind.JSON: classify_json_artifact,
    ArtifactKind.JSON_FIELDS: classify_json_fields,
}


def classify(kind: ArtifactKind, content: str, required_field: str | None = None) -> ArtifactCheck:
    """Run the registered classifier for an artifact kind."""
    classifier = CLASSIFIERS[kind]
    if required_field is not None:
        return classifier(content, required_field)
    return classifier(content)


def _parse_questions(content: str) -> list[Any] | None:
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return None
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        return None
    return data


def _text(entry: Any, key: str) -> str:
    if not isinstance(entry, dict):
        return ""
    value = entry.get(key)
    return value if isinstance(value, str) else ""
