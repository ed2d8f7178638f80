"""Shared fixtures: a throwaway outputs tree and the engine wired to it."""

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

import pytest

from specflow.artifacts.table import ArtifactSpec, artifacts_for_phase
from specflow.artifacts.validator import ArtifactKind
from specflow.progression import ProgressionController
from specflow.reconcile import ReconciliationEngine
from specflow.signals import CompletionSignalDispatcher
from specflow.status import ProjectLayout, StatusStore
from specflow.workflow import catalog
from specflow.workflow.catalog import Role
from specflow.workflow.contracts import StatusRecord

PROJECT_ID = "todo-app"


def real_content(spec: ArtifactSpec) -> str:
    """Finished, placeholder-free content comfortably above the artifact's size floor."""
    if spec.kind is ArtifactKind.MARKDOWN:
        body = "This section describes how the application behaves for its users.\n\n" * 12
        return f"# {spec.name}\n\n{body}"
    if spec.kind in (ArtifactKind.QUESTION_SET, ArtifactKind.ANSWERS):
        return json.dumps({
            "questions": [
                {"id": 1, "question": "Who are the primary users?", "answer": "Small teams"},
                {"id": 2, "question": "Which platforms must be supported?", "answer": "Web only"},
            ]
        }, indent=2)

    items = [
        {"id": index, "summary": f"Entry {index} describing a concrete, reviewed decision"}
        for index in range(1, 7)
    ]
    key = spec.required_field or "entries"
    return json.dumps({key: items}, indent=2)


@pytest.fixture
def layout(tmp_path: Path) -> ProjectLayout:
    return ProjectLayout(tmp_path / "outputs")


@pytest.fixture
def store(layout: ProjectLayout) -> StatusStore:
    return StatusStore(layout)


@pytest.fixture
def controller(store: StatusStore) -> ProgressionController:
    return ProgressionController(store)


@pytest.fixture
def engine(store: StatusStore) -> ReconciliationEngine:
    return ReconciliationEngine(store)


@pytest.fixture
def dispatcher(store: StatusStore, controller: ProgressionController) -> CompletionSignalDispatcher:
    return CompletionSignalDispatcher(store, controller)


@pytest.fixture
def write_file(layout: ProjectLayout) -> Callable[..., Path]:
    """Write a file into a project folder and return its path."""
    def _write(directory: str, filename: str, content: str, project_id: str = PROJECT_ID) -> Path:
        path = layout.artifact_path(project_id, directory, filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def produce_phase(write_file: Callable[..., Path]) -> Callable[..., list[Path]]:
    """Write real content for every artifact of a role's phase."""
    def _produce(role: Role, phase: str, project_id: str = PROJECT_ID) -> list[Path]:
        return [
            write_file(spec.directory, spec.filename, real_content(spec), project_id)
            for spec in artifacts_for_phase(role, phase)
        ]

    return _produce


@pytest.fixture
def advance_to(
    store: StatusStore, controller: ProgressionController
) -> Callable[..., StatusRecord]:
    """Complete phases in order until the project sits at (role, phase)."""
    def _advance(role: Role, phase: str, project_id: str = PROJECT_ID) -> StatusRecord:
        record = store.get_or_create(project_id)
        target = catalog.position(role, phase)
        while catalog.key_position(record.current_phase_key) < target:
            record = controller.complete_and_advance(
                project_id, record.current_role, record.current_phase
            )
        return record

    return _advance


@pytest.fixture
def backdate_start(store: StatusStore) -> Callable[..., datetime]:
    """Move the current phase's started_at into the past, as if AI work had been running."""
    def _backdate(seconds: int = 60, project_id: str = PROJECT_ID) -> datetime:
        record = store.read(project_id)
        started = datetime.now() - timedelta(seconds=seconds)
        record.current_phase_record().started_at = started
        store.write(project_id, record)
        return started

    return _backdate
