"""Tests for the polling ArtifactWatcher."""

import asyncio
import json
from pathlib import Path

import pytest

from specflow.signals import ArtifactWatcher
from specflow.workflow.contracts import PhaseStatus


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def watcher(tmp_path: Path, events: list) -> ArtifactWatcher:
    return ArtifactWatcher(
        tmp_path,
        lambda path, event: events.append((path, event)),
        debounce_seconds=0.1,
    )


class TestPoll:
    """Debounced add/change reporting."""

    def test_first_poll_only_primes(self, watcher: ArtifactWatcher, tmp_path: Path) -> None:
        (tmp_path / "existing.md").write_text("already here", encoding="utf-8")

        assert watcher.poll(now=0.0) == []
        assert watcher.poll(now=1.0) == []
        assert watcher.poll(now=2.0) == []

    def test_new_file_reported_once_settled(self, watcher, tmp_path, events) -> None:
        watcher.poll(now=0.0)
        path = tmp_path / "questions.json"
        path.write_text('{"questions": []}', encoding="utf-8")

        assert watcher.poll(now=1.0) == []
        assert watcher.poll(now=1.05) == []
        assert watcher.poll(now=1.2) == [(path, "add")]
        assert watcher.poll(now=2.0) == []
        assert events == [(path, "add")]

    def test_modified_file_reported_as_change(self, watcher, tmp_path) -> None:
        path = tmp_path / "prd.md"
        path.write_text("draft", encoding="utf-8")
        watcher.poll(now=0.0)

        path.write_text("draft with a second paragraph", encoding="utf-8")
        watcher.poll(now=1.0)

        assert watcher.poll(now=1.1) == [(path, "change")]

    def test_write_during_debounce_restarts_window(self, watcher, tmp_path, events) -> None:
        watcher.poll(now=0.0)
        path = tmp_path / "prd.md"
        path.write_text("part one", encoding="utf-8")
        watcher.poll(now=1.0)

        path.write_text("part one and part two", encoding="utf-8")
        assert watcher.poll(now=1.08) == []
        assert watcher.poll(now=1.15) == []
        assert watcher.poll(now=1.2) == [(path, "add")]
        assert len(events) == 1

    def test_nested_files_are_found(self, watcher, tmp_path) -> None:
        watcher.poll(now=0.0)
        path = tmp_path / "projects" / "demo" / "documents" / "screens.json"
        path.parent.mkdir(parents=True)
        path.write_text("{}", encoding="utf-8")
        watcher.poll(now=1.0)

        assert watcher.poll(now=2.0) == [(path, "add")]

    def test_other_extensions_ignored(self, watcher, tmp_path) -> None:
        watcher.poll(now=0.0)
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        watcher.poll(now=1.0)

        assert watcher.poll(now=2.0) == []

    def test_file_removed_before_settling(self, watcher, tmp_path) -> None:
        watcher.poll(now=0.0)
        path = tmp_path / "prd.md"
        path.write_text("brief", encoding="utf-8")
        watcher.poll(now=1.0)
        path.unlink()

        assert watcher.poll(now=2.0) == []

    def test_handler_errors_do_not_stop_polling(self, tmp_path: Path) -> None:
        def explode(path, event):
            raise RuntimeError("handler failed")

        watcher = ArtifactWatcher(tmp_path, explode, debounce_seconds=0.0)
        watcher.poll(now=0.0)
        path = tmp_path / "prd.md"
        path.write_text("content", encoding="utf-8")

        assert watcher.poll(now=1.0) == [(path, "add")]

    def test_missing_root(self, tmp_path: Path) -> None:
        watcher = ArtifactWatcher(tmp_path / "absent", lambda path, event: None)

        assert watcher.poll(now=0.0) == []
        assert watcher.poll(now=1.0) == []


class TestDispatchThroughWatcher:

    def test_settled_questions_complete_generate_phase(
        self, layout, store, controller, dispatcher, write_file, backdate_start
    ) -> None:
        store.initialize("todo-app")
        controller.start_work("todo-app")
        backdate_start(60)
        watcher = ArtifactWatcher(layout.outputs_dir, dispatcher.handle_change, debounce_seconds=0.1)
        watcher.poll(now=0.0)

        write_file("questions", "product_questions.json", json.dumps({"questions": [
            {"id": 1, "question": "Who are the primary users of the app?"},
            {"id": 2, "question": "Which platforms must be supported first?"},
        ]}))
        watcher.poll(now=1.0)
        watcher.poll(now=1.2)

        record = store.read("todo-app")
        assert record.current_phase_record().status is PhaseStatus.USER_REVIEWING


@pytest.mark.asyncio
async def test_run_reports_new_file(tmp_path: Path) -> None:
    events = []
    watcher = ArtifactWatcher(
        tmp_path,
        lambda path, event: events.append((path, event)),
        debounce_seconds=0.0,
        poll_interval_seconds=0.01,
    )
    task = asyncio.create_task(watcher.run())
    await asyncio.sleep(0.05)

    path = tmp_path / "brief.md"
    path.write_text("hello", encoding="utf-8")
    for _ in range(100):
        if events:
            break
        await asyncio.sleep(0.01)

    watcher.stop()
    await asyncio.wait_for(task, timeout=1.0)
    assert events == [(path, "add")]
