"""Tests for StatusStore persistence and ProjectLayout path mapping."""

import json
from pathlib import Path

import pytest

from specflow.status import ProjectLayout, StatusStore, is_valid_project_id
from specflow.workflow.catalog import Role
from specflow.workflow.contracts import PhaseStatus


class TestReadWrite:
    """Whole-record persistence."""

    def test_missing_project_reads_none(self, store: StatusStore) -> None:
        assert store.read("nope") is None

    def test_initialize_persists_initial_record(self, store: StatusStore) -> None:
        store.initialize("demo")

        record = store.read("demo")

        assert record is not None
        assert record.current_phase_key == "product-questions-generate"
        assert store.exists("demo")

    def test_write_replaces_record_and_stamps_update(self, store: StatusStore) -> None:
        record = store.initialize("demo")
        first_update = record.last_updated_at
        record.roles[Role.PRODUCT].phase("questions-generate").status = PhaseStatus.AI_WORKING

        store.write("demo", record)
        reloaded = store.read("demo")

        assert reloaded.roles[Role.PRODUCT].phases["questions-generate"].status is PhaseStatus.AI_WORKING
        assert reloaded.last_updated_at >= first_update

    def test_write_leaves_no_temp_file(self, store: StatusStore, layout: ProjectLayout) -> None:
        store.initialize("demo")

        leftovers = list(layout.project_dir("demo").glob("*.tmp"))

        assert leftovers == []

    def test_persisted_form_uses_hyphenated_values(self, store: StatusStore, layout: ProjectLayout) -> None:
        store.initialize("demo")

        data = json.loads(layout.status_path("demo").read_text(encoding="utf-8"))

        assert data["current_role"] == "product"
        assert data["roles"]["product"]["phases"]["questions-generate"]["status"] == "not-started"

    def test_malformed_file_reads_none(self, store: StatusStore, layout: ProjectLayout) -> None:
        path = layout.status_path("broken")
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        assert store.read("broken") is None

    def test_unknown_status_value_reads_none(self, store: StatusStore, layout: ProjectLayout) -> None:
        store.initialize("demo")
        path = layout.status_path("demo")
        data = json.loads(path.read_text(encoding="utf-8"))
        data["current_role"] = "marketing"
        path.write_text(json.dumps(data), encoding="utf-8")

        assert store.read("demo") is None


class TestLifetime:
    """get_or_create and delete."""

    def test_get_or_create_keeps_existing(self, store: StatusStore) -> None:
        record = store.initialize("demo")
        record.roles[Role.PRODUCT].phase("questions-generate").status = PhaseStatus.AI_WORKING
        store.write("demo", record)

        again = store.get_or_create("demo")

        assert again.roles[Role.PRODUCT].phases["questions-generate"].status is PhaseStatus.AI_WORKING

    def test_get_or_create_initializes(self, store: StatusStore) -> None:
        assert store.get_or_create("fresh").project_id == "fresh"

    def test_delete_removes_project(self, store: StatusStore, layout: ProjectLayout) -> None:
        store.initialize("demo")

        store.delete("demo")

        assert not layout.project_dir("demo").exists()
        assert store.read("demo") is None


class TestLocate:
    """Mapping file paths back to projects."""

    def test_artifact_in_subdirectory(self, layout: ProjectLayout) -> None:
        path = layout.artifact_path("demo", "documents", "prd.md")

        assert layout.locate(path) == ("demo", "documents", "prd.md")

    def test_file_at_project_root(self, layout: ProjectLayout) -> None:
        assert layout.locate(layout.status_path("demo")) == ("demo", "", "project_status.json")

    @pytest.mark.parametrize("relative", ["notes.md", "projects/readme.md", "templates/demo/prd.md"])
    def test_files_outside_projects(self, layout: ProjectLayout, relative: str) -> None:
        assert layout.locate(layout.outputs_dir / relative) is None

    def test_path_outside_outputs(self, layout: ProjectLayout, tmp_path: Path) -> None:
        assert layout.locate(tmp_path / "elsewhere" / "prd.md") is None


class TestProjectIds:
    """Ids must name a single folder directly under projects/."""

    @pytest.mark.parametrize("project_id", ["todo-app", "Todo App 2", "v1.2"])
    def test_plain_names_are_valid(self, project_id: str) -> None:
        assert is_valid_project_id(project_id)

    @pytest.mark.parametrize("project_id", ["../../x", "a/b", "a\\b", "..", ".", "", "  ", "x/.."])
    def test_path_like_ids_are_rejected(self, project_id: str) -> None:
        assert not is_valid_project_id(project_id)

    def test_project_dir_refuses_traversal(self, layout: ProjectLayout) -> None:
        with pytest.raises(ValueError, match="Invalid project id"):
            layout.project_dir("../../x")

    def test_initialize_refuses_traversal(self, store: StatusStore, layout: ProjectLayout) -> None:
        with pytest.raises(ValueError):
            store.initialize("../../x")

        assert not (layout.outputs_dir.parent / "x").exists()
