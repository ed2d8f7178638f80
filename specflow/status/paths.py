"""Filesystem layout of project output folders.

    <outputs>/projects/<project_id>/
        project_status.json
        questions/<role>_questions.json
        documents/prd.md, acceptance_criteria.json, design_brief.md, ...
"""

from pathlib import Path

PROJECTS_DIR = "projects"
STATUS_FILENAME = "project_status.json"


def is_valid_project_id(project_id: str) -> bool:
    """A project id names exactly one folder directly under projects/."""
    if not isinstance(project_id, str) or not project_id.strip():
        return False
    if "/" in project_id or "\\" in project_id or ".." in project_id:
        return False
    return project_id != "."


class ProjectLayout:
    """Resolves project folders and files under an outputs root."""

    def __init__(self, outputs_dir: Path) -> None:
        self.outputs_dir = Path(outputs_dir)

    @property
    def projects_dir(self) -> Path:
        return self.outputs_dir / PROJECTS_DIR

    def project_dir(self, project_id: str) -> Path:
        if not is_valid_project_id(project_id):
            raise ValueError(f"Invalid project id: {project_id!r}")
        return self.projects_dir / project_id

    def status_path(self, project_id: str) -> Path:
        return self.project_dir(project_id) / STATUS_FILENAME

    def artifact_path(self, project_id: str, directory: str, filename: str) -> Path:
        return self.project_dir(project_id) / directory / filename

    def locate(self, path: Path) -> tuple[str, str, str] | None:
        """Split a path into (project_id, parent directory, filename).

        Returns None for anything outside a project's folder. Files directly
        in the project folder get an empty directory name.
        """
        try:
            relative = Path(path).resolve().relative_to(self.outputs_dir.resolve())
        except ValueError:
            return None
        parts = relative.parts
        if len(parts) < 3 or parts[0] != PROJECTS_DIR or not is_valid_project_id(parts[1]):
            return None
        directory = parts[-2] if len(parts) > 3 else ""
        return parts[1], directory, parts[-1]
