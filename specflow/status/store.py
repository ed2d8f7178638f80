"""Persistent per-project status records."""

import json
import logging
import os
import shutil
from datetime import datetime

from ..workflow.contracts import StatusRecord, create_initial_status
from .paths import ProjectLayout

logger = logging.getLogger(__name__)


class StatusStore:
    """Reads and writes whole StatusRecords, one JSON file per project.

    There is no locking: a read-modify-write split across two interleaved
    handlers loses the earlier write.
    """

    def __init__(self, layout: ProjectLayout) -> None:
        self.layout = layout

    def read(self, project_id: str) -> StatusRecord | None:
        """Retrieve status record. Missing or unreadable files give None."""
        path = self.layout.status_path(project_id)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return StatusRecord.from_dict(data)
        except (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Unreadable status file for {project_id}: {e}")
            return None

    def write(self, project_id: str, record: StatusRecord) -> StatusRecord:
        """Replace the persisted record, stamping last_updated_at."""
        record.last_updated_at = datetime.now()
        path = self.layout.status_path(project_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_name(f"{path.name}.tmp")
        try:
            temp_path.write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
            os.replace(temp_path, path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        logger.debug("Wrote status for %s at %s", project_id, record.current_phase_key)
        return record

    def initialize(self, project_id: str) -> StatusRecord:
        """Create and persist a fresh record for a new project."""
        return self.write(project_id, create_initial_status(project_id))

    def get_or_create(self, project_id: str) -> StatusRecord:
        record = self.read(project_id)
        if record is None:
            record = self.initialize(project_id)
        return record

    def exists(self, project_id: str) -> bool:
        return self.layout.status_path(project_id).exists()

    def delete(self, project_id: str) -> None:
        """Remove the project folder and its record."""
        project_dir = self.layout.project_dir(project_id)
        if project_dir.exists():
            shutil.rmtree(project_dir)
