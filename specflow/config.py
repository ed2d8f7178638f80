"""Workflow configuration management."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

CONFIG_DIR = ".specflow"
CONFIG_FILE = "config.json"
DEBUG_ENV_VAR = "SPECFLOW_DEBUG"


@dataclass
class WorkflowConfig:
    outputs_dir: str = "specflow/outputs"
    debounce_seconds: float = 0.1
    poll_interval_seconds: float = 0.3
    signal_floor_bytes: int = 50
    stale_after_seconds: int = 600  # 10 minutes
    min_phase_seconds: float = 5.0

    @classmethod
    def load(cls, workspace: Path) -> "WorkflowConfig":
        config_path = workspace / CONFIG_DIR / CONFIG_FILE
        if config_path.exists():
            data = json.loads(config_path.read_text(encoding="utf-8"))
            return cls._from_dict(data)
        return cls()

    @classmethod
    def _from_dict(cls, data: dict) -> "WorkflowConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def save(self, workspace: Path) -> None:
        config_dir = workspace / CONFIG_DIR
        config_dir.mkdir(exist_ok=True)
        config_path = config_dir / CONFIG_FILE
        config_path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")

    def outputs_path(self, workspace: Path) -> Path:
        path = Path(self.outputs_dir)
        return path if path.is_absolute() else workspace / path


def configure_logging(debug: bool | None = None) -> None:
    """Route package logs to stderr; debug output only when SPECFLOW_DEBUG=true."""
    if debug is None:
        debug = os.environ.get(DEBUG_ENV_VAR, "").lower() == "true"
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
