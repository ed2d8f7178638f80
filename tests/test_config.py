"""Tests for WorkflowConfig and logging setup."""

import json
import logging
from pathlib import Path

import pytest

from specflow.config import WorkflowConfig, configure_logging


class TestWorkflowConfig:

    def test_defaults_when_no_file(self, tmp_path: Path) -> None:
        config = WorkflowConfig.load(tmp_path)

        assert config.stale_after_seconds == 600
        assert config.signal_floor_bytes == 50
        assert config.debounce_seconds == 0.1
        assert config.min_phase_seconds == 5.0

    def test_save_then_load(self, tmp_path: Path) -> None:
        WorkflowConfig(outputs_dir="out", stale_after_seconds=120).save(tmp_path)

        config = WorkflowConfig.load(tmp_path)

        assert config.outputs_dir == "out"
        assert config.stale_after_seconds == 120

    def test_unknown_keys_are_ignored(self, tmp_path: Path) -> None:
        config_dir = tmp_path / ".specflow"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(
            json.dumps({"signal_floor_bytes": 10, "theme": "dark"}), encoding="utf-8"
        )

        config = WorkflowConfig.load(tmp_path)

        assert config.signal_floor_bytes == 10

    def test_outputs_path_relative_to_workspace(self, tmp_path: Path) -> None:
        assert WorkflowConfig().outputs_path(tmp_path) == tmp_path / "specflow" / "outputs"

    def test_outputs_path_absolute(self, tmp_path: Path) -> None:
        config = WorkflowConfig(outputs_dir=str(tmp_path / "abs"))

        assert config.outputs_path(Path("/ignored")) == tmp_path / "abs"


class TestConfigureLogging:

    def test_debug_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        monkeypatch.setenv("SPECFLOW_DEBUG", "true")

        configure_logging()

        assert calls[0]["level"] == logging.DEBUG

    def test_warning_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        monkeypatch.delenv("SPECFLOW_DEBUG", raising=False)

        configure_logging()

        assert calls[0]["level"] == logging.WARNING
