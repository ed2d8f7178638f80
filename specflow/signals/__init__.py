"""Completion signal module."""

from .dispatcher import CompletionSignalDispatcher, SignalResult
from .watcher import ArtifactWatcher

__all__ = ["CompletionSignalDispatcher", "SignalResult", "ArtifactWatcher"]
