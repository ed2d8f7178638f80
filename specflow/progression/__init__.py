"""Workflow progression module."""

from .controller import ProgressionController

__all__ = ["ProgressionController"]
