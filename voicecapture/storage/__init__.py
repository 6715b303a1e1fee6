"""Clip storage."""

from .file_manager import ClipStore

__all__ = ["ClipStore"]
