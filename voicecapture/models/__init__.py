"""Data models for the voicecapture package."""

from .capture import (
    CaptureState,
    StopReason,
    CaptureSettings,
    CaptureResult,
    CaptureStats,
    CaptureSession,
)
from .events import CaptureEvent
from .clip import ClipInfo

__all__ = [
    "CaptureState",
    "StopReason",
    "CaptureSettings",
    "CaptureResult",
    "CaptureStats",
    "CaptureSession",
    "CaptureEvent",
    "ClipInfo",
]
