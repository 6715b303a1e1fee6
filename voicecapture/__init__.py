"""Voice-activity-triggered microphone capture."""

from .audio.microphone import CaptureUnavailable
from .controller import VoiceCaptureController
from .models.capture import CaptureResult, CaptureSettings, CaptureState, StopReason

__all__ = [
    "VoiceCaptureController",
    "CaptureUnavailable",
    "CaptureResult",
    "CaptureSettings",
    "CaptureState",
    "StopReason",
]
