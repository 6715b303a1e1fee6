"""Capture-related data models."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional


class CaptureState(Enum):
    """Lifecycle state of a capture session."""
    IDLE = "idle"
    STARTING = "starting"
    RECORDING = "recording"
    STOPPING = "stopping"


class StopReason(str, Enum):
    """Why a recording was stopped."""
    MANUAL = "manual"
    AUTO = "auto"


@dataclass
class CaptureSettings:
    """Tunable parameters for voice capture.

    Durations are in seconds. ``silence_threshold`` is an RMS amplitude in the
    normalized [-1, 1] sample domain.
    """
    silence_threshold: float = 0.015
    silence_duration: float = 1.8
    min_recording_time: float = 0.8
    tick_interval: float = 1 / 60
    sample_rate: int = 16000
    chunk_size: int = 1024
    channels: int = 1
    analyser_frame_size: int = 2048
    device_index: Optional[int] = None

    def __post_init__(self):
        if not 0 < self.silence_threshold <= 1:
            raise ValueError(f"silence_threshold must be in (0, 1], got {self.silence_threshold}")
        if self.silence_duration < 0:
            raise ValueError(f"silence_duration must be >= 0, got {self.silence_duration}")
        if self.min_recording_time < 0:
            raise ValueError(f"min_recording_time must be >= 0, got {self.min_recording_time}")
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be > 0, got {self.tick_interval}")
        if self.analyser_frame_size <= 0:
            raise ValueError(f"analyser_frame_size must be > 0, got {self.analyser_frame_size}")


@dataclass(frozen=True)
class CaptureResult:
    """A finished audio clip, produced once per capture session."""
    data: bytes
    mime_type: str
    sample_rate: int
    channels: int
    sample_width: int
    duration_seconds: float
    chunk_count: int
    started_at: datetime
    stop_reason: StopReason = StopReason.MANUAL

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class CaptureStats:
    """Snapshot of the controller's current capture."""
    state: CaptureState
    duration_seconds: float
    buffered_chunks: int
    buffered_bytes: int
    last_loudness: float
    silent: bool


@dataclass
class CaptureSession:
    """Exclusive owner of one microphone handle and one in-progress recording."""
    session_id: str
    state: CaptureState = CaptureState.IDLE
    start_timestamp: Optional[float] = None
    started_at: Optional[datetime] = None
    on_auto_stop: Optional[Callable[[CaptureResult], Any]] = None
    cancel_requested: bool = False

    # Owned resources, released on every exit path
    microphone: Any = None
    analyser: Any = None
    recorder: Any = None
    silence_monitor: Any = None
    monitor_task: Optional[asyncio.Task] = None
    silence_timer: Optional[asyncio.TimerHandle] = field(default=None, repr=False)

    @property
    def buffered_chunks(self) -> list:
        if self.recorder is None:
            return []
        return self.recorder.chunks

    @property
    def silence_since(self) -> Optional[float]:
        if self.silence_monitor is None:
            return None
        return self.silence_monitor.silence_since
