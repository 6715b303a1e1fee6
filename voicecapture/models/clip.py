"""Stored clip models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ClipInfo:
    """Information about a saved clip."""
    clip_id: str
    started_at: datetime
    duration_seconds: float
    audio_file: str
    file_size_bytes: int
    mime_type: str
    sample_rate: int
    chunk_count: int
    stop_reason: str
