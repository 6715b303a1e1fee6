"""Chunk recorder that finalizes a capture into a single WAV clip."""

import io
import wave
import logging
from datetime import datetime
from typing import List, Optional

from ..models.capture import CaptureResult, StopReason


logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"


class ChunkRecorder:
    """Buffers raw PCM chunks for the lifetime of one capture session."""

    def __init__(self, sample_rate: int = 16000, channels: int = 1, sample_width: int = 2):
        self.sample_rate = sample_rate
        self.channels = channels
        self.sample_width = sample_width
        self.mime_type = WAV_MIME_TYPE

        self.chunks: List[bytes] = []
        self.started_at: Optional[datetime] = None
        self.is_recording = False

    def start(self) -> None:
        self.chunks = []
        self.started_at = datetime.now()
        self.is_recording = True

    def append(self, audio_chunk: bytes) -> None:
        """Buffer a chunk; empty chunks are dropped."""
        if not self.is_recording:
            raise RuntimeError("Recorder is not recording")
        if audio_chunk:
            self.chunks.append(audio_chunk)

    @property
    def buffered_bytes(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    @property
    def duration_seconds(self) -> float:
        bytes_per_second = self.sample_rate * self.channels * self.sample_width
        return self.buffered_bytes / bytes_per_second

    def finalize(self, stop_reason: StopReason = StopReason.MANUAL) -> CaptureResult:
        """Stop recording and return the buffered audio as one WAV blob."""
        if not self.is_recording:
            raise RuntimeError("Recorder is not recording")

        buffer = io.BytesIO()
        with wave.open(buffer, 'wb') as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(self.sample_width)
            wf.setframerate(self.sample_rate)
            for chunk in self.chunks:
                wf.writeframes(chunk)

        result = CaptureResult(
            data=buffer.getvalue(),
            mime_type=self.mime_type,
            sample_rate=self.sample_rate,
            channels=self.channels,
            sample_width=self.sample_width,
            duration_seconds=self.duration_seconds,
            chunk_count=len(self.chunks),
            started_at=self.started_at,
            stop_reason=stop_reason,
        )
        logger.info(f"Recording finalized: {result.chunk_count} chunks, "
                    f"{result.duration_seconds:.2f}s, {result.size_bytes} bytes")
        self.discard()
        return result

    def discard(self) -> None:
        self.chunks = []
        self.is_recording = False
