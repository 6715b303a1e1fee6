"""Loudness analysis over the most recent audio frame."""

import logging
from typing import Optional

import numpy as np


logger = logging.getLogger(__name__)


class LoudnessAnalyser:
    """Keeps the latest frame of samples and reports its RMS loudness."""

    def __init__(self, frame_size: int = 2048, dtype=np.int16):
        self.frame_size = frame_size
        self.dtype = np.dtype(dtype)
        # Full-scale magnitude, so samples land in [-1, 1]
        self.scale = float(-np.iinfo(self.dtype).min)
        self._frame: Optional[np.ndarray] = np.zeros(0, dtype=np.float64)

    @property
    def released(self) -> bool:
        return self._frame is None

    def feed(self, audio_chunk: bytes) -> None:
        """Append PCM audio, keeping only the newest ``frame_size`` samples."""
        if self._frame is None:
            raise RuntimeError("Analyser already released")
        if not audio_chunk:
            return
        samples = np.frombuffer(audio_chunk, dtype=self.dtype).astype(np.float64) / self.scale
        self._frame = np.concatenate((self._frame, samples))[-self.frame_size:]

    def loudness(self) -> float:
        """RMS amplitude of the current frame in [0, 1]; 0.0 before any audio arrives."""
        if self._frame is None:
            raise RuntimeError("Analyser already released")
        if self._frame.size == 0:
            return 0.0
        return float(np.sqrt(np.mean(np.square(self._frame))))

    def release(self) -> None:
        self._frame = None
