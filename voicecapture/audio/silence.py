"""Silence detection that decides when a recording should auto-stop."""

import logging
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


class SilenceDecision(Enum):
    """What the controller should do with the auto-stop timer after a tick."""
    NONE = "none"
    ARM = "arm"
    CANCEL = "cancel"


class SilenceMonitor:
    """Tracks silence across ticks.

    The monitor does not own the timer; it tells the caller when to arm it
    (first silent tick after the grace period) and when to cancel it (voice
    resumed).
    """

    def __init__(self, silence_threshold: float = 0.015, min_recording_time: float = 0.8):
        self.silence_threshold = silence_threshold
        self.min_recording_time = min_recording_time

        self.silence_since: Optional[float] = None
        self.last_loudness = 0.0

    @property
    def is_silent(self) -> bool:
        return self.silence_since is not None

    def update(self, loudness: float, elapsed: float) -> SilenceDecision:
        """Evaluate one tick.

        Args:
            loudness: RMS loudness of the current frame
            elapsed: Seconds since recording started
        """
        self.last_loudness = loudness

        if elapsed < self.min_recording_time:
            return SilenceDecision.NONE

        if loudness < self.silence_threshold:
            if self.silence_since is None:
                self.silence_since = elapsed
                logger.debug(f"Silence started at {elapsed:.3f}s (loudness {loudness:.4f})")
                return SilenceDecision.ARM
            return SilenceDecision.NONE

        if self.silence_since is not None:
            logger.debug(f"Voice resumed at {elapsed:.3f}s (loudness {loudness:.4f})")
            self.silence_since = None
            return SilenceDecision.CANCEL
        return SilenceDecision.NONE

    def reset(self) -> None:
        self.silence_since = None
        self.last_loudness = 0.0
