"""Audio acquisition, analysis and recording."""

from .microphone import Microphone, MicrophoneHandle, CaptureUnavailable
from .analyser import LoudnessAnalyser
from .recorder import ChunkRecorder
from .silence import SilenceMonitor, SilenceDecision
from .capture_pub import CapturePublisher

__all__ = [
    'Microphone',
    'MicrophoneHandle',
    'CaptureUnavailable',
    'LoudnessAnalyser',
    'ChunkRecorder',
    'SilenceMonitor',
    'SilenceDecision',
    'CapturePublisher',
]
