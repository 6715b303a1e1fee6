"""Pytest configuration and fixtures for voicecapture tests."""

import pytest
import tempfile
import logging
from unittest.mock import Mock, patch
import numpy as np

from voicecapture.models.capture import CaptureSettings


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_addoption(parser):
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that need a real microphone",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without audio hardware")
    config.addinivalue_line("markers", "integration: end-to-end capture flows against a fake device")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-hardware"):
        return
    skip_hardware = pytest.mark.skip(reason="needs --run-hardware")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


class FakeAudioDevice:
    """Shared state for fake input streams: the loudness they currently produce."""

    def __init__(self, frames_per_read: int = 256):
        self.level = 0.0
        self.frames_per_read = frames_per_read
        self.failing_reads = 0
        self.streams = []


class FakeInputStream:
    """Stands in for pyaudio.Stream, producing a square wave at ``device.level``.

    A square wave of amplitude A has an RMS of exactly A.
    """

    def __init__(self, device: FakeAudioDevice):
        self.device = device
        self.active = True
        self.closed = False
        self.stop_calls = 0
        self.close_calls = 0

    def get_read_available(self):
        if self.closed:
            raise OSError("Stream closed")
        return self.device.frames_per_read

    def read(self, num_frames, exception_on_overflow=True):
        if self.closed:
            raise OSError("Stream closed")
        if self.device.failing_reads > 0:
            self.device.failing_reads -= 1
            raise OSError("Input overflowed")
        amplitude = int(self.device.level * 32767)
        samples = np.empty(num_frames, dtype=np.int16)
        samples[0::2] = amplitude
        samples[1::2] = -amplitude
        return samples.tobytes()

    def stop_stream(self):
        self.active = False
        self.stop_calls += 1

    def close(self):
        self.closed = True
        self.close_calls += 1


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing (440 Hz sine, full scale)."""
    sample_rate = 16000
    duration = 1024 / sample_rate

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * 440 * t)

    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def fake_device():
    return FakeAudioDevice()


@pytest.fixture
def mock_pyaudio(fake_device):
    """Mock PyAudio so every opened stream reads from ``fake_device``."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()

        def open_stream(**kwargs):
            stream = FakeInputStream(fake_device)
            fake_device.streams.append(stream)
            return stream

        mock_pyaudio_instance.open.side_effect = open_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'device': fake_device,
            'streams': fake_device.streams,
        }


@pytest.fixture
def fast_settings():
    """Scaled-down timings so capture flows finish in well under a second."""
    return CaptureSettings(
        silence_threshold=0.015,
        silence_duration=0.3,
        min_recording_time=0.1,
        tick_interval=0.01,
        analyser_frame_size=256,
    )
