"""Microphone acquisition through PyAudio."""

import logging
from typing import Optional

import numpy as np
import pyaudio


logger = logging.getLogger(__name__)


class CaptureUnavailable(RuntimeError):
    """The microphone could not be acquired (missing device or access denied)."""


# PCM formats the recorder can write to WAV, with their numpy sample type
SAMPLE_DTYPES = {
    pyaudio.paInt16: np.int16,
    pyaudio.paInt32: np.int32,
}


class MicrophoneHandle:
    """Exclusive handle on an open PyAudio input stream."""

    def __init__(
        self,
        pyaudio_instance: pyaudio.PyAudio,
        stream: pyaudio.Stream,
        sample_rate: int,
        channels: int,
        sample_width: int,
    ):
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = pyaudio_instance
        self.stream: Optional[pyaudio.Stream] = stream
        self.sample_rate = sample_rate
        self.channels = channels
        self.sample_width = sample_width

    @property
    def active_tracks(self) -> int:
        """Number of live input streams held by this handle (0 or 1)."""
        return 0 if self.stream is None else 1

    def read_available(self) -> bytes:
        """Read every frame buffered by the device since the last read, without blocking."""
        if self.stream is None:
            return b""
        frames = self.stream.get_read_available()
        if frames <= 0:
            return b""
        return self.stream.read(frames, exception_on_overflow=False)

    def release(self) -> None:
        """Stop and close the stream, then terminate PyAudio. Safe to call repeatedly."""
        stream, self.stream = self.stream, None
        instance, self.pyaudio_instance = self.pyaudio_instance, None
        try:
            if stream is not None:
                stream.stop_stream()
                stream.close()
        finally:
            if instance is not None:
                instance.terminate()
        if stream is not None:
            logger.info("Microphone released")


class Microphone:
    """Factory for exclusive microphone handles."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
        device_index: Optional[int] = None,
    ):
        """Initialize microphone parameters.

        Args:
            sample_rate: Audio sample rate (16kHz for speech models)
            chunk_size: Frames per device buffer
            channels: Number of audio channels (1 for mono)
            format: PyAudio sample format (16-bit signed int)
            device_index: Input device, or None for the system default
        """
        if format not in SAMPLE_DTYPES:
            raise ValueError(f"Unsupported sample format: {format}")
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format
        self.device_index = device_index

    @property
    def sample_dtype(self):
        """numpy dtype of one sample in the configured format."""
        return SAMPLE_DTYPES[self.format]

    def acquire(self) -> MicrophoneHandle:
        """Open the input stream.

        Raises:
            CaptureUnavailable: if no device is present or access is denied.
        """
        instance = None
        try:
            instance = pyaudio.PyAudio()
            stream = instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.chunk_size,
                stream_callback=None,
            )
        except Exception as e:
            if instance is not None:
                instance.terminate()
            logger.error(f"Could not open microphone: {e}")
            raise CaptureUnavailable(f"Could not access microphone: {e}") from e

        sample_width = instance.get_sample_size(self.format)
        logger.info(f"Microphone opened: {self.sample_rate}Hz, "
                    f"{self.channels} channel(s), {self.chunk_size} frames/buffer")
        return MicrophoneHandle(instance, stream, self.sample_rate, self.channels, sample_width)

    def is_available(self) -> bool:
        """Check if the microphone can be opened right now."""
        try:
            handle = self.acquire()
        except CaptureUnavailable as e:
            logger.debug(f"Microphone not available: {e}")
            return False
        handle.release()
        return True
