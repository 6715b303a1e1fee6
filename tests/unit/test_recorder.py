"""Unit tests for ChunkRecorder."""

import io
import wave
import pytest

from voicecapture.audio.recorder import ChunkRecorder, WAV_MIME_TYPE
from voicecapture.models.capture import StopReason


@pytest.mark.unit
class TestChunkRecorder:
    """Test cases for ChunkRecorder."""

    def test_start(self):
        recorder = ChunkRecorder()
        recorder.start()

        assert recorder.is_recording is True
        assert recorder.started_at is not None
        assert recorder.chunks == []

    def test_append_drops_empty_chunks(self, sample_audio_chunk):
        recorder = ChunkRecorder()
        recorder.start()

        recorder.append(sample_audio_chunk)
        recorder.append(b'')
        recorder.append(sample_audio_chunk)

        assert len(recorder.chunks) == 2
        assert recorder.buffered_bytes == len(sample_audio_chunk) * 2

    def test_append_when_not_recording(self, sample_audio_chunk):
        recorder = ChunkRecorder()

        with pytest.raises(RuntimeError):
            recorder.append(sample_audio_chunk)

    def test_duration(self, sample_audio_chunk):
        recorder = ChunkRecorder(sample_rate=16000)
        recorder.start()
        recorder.append(sample_audio_chunk)  # 1024 samples

        assert recorder.duration_seconds == pytest.approx(1024 / 16000)

    def test_finalize_produces_wav(self, sample_audio_chunk):
        recorder = ChunkRecorder(sample_rate=16000, channels=1, sample_width=2)
        recorder.start()
        for _ in range(3):
            recorder.append(sample_audio_chunk)

        result = recorder.finalize(StopReason.AUTO)

        assert result.mime_type == WAV_MIME_TYPE
        assert result.chunk_count == 3
        assert result.stop_reason is StopReason.AUTO
        assert result.duration_seconds == pytest.approx(3 * 1024 / 16000)
        with wave.open(io.BytesIO(result.data), 'rb') as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 16000
            assert wf.readframes(wf.getnframes()) == sample_audio_chunk * 3

    def test_finalize_resets_recorder(self, sample_audio_chunk):
        recorder = ChunkRecorder()
        recorder.start()
        recorder.append(sample_audio_chunk)

        recorder.finalize()

        assert recorder.is_recording is False
        assert recorder.chunks == []
        with pytest.raises(RuntimeError):
            recorder.finalize()

    def test_result_is_immutable(self, sample_audio_chunk):
        recorder = ChunkRecorder()
        recorder.start()
        recorder.append(sample_audio_chunk)
        result = recorder.finalize()

        with pytest.raises(AttributeError):
            result.data = b''

    def test_discard(self, sample_audio_chunk):
        recorder = ChunkRecorder()
        recorder.start()
        recorder.append(sample_audio_chunk)

        recorder.discard()

        assert recorder.is_recording is False
        assert recorder.buffered_bytes == 0
