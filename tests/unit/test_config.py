"""Unit tests for VoiceCaptureConfig."""

import pytest
from pathlib import Path

from voicecapture.config import VoiceCaptureConfig
from voicecapture.models.capture import CaptureSettings


def write_config(directory, text) -> str:
    path = Path(directory) / "voicecapture.yaml"
    path.write_text(text)
    return str(path)


@pytest.mark.unit
class TestVoiceCaptureConfig:
    """Test cases for configuration loading."""

    def test_defaults_without_file(self):
        config = VoiceCaptureConfig()

        assert config.config_file is None
        assert config.get_capture_settings() == CaptureSettings()

    def test_default_capture_settings(self):
        settings = CaptureSettings()

        assert settings.silence_threshold == 0.015
        assert settings.silence_duration == 1.8
        assert settings.min_recording_time == 0.8
        assert settings.tick_interval == pytest.approx(1 / 60)

    def test_load_capture_settings(self, temp_data_dir):
        path = write_config(temp_data_dir, (
            "capture:\n"
            "  silence_threshold: 0.02\n"
            "  silence_duration: 2.5\n"
            "audio:\n"
            "  sample_rate: 44100\n"
            "  device_index: 2\n"
        ))

        settings = VoiceCaptureConfig(path).get_capture_settings()

        assert settings.silence_threshold == 0.02
        assert settings.silence_duration == 2.5
        assert settings.min_recording_time == 0.8
        assert settings.sample_rate == 44100
        assert settings.device_index == 2

    def test_relative_paths_resolved(self, temp_data_dir):
        path = write_config(temp_data_dir, (
            "storage:\n"
            "  data_directory: data\n"
            "logging:\n"
            "  file_path: logs/app.log\n"
        ))

        config = VoiceCaptureConfig(path)

        assert config.get_data_directory() == str((Path(temp_data_dir) / "data").absolute())
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "logs/app.log")

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            VoiceCaptureConfig(f"{temp_data_dir}/missing.yaml")

    def test_empty_file(self, temp_data_dir):
        path = write_config(temp_data_dir, "")

        with pytest.raises(ValueError):
            VoiceCaptureConfig(path)

    def test_invalid_yaml(self, temp_data_dir):
        path = write_config(temp_data_dir, "capture: [unclosed\n")

        with pytest.raises(ValueError):
            VoiceCaptureConfig(path)

    def test_out_of_range_setting(self, temp_data_dir):
        path = write_config(temp_data_dir, "capture:\n  silence_threshold: 1.5\n")

        with pytest.raises(ValueError):
            VoiceCaptureConfig(path).get_capture_settings()

    def test_get_and_set_dot_notation(self):
        config = VoiceCaptureConfig()

        config.set('capture.silence_duration', 3.0)

        assert config.get('capture.silence_duration') == 3.0
        assert config.get('capture.missing', 'fallback') == 'fallback'
        assert config.get_capture_settings().silence_duration == 3.0
