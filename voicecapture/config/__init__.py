"""Simple YAML configuration loader for voicecapture."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..models.capture import CaptureSettings

logger = logging.getLogger(__name__)

# YAML keys under ``capture:`` and ``audio:`` that map onto CaptureSettings
CAPTURE_KEYS = ("silence_threshold", "silence_duration", "min_recording_time", "tick_interval")
AUDIO_KEYS = ("sample_rate", "chunk_size", "channels", "analyser_frame_size", "device_index")


class VoiceCaptureConfig:
    """voicecapture configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults are used.
        """
        if config_path is None:
            self.config_file: Optional[Path] = None
            self.config: Dict[str, Any] = {}
            logger.info("No configuration file given, using defaults")
            return

        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'storage' in config and 'data_directory' in config['storage']:
            data_dir = config['storage']['data_directory']
            if not os.path.isabs(data_dir):
                config['storage']['data_directory'] = str(config_dir / data_dir)

        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'capture.silence_threshold').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'capture.silence_duration')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_capture_settings(self) -> CaptureSettings:
        """Build capture settings from the ``capture`` and ``audio`` sections.

        Raises:
            ValueError: if a value is out of range
        """
        overrides = {}
        for key in CAPTURE_KEYS:
            value = self.get(f'capture.{key}')
            if value is not None:
                overrides[key] = value
        for key in AUDIO_KEYS:
            value = self.get(f'audio.{key}')
            if value is not None:
                overrides[key] = value
        return CaptureSettings(**overrides)

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())
