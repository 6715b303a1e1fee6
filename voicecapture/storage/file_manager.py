"""File management for captured clips."""

import json
import logging
import shutil
import random
import string
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, List
from dataclasses import asdict

from ..models.capture import CaptureResult
from ..models.clip import ClipInfo


logger = logging.getLogger(__name__)

CLIP_AUDIO_FILE = "clip.wav"
CLIP_INFO_FILE = "clip_info.json"


class ClipStore:
    """Stores finished clips, one directory per clip."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize clip store with data directory.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.clips_dir = self.data_dir / "clips"

        self._ensure_directories()

        logger.info(f"ClipStore initialized with data_dir: {self.data_dir}")

    def _ensure_directories(self) -> None:
        for directory in [self.data_dir, self.clips_dir]:
            directory.mkdir(parents=True, exist_ok=True)

    def _new_clip_id(self) -> str:
        # Random suffix keeps clips from the same second apart
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        return f"{timestamp}_{random_suffix}"

    def save_clip(self, result: CaptureResult) -> str:
        """Write a clip and its info file.

        Args:
            result: Finished capture

        Returns:
            Clip ID
        """
        clip_id = self._new_clip_id()
        clip_path = self.clips_dir / clip_id
        clip_path.mkdir(exist_ok=True)

        audio_file_path = clip_path / CLIP_AUDIO_FILE
        audio_file_path.write_bytes(result.data)

        info = ClipInfo(
            clip_id=clip_id,
            started_at=result.started_at,
            duration_seconds=result.duration_seconds,
            audio_file=CLIP_AUDIO_FILE,
            file_size_bytes=result.size_bytes,
            mime_type=result.mime_type,
            sample_rate=result.sample_rate,
            chunk_count=result.chunk_count,
            stop_reason=result.stop_reason.value,
        )
        info_dict = asdict(info)
        info_dict['started_at'] = info.started_at.isoformat()

        with open(clip_path / CLIP_INFO_FILE, 'w') as f:
            json.dump(info_dict, f, indent=2)

        logger.info(f"Clip saved: {audio_file_path} ({result.size_bytes} bytes)")
        return clip_id

    def load_clip_info(self, clip_id: str) -> Optional[ClipInfo]:
        """Load clip information from JSON file.

        Returns:
            ClipInfo object or None if not found
        """
        info_file = self.clips_dir / clip_id / CLIP_INFO_FILE

        if not info_file.exists():
            logger.warning(f"Clip info file not found: {info_file}")
            return None

        with open(info_file, 'r') as f:
            data = json.load(f)

        data['started_at'] = datetime.fromisoformat(data['started_at'])
        return ClipInfo(**data)

    def list_clips(self) -> List[str]:
        """List all clip IDs, oldest first."""
        clips = [
            path.name for path in self.clips_dir.iterdir()
            if path.is_dir() and (path / CLIP_INFO_FILE).exists()
        ]
        clips.sort()
        logger.debug(f"Found {len(clips)} clips")
        return clips

    def get_clip_path(self, clip_id: str) -> Path:
        """Get full path to a clip's audio file."""
        return self.clips_dir / clip_id / CLIP_AUDIO_FILE

    def cleanup_old_clips(self, max_age_days: int = 30) -> int:
        """Delete clips older than ``max_age_days``.

        Returns:
            Number of clips removed
        """
        cutoff_time = datetime.now().timestamp() - (max_age_days * 24 * 60 * 60)
        cleaned_count = 0

        for clip_path in self.clips_dir.iterdir():
            if clip_path.is_dir() and clip_path.stat().st_mtime < cutoff_time:
                shutil.rmtree(clip_path)
                cleaned_count += 1
                logger.info(f"Cleaned up old clip: {clip_path}")

        logger.info(f"Cleaned up {cleaned_count} old clips")
        return cleaned_count

    def get_storage_stats(self) -> Dict[str, Any]:
        """Get storage usage statistics."""
        total_size = 0
        clip_count = 0

        for clip_path in self.clips_dir.iterdir():
            if clip_path.is_dir():
                clip_count += 1
                for file_path in clip_path.rglob("*"):
                    if file_path.is_file():
                        total_size += file_path.stat().st_size

        return {
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "clip_count": clip_count,
            "data_directory": str(self.data_dir)
        }
