"""Command-line entry point: record one utterance and save it."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .audio.capture_pub import CapturePublisher
from .audio.microphone import Microphone, CaptureUnavailable
from .config import VoiceCaptureConfig
from .controller import VoiceCaptureController
from .models.capture import CaptureResult
from .storage.file_manager import ClipStore

logger = logging.getLogger(__name__)


class Recorder:
    """Records a single utterance with silence auto-stop."""

    def __init__(self, config: VoiceCaptureConfig, console: Optional[Console] = None):
        self.config = config
        self.console = console or Console()
        self.settings = config.get_capture_settings()
        self.clip_store = ClipStore(config.get_data_directory())
        self.controller = VoiceCaptureController(self.settings, publisher=CapturePublisher())

    async def record_once(self, max_wait: float) -> Optional[CaptureResult]:
        """Record until silence is detected or ``max_wait`` seconds pass."""
        auto_stopped = asyncio.Event()
        clips = []

        def on_auto_stop(result: CaptureResult) -> None:
            clips.append(result)
            auto_stopped.set()

        try:
            await self.controller.start(on_auto_stop=on_auto_stop)
            self.console.print("[bold red]Recording[/] - speak now, stop talking to finish")
            try:
                await asyncio.wait_for(auto_stopped.wait(), timeout=max_wait)
            except asyncio.TimeoutError:
                logger.info(f"No silence detected within {max_wait}s, stopping")
                result = await self.controller.stop()
                if result is not None:
                    clips.append(result)
                else:
                    # Silence won the race; let the auto-stop deliver the clip
                    await self.controller.wait_for_auto_stop()
        finally:
            self.controller.close()

        return clips[0] if clips else None

    def report(self, result: CaptureResult, clip_id: str) -> None:
        table = Table(title="Captured clip")
        table.add_column("Field")
        table.add_column("Value")
        table.add_row("Clip", clip_id)
        table.add_row("File", str(self.clip_store.get_clip_path(clip_id)))
        table.add_row("Duration", f"{result.duration_seconds:.2f}s")
        table.add_row("Size", f"{result.size_bytes} bytes")
        table.add_row("Stopped", result.stop_reason.value)
        self.console.print(table)


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/voicecapture.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("voicecapture starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for voicecapture."""
    parser = argparse.ArgumentParser(
        description="voicecapture - record one utterance, stopping automatically on silence"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: INFO)"
    )

    parser.add_argument(
        "--max-wait",
        type=float,
        default=30.0,
        help="Stop after this many seconds even if no silence is detected (default: 30)"
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Only check that the microphone can be opened"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="voicecapture v0.1.0"
    )

    args = parser.parse_args()
    console = Console()

    try:
        config = VoiceCaptureConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error:[/] {e}")
        sys.exit(1)
    setup_logging(config, args.log_level)

    if args.check:
        settings = config.get_capture_settings()
        microphone = Microphone(settings.sample_rate, settings.chunk_size,
                                settings.channels, device_index=settings.device_index)
        available = microphone.is_available()
        console.print("Microphone: " + ("[green]Ready[/]" if available else "[red]Not Available[/]"))
        sys.exit(0 if available else 1)

    recorder = Recorder(config, console)
    try:
        result = asyncio.run(recorder.record_once(args.max_wait))
    except CaptureUnavailable as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    except KeyboardInterrupt:
        recorder.controller.close()
        console.print("\nCancelled")
        sys.exit(130)

    if result is None:
        console.print("[yellow]Nothing was recorded[/]")
        return

    clip_id = recorder.clip_store.save_clip(result)
    recorder.report(result, clip_id)


if __name__ == "__main__":
    main()
