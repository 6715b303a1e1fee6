"""Real hardware tests for voice capture.

These tests need an actual microphone and a quiet room.

Run with: pytest tests/hardware/ -v -s --run-hardware
"""

import asyncio
import pytest

from voicecapture.audio.microphone import Microphone
from voicecapture.controller import VoiceCaptureController
from voicecapture.models.capture import CaptureSettings, StopReason


@pytest.mark.hardware
class TestRealMicrophone:
    """Tests that require real audio hardware to run."""

    def test_microphone_available(self):
        assert Microphone().is_available() is True

    def test_quiet_room_auto_stops(self):
        """In a quiet room the capture stops on its own after grace + hold."""
        print("\nStay quiet for a few seconds...")
        settings = CaptureSettings(silence_threshold=0.05)

        async def scenario():
            done = asyncio.Event()
            results = []

            def on_auto_stop(result):
                results.append(result)
                done.set()

            controller = VoiceCaptureController(settings)
            await controller.start(on_auto_stop=on_auto_stop)
            try:
                await asyncio.wait_for(done.wait(), timeout=10)
            finally:
                controller.close()
            return results

        results = asyncio.run(scenario())

        assert len(results) == 1
        assert results[0].stop_reason is StopReason.AUTO
        assert results[0].duration_seconds >= settings.min_recording_time
