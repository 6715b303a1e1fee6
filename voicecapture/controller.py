"""Voice-activity-triggered capture controller.

Records from the microphone until the caller stops it or until the speaker
has been quiet for ``silence_duration`` seconds. Everything runs on one
asyncio event loop: a monitor task ticks at ``tick_interval``, pulls the
audio buffered by the device, feeds the recorder and the loudness analyser,
and arms or cancels the auto-stop timer.
"""

import asyncio
import inspect
import logging
import uuid
from typing import Any, Callable, Optional

from .audio.analyser import LoudnessAnalyser
from .audio.capture_pub import CapturePublisher
from .audio.microphone import Microphone, MicrophoneHandle
from .audio.recorder import ChunkRecorder
from .audio.silence import SilenceMonitor, SilenceDecision
from .models.capture import (
    CaptureResult,
    CaptureSession,
    CaptureSettings,
    CaptureState,
    CaptureStats,
    StopReason,
)


logger = logging.getLogger(__name__)

AutoStopCallback = Callable[[CaptureResult], Any]


class VoiceCaptureController:
    """Owns at most one capture session at a time."""

    def __init__(
        self,
        settings: Optional[CaptureSettings] = None,
        microphone: Optional[Microphone] = None,
        publisher: Optional[CapturePublisher] = None,
    ):
        """Initialize the controller.

        Args:
            settings: Capture tuning, defaults to ``CaptureSettings()``
            microphone: Microphone factory, built from ``settings`` if omitted
            publisher: Optional lifecycle event publisher
        """
        self.settings = settings or CaptureSettings()
        self.microphone = microphone or Microphone(
            sample_rate=self.settings.sample_rate,
            chunk_size=self.settings.chunk_size,
            channels=self.settings.channels,
            device_index=self.settings.device_index,
        )
        self.publisher = publisher

        self._session: Optional[CaptureSession] = None
        self._auto_stop_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> CaptureState:
        if self._session is None:
            return CaptureState.IDLE
        return self._session.state

    @property
    def is_recording(self) -> bool:
        return self.state is CaptureState.RECORDING

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    async def start(self, on_auto_stop: Optional[AutoStopCallback] = None) -> bool:
        """Acquire the microphone and start recording.

        Args:
            on_auto_stop: Called with the clip when silence ends the recording.
                May be a plain function or a coroutine function.

        Returns:
            True if a new session started, False if one was already active or
            the start was cancelled by ``stop()`` while the microphone was
            being acquired.

        Raises:
            CaptureUnavailable: if the microphone cannot be acquired.
        """
        if self._session is not None:
            logger.warning(f"Capture already {self._session.state.value}, ignoring start")
            return False

        session = CaptureSession(
            session_id=uuid.uuid4().hex[:12],
            state=CaptureState.STARTING,
            on_auto_stop=on_auto_stop,
        )
        self._session = session
        session.analyser = LoudnessAnalyser(
            frame_size=self.settings.analyser_frame_size,
            dtype=self.microphone.sample_dtype,
        )

        loop = asyncio.get_running_loop()
        acquisition = loop.run_in_executor(None, self.microphone.acquire)
        try:
            handle = await asyncio.shield(acquisition)
        except asyncio.CancelledError:
            acquisition.add_done_callback(_release_acquired_handle)
            self._release(session)
            raise
        except Exception as e:
            self._release(session)
            if self.publisher:
                self.publisher.publish_failed(session.session_id, str(e))
            raise

        session.microphone = handle
        if session.cancel_requested or session is not self._session:
            logger.info("Capture cancelled while acquiring the microphone")
            self._release(session)
            return False

        session.recorder = ChunkRecorder(
            sample_rate=handle.sample_rate,
            channels=handle.channels,
            sample_width=handle.sample_width,
        )
        session.silence_monitor = SilenceMonitor(
            silence_threshold=self.settings.silence_threshold,
            min_recording_time=self.settings.min_recording_time,
        )
        session.recorder.start()
        session.start_timestamp = loop.time()
        session.started_at = session.recorder.started_at
        session.state = CaptureState.RECORDING
        session.monitor_task = loop.create_task(self._monitor(session))

        logger.info(f"Capture started: session {session.session_id}")
        if self.publisher:
            self.publisher.publish_started(session.session_id)
        return True

    async def stop(self) -> Optional[CaptureResult]:
        """Stop recording and return the finished clip.

        Returns None when nothing is recording, when a stop is already in
        flight, or when called during microphone acquisition (the pending
        start is cancelled instead).
        """
        return await self._stop(StopReason.MANUAL)

    async def _stop(self, reason: StopReason) -> Optional[CaptureResult]:
        session = self._session
        if session is None:
            logger.warning("No capture in progress")
            return None
        if session.state is CaptureState.STOPPING:
            logger.debug("Stop already in progress")
            return None
        if session.state is CaptureState.STARTING:
            session.cancel_requested = True
            return None

        session.state = CaptureState.STOPPING
        logger.info(f"Stopping capture ({reason.value}): session {session.session_id}")
        self._cancel_silence_timer(session)

        task = session.monitor_task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            await asyncio.wait([task])

        if session is not self._session or session.microphone is None:
            # Torn down by close() while the monitor was winding down
            return None

        try:
            tail = session.microphone.read_available()
        except Exception as e:
            # Keep what is already buffered
            logger.warning(f"Final read failed, finalizing buffered audio: {e}")
            tail = b""

        try:
            session.recorder.append(tail)
            result = session.recorder.finalize(reason)
        finally:
            self._release(session)

        if self.publisher:
            self.publisher.publish_stopped(session.session_id, result)
        return result

    async def wait_for_auto_stop(self) -> None:
        """Wait for an auto-stop already in flight, including its callback."""
        task = self._auto_stop_task
        if task is not None and not task.done():
            await asyncio.wait([task])

    def close(self) -> None:
        """Release every resource held by the controller, discarding any recording."""
        session = self._session
        if session is None:
            return
        logger.info(f"Tearing down capture in state {session.state.value}")
        session.cancel_requested = True
        if session.recorder is not None:
            session.recorder.discard()
        self._release(session)

    async def __aenter__(self) -> "VoiceCaptureController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self):
        """Ensure the microphone is released on deletion."""
        if getattr(self, "_session", None) is not None:
            self.close()

    def get_capture_stats(self) -> CaptureStats:
        """Get current capture statistics."""
        session = self._session
        duration = 0.0
        chunks, size, loudness, silent = 0, 0, 0.0, False
        if session is not None:
            if session.recorder is not None:
                chunks = len(session.recorder.chunks)
                size = session.recorder.buffered_bytes
                duration = session.recorder.duration_seconds
            if session.silence_monitor is not None:
                loudness = session.silence_monitor.last_loudness
                silent = session.silence_monitor.is_silent

        return CaptureStats(
            state=self.state,
            duration_seconds=duration,
            buffered_chunks=chunks,
            buffered_bytes=size,
            last_loudness=loudness,
            silent=silent,
        )

    async def _monitor(self, session: CaptureSession) -> None:
        """Tick loop, alive only while the session is recording."""
        while session.state is CaptureState.RECORDING:
            try:
                self._tick(session)
            except Exception as e:
                if session.state is not CaptureState.RECORDING:
                    break
                logger.warning(f"Monitor tick failed: {e}")
            await asyncio.sleep(self.settings.tick_interval)
        logger.debug(f"Monitor exited for session {session.session_id}")

    def _tick(self, session: CaptureSession) -> None:
        audio_chunk = session.microphone.read_available()
        session.recorder.append(audio_chunk)
        session.analyser.feed(audio_chunk)

        loop = asyncio.get_running_loop()
        elapsed = loop.time() - session.start_timestamp
        decision = session.silence_monitor.update(session.analyser.loudness(), elapsed)

        if decision is SilenceDecision.ARM:
            session.silence_timer = loop.call_later(
                self.settings.silence_duration, self._on_silence_elapsed, session
            )
        elif decision is SilenceDecision.CANCEL:
            self._cancel_silence_timer(session)

    def _on_silence_elapsed(self, session: CaptureSession) -> None:
        session.silence_timer = None
        if session is not self._session or session.state is not CaptureState.RECORDING:
            return
        logger.info(f"Silence for {self.settings.silence_duration:.2f}s, auto-stopping")
        self._auto_stop_task = asyncio.get_running_loop().create_task(self._auto_stop(session))

    async def _auto_stop(self, session: CaptureSession) -> None:
        result = await self._stop(StopReason.AUTO)
        if result is None or session.on_auto_stop is None:
            return
        try:
            outcome = session.on_auto_stop(result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Auto-stop callback failed")

    def _cancel_silence_timer(self, session: CaptureSession) -> None:
        if session.silence_timer is not None:
            session.silence_timer.cancel()
            session.silence_timer = None

    def _release(self, session: CaptureSession) -> None:
        """Tear down a session's resources: timer, monitor, analyser, microphone."""
        self._cancel_silence_timer(session)
        task, session.monitor_task = session.monitor_task, None
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

        analyser, session.analyser = session.analyser, None
        if analyser is not None:
            analyser.release()

        microphone, session.microphone = session.microphone, None
        try:
            if microphone is not None:
                microphone.release()
        finally:
            session.recorder = None
            session.silence_monitor = None
            session.state = CaptureState.IDLE
            if self._session is session:
                self._session = None


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


def _release_acquired_handle(acquisition: "asyncio.Future[MicrophoneHandle]") -> None:
    if acquisition.cancelled() or acquisition.exception() is not None:
        return
    acquisition.result().release()
