"""Capture event publisher for pub/sub consumers."""

import uuid
import logging
from typing import Optional

from pubsub import pub

from ..models.capture import CaptureResult
from ..models.events import CaptureEvent

logger = logging.getLogger(__name__)


class CapturePublisher:
    """Publishes capture lifecycle events using pubsub.pub."""

    def __init__(self, topic: str = "capture"):
        """Initialize capture publisher.

        Args:
            topic: Root topic; events go to ``<topic>.started``, ``<topic>.stopped``
                and ``<topic>.failed``
        """
        self.topic = topic
        logger.info(f"CapturePublisher initialized with topic: {topic}")

    def publish(self, event_type: str, session_id: str,
                result: Optional[CaptureResult] = None, **metadata) -> CaptureEvent:
        event = CaptureEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            session_id=session_id,
            result=result,
            metadata=metadata,
        )
        pub.sendMessage(f"{self.topic}.{event_type}", event=event)
        logger.debug(f"Published capture event: {event_type} ({session_id})")
        return event

    def publish_started(self, session_id: str) -> CaptureEvent:
        return self.publish("started", session_id)

    def publish_stopped(self, session_id: str, result: CaptureResult) -> CaptureEvent:
        return self.publish("stopped", session_id, result=result,
                            stop_reason=result.stop_reason.value)

    def publish_failed(self, session_id: str, error: str) -> CaptureEvent:
        return self.publish("failed", session_id, error=error)
