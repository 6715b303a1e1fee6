"""Event models for capture lifecycle publishing."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Any, Dict

from .capture import CaptureResult


@dataclass
class CaptureEvent:
    """Capture lifecycle event."""
    event_id: str
    event_type: str  # "started", "stopped", "failed"
    session_id: str
    timestamp: datetime = field(default_factory=datetime.now)
    result: Optional[CaptureResult] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
