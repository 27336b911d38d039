"""Real-time change notification: change detection and the server-sent event stream."""

from app.services.realtime.change_detector import ChangeDetector, DetectedChanges
from app.services.realtime.event_stream import EventStreamConnection

__all__ = ["ChangeDetector", "DetectedChanges", "EventStreamConnection"]
