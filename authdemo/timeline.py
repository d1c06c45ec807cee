"""Audit-style narration of a demo session"""
import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

EventType = Literal["auth", "tool_call", "approval", "token_exchange", "message"]
EventStatus = Literal["success", "denied", "pending"]


class TimelineEvent(BaseModel):
    """A single narrated event; display only"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: EventType
    title: str
    detail: Optional[str] = None
    status: Optional[EventStatus] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    feature: Optional[str] = None


class TimelineRecorder:
    """Newest-first event log. Cleared only by an environment reset."""

    def __init__(self):
        self._events: List[TimelineEvent] = []

    def record(
        self,
        type: EventType,
        title: str,
        detail: Optional[str] = None,
        status: Optional[EventStatus] = None,
        feature: Optional[str] = None,
    ) -> TimelineEvent:
        event = TimelineEvent(type=type, title=title, detail=detail, status=status, feature=feature)
        self._events.insert(0, event)
        return event

    @property
    def events(self) -> List[TimelineEvent]:
        return list(self._events)

    def clear(self) -> None:
        self._events = []

    def __len__(self) -> int:
        return len(self._events)
