"""Core data models for the Stoic Agent."""

from .bus import Topic
from .collaborators import (
    CpuLoad,
    NotificationRecord,
    NotificationRequest,
    NotificationResult,
)
from .events import (
    META_AVERAGE,
    META_CORES,
    META_FROM_STATE,
    META_TO_STATE,
    Event,
    EventType,
    ListenerState,
    Severity,
)
from .interventions import Intervention, InterventionType

__all__ = [
    # Bus
    "Topic",
    # Events
    "Event",
    "EventType",
    "Severity",
    "ListenerState",
    "META_AVERAGE",
    "META_CORES",
    "META_FROM_STATE",
    "META_TO_STATE",
    # Interventions
    "Intervention",
    "InterventionType",
    # Collaborators
    "CpuLoad",
    "NotificationRequest",
    "NotificationResult",
    "NotificationRecord",
]
