"""Event-related data models."""

import copy
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class EventType(str, Enum):
    """Categories of observed conditions."""

    # System
    CPU_USAGE_NORMAL = "cpu_usage_normal"
    CPU_USAGE_WARNING = "cpu_usage_warning"
    CPU_USAGE_CRITICAL = "cpu_usage_critical"
    CPU_USAGE_HIGH = "cpu_usage_high"
    MEMORY_USAGE_HIGH = "memory_usage_high"
    # User behaviour
    KEYBOARD_BURST = "keyboard_burst"
    MOUSE_RAPID = "mouse_rapid"
    IDLE_DETECTED = "idle_detected"
    # Development
    GIT_RESET_FREQUENT = "git_reset_frequent"
    BUILD_FAILED = "build_failed"


class Severity(str, Enum):
    """Event severity, ordered low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class ListenerState(str, Enum):
    """Discrete state a listener classifies its signal into."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


# Documented metadata keys for CPU events
META_AVERAGE = "average"
META_FROM_STATE = "from_state"
META_TO_STATE = "to_state"
META_CORES = "cores"


class Event(BaseModel):
    """An immutable record of an observed condition.

    `metadata` is deep-copied on construction, so later changes to the
    producer's mapping do not leak into the event. Treat it as read-only:
    the model is frozen but the dict itself is not.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    type: EventType
    source: str = Field(min_length=1)
    severity: Severity
    timestamp: datetime = Field(default_factory=_utcnow)
    value: float | None = Field(default=None, ge=0.0, le=1.0)  # normalized magnitude
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _copy_metadata(cls, value: Any) -> Any:
        return copy.deepcopy(value)

    def transition(self) -> tuple[ListenerState, ListenerState] | None:
        """Return (from, to) listener states if the event records a transition."""
        from_state = self.metadata.get(META_FROM_STATE)
        to_state = self.metadata.get(META_TO_STATE)
        if from_state is None or to_state is None:
            return None
        return ListenerState(from_state), ListenerState(to_state)

    def average(self) -> float | None:
        """Moving average of the signal at emission time, if recorded."""
        avg = self.metadata.get(META_AVERAGE)
        return float(avg) if avg is not None else None

    def cores(self) -> list[float]:
        """Per-core loads at emission time (empty if not recorded)."""
        return [float(c) for c in self.metadata.get(META_CORES, [])]
