"""Data exchanged with external collaborators (metrics, notifications)."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CpuLoad:
    """A single CPU sample on a 0-100 scale."""

    overall: float
    per_core: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class NotificationRequest:
    """A user-facing notification to display."""

    title: str
    message: str
    subtitle: str | None = None
    sound: bool = False
    actions: list[str] = field(default_factory=list)  # e.g. ["Start", "Dismiss"]
    timeout_seconds: int | None = None


@dataclass(frozen=True)
class NotificationResult:
    """Outcome reported by the notification sink."""

    delivered: bool
    response: str | None = None  # action picked by the user, if any


@dataclass
class NotificationRecord:
    """A persisted notification attempt."""

    id: str
    intervention_id: str
    title: str
    message: str
    status: str  # "delivered", "skipped", "failed"
    timestamp: datetime
    response: str | None = None
    error: str | None = None
