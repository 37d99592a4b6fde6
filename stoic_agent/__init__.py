"""Stoic Agent: a local digital wellness agent."""

from .app import Agent, IAgent
from .config import AgentConfig, load_config
from .errors import (
    ConfigurationError,
    NotificationError,
    SamplingError,
    StoicAgentError,
)
from .event_bus import EventBus, IEventBus
from .executor import ExecutorService, IExecutor
from .listeners import CpuListener, IListener
from .metrics import IMetricsSource, PsutilMetricsSource
from .models import (
    CpuLoad,
    Event,
    EventType,
    Intervention,
    InterventionType,
    ListenerState,
    NotificationRequest,
    NotificationResult,
    Severity,
    Topic,
)
from .notifier import DesktopNotifier, INotifier
from .planner import IPlanner, Rule, RulesPlanner
from .recorder import IRecorder, Recorder
from .storage import IStorage, Storage
from .utils import MovingAverage

__version__ = "0.1.0"

__all__ = [
    # Agent
    "Agent",
    "IAgent",
    "AgentConfig",
    "load_config",
    # Errors
    "StoicAgentError",
    "ConfigurationError",
    "SamplingError",
    "NotificationError",
    # Models
    "Event",
    "EventType",
    "Severity",
    "ListenerState",
    "Intervention",
    "InterventionType",
    "CpuLoad",
    "NotificationRequest",
    "NotificationResult",
    "Topic",
    # Components
    "IEventBus",
    "EventBus",
    "IListener",
    "CpuListener",
    "IPlanner",
    "RulesPlanner",
    "Rule",
    "IExecutor",
    "ExecutorService",
    "IMetricsSource",
    "PsutilMetricsSource",
    "INotifier",
    "DesktopNotifier",
    "IRecorder",
    "Recorder",
    "IStorage",
    "Storage",
    "MovingAverage",
]
