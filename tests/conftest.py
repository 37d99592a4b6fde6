"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from stoic_agent.config import AgentConfig
from stoic_agent.errors import SamplingError
from stoic_agent.models import CpuLoad, NotificationResult


class FakeMetricsSource:
    """Metrics source replaying scripted samples.

    Items may be floats (overall load) or exceptions to raise for that tick.
    """

    def __init__(self, samples=None, per_core=None):
        self.samples = list(samples or [])
        self.per_core = per_core or [10.0, 20.0]
        self.calls = 0

    def push(self, *samples) -> None:
        self.samples.extend(samples)

    async def sample_cpu_load(self) -> CpuLoad:
        self.calls += 1
        if not self.samples:
            raise SamplingError("no scripted sample left")
        sample = self.samples.pop(0)
        if isinstance(sample, BaseException):
            raise sample
        return CpuLoad(overall=sample, per_core=list(self.per_core))


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from stoic_agent.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def event_bus():
    """Create a fresh EventBus."""
    from stoic_agent.event_bus import EventBus

    return EventBus()


@pytest.fixture
def agent_config():
    """Config with the documented default thresholds (70/90) and a 3-sample window."""
    return AgentConfig(
        process_interval=1000,
        cooldown_period=3000,
        cpu_warning_threshold=70,
        cpu_critical_threshold=90,
        sample_timeout=1.0,
    )


@pytest.fixture
def metrics_source():
    """Create scripted metrics source."""
    return FakeMetricsSource()


@pytest.fixture
def mock_notifier():
    """Create mock notifier that always succeeds."""
    notifier = AsyncMock()
    notifier.notify = AsyncMock(
        return_value=NotificationResult(delivered=True, response="start")
    )
    return notifier


@pytest.fixture
def cpu_listener(event_bus, metrics_source, agent_config):
    """Create a CpuListener that is not started (tests drive tick())."""
    from stoic_agent.listeners import CpuListener

    return CpuListener(event_bus, metrics_source, agent_config)


@pytest.fixture
def planner(event_bus):
    """Create RulesPlanner with default rules."""
    from stoic_agent.planner import RulesPlanner

    return RulesPlanner(event_bus)


@pytest_asyncio.fixture
async def executor(event_bus, mock_notifier):
    """Create ExecutorService subscribed to the bus."""
    from stoic_agent.executor import ExecutorService

    ex = ExecutorService(event_bus, mock_notifier)
    await ex.start()
    yield ex
    await ex.stop()


@pytest.fixture
def captured_events(event_bus):
    """Collect every Event published on the bus."""
    from stoic_agent.models import Topic

    events = []

    async def collect(event):
        events.append(event)

    event_bus.subscribe(Topic.EVENT, collect)
    return events


@pytest.fixture
def captured_interventions(event_bus):
    """Collect every Intervention published on the bus."""
    from stoic_agent.models import Topic

    interventions = []

    async def collect(intervention):
        interventions.append(intervention)

    event_bus.subscribe(Topic.INTERVENTION, collect)
    return interventions

