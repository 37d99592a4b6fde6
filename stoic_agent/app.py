"""Agent bootstrap and lifecycle management."""

from typing import Protocol

from .config import AgentConfig, check_agent_config, load_config
from .event_bus import EventBus
from .executor import ExecutorService
from .listeners import CpuListener
from .logging_config import get_logger
from .metrics import IMetricsSource, PsutilMetricsSource
from .models import Topic
from .notifier import DesktopNotifier, INotifier
from .planner import RulesPlanner
from .recorder import Recorder
from .storage import IStorage, Storage

logger = get_logger(__name__)


class IAgent(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reload_config(self, config: AgentConfig) -> None:
        """Validate and broadcast a new configuration."""
        ...


class Agent:
    """Wires listener, planner and executor together through one EventBus.

    Collaborators (metrics source, notifier, storage) can be injected; the
    defaults are psutil, desktop notifications and, when `database_url` is
    set, SQLite storage.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        metrics_source: IMetricsSource | None = None,
        notifier: INotifier | None = None,
        storage: IStorage | None = None,
    ):
        self._config = config if config is not None else load_config()
        check_agent_config(self._config)

        self._metrics_source = metrics_source
        self._notifier = notifier
        self._storage = storage
        self._owns_storage = False

        # Components (will be initialized in start())
        self._event_bus: EventBus | None = None
        self._recorder: Recorder | None = None
        self._executor: ExecutorService | None = None
        self._planner: RulesPlanner | None = None
        self._listener: CpuListener | None = None
        self._running = False

    async def start(self) -> None:
        """Initialize components in dependency order."""
        if self._running:
            return
        if not self._config.enabled:
            logger.info("Agent is disabled by config.")
            return

        logger.info("Starting agent")

        # 1. Storage (optional, no dependencies)
        if self._storage is None and self._config.database_url:
            self._storage = Storage(self._config.database_url)
            self._owns_storage = True
        if self._owns_storage:
            await self._storage.init()
            logger.info("Storage initialized")

        # 2. EventBus (no dependencies)
        self._event_bus = EventBus()

        # 3. Recorder (depends on EventBus + Storage)
        if self._storage is not None:
            self._recorder = Recorder(self._event_bus, self._storage)
            await self._recorder.start()

        # 4. Executor (depends on EventBus, Notifier, Recorder)
        if self._notifier is None:
            self._notifier = DesktopNotifier()
        self._executor = ExecutorService(
            self._event_bus,
            self._notifier,
            recorder=self._recorder,
            notifications_enabled=self._config.notifications_enabled,
        )
        await self._executor.start()

        # 5. Planner (depends on EventBus)
        self._planner = RulesPlanner(self._event_bus)
        await self._planner.start()

        # 6. Listener (depends on EventBus + metrics source); starts ticking
        if self._metrics_source is None:
            self._metrics_source = PsutilMetricsSource()
        self._listener = CpuListener(self._event_bus, self._metrics_source, self._config)
        await self._listener.start()

        self._running = True
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if not self._running:
            return

        logger.info("Stopping agent")
        if self._listener:
            await self._listener.stop()
        if self._planner:
            await self._planner.stop()
        if self._executor:
            await self._executor.stop()
        if self._recorder:
            await self._recorder.stop()
        if self._storage and self._owns_storage:
            await self._storage.close()
            logger.info("Storage closed")

        self._running = False

    async def reload_config(self, config: AgentConfig) -> None:
        """Validate and broadcast a new configuration on CONFIG_RELOADED."""
        check_agent_config(config)
        self._config = config
        if self._event_bus is not None:
            await self._event_bus.publish(Topic.CONFIG_RELOADED, config)
        logger.info("Configuration reloaded")

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def storage(self) -> IStorage | None:
        """Storage instance, or None when running without persistence."""
        return self._storage

    @property
    def event_bus(self) -> EventBus:
        """Get event bus instance."""
        if not self._event_bus:
            raise RuntimeError("Agent not started")
        return self._event_bus

    @property
    def listener(self) -> CpuListener:
        """Get CPU listener instance."""
        if not self._listener:
            raise RuntimeError("Agent not started")
        return self._listener

    @property
    def planner(self) -> RulesPlanner:
        """Get planner instance."""
        if not self._planner:
            raise RuntimeError("Agent not started")
        return self._planner

    @property
    def executor(self) -> ExecutorService:
        """Get executor instance."""
        if not self._executor:
            raise RuntimeError("Agent not started")
        return self._executor
