"""CPU load listener."""

import asyncio
from typing import Protocol

from pydantic import ValidationError

from ..config import AgentConfig, check_agent_config
from ..errors import ConfigurationError
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..metrics import IMetricsSource
from ..models import (
    META_AVERAGE,
    META_CORES,
    META_FROM_STATE,
    META_TO_STATE,
    Event,
    EventType,
    ListenerState,
    Severity,
    Topic,
)
from ..scheduling import RecurringTimer
from ..utils import MovingAverage

logger = get_logger(__name__)

SOURCE = "cpu-listener"

# State entered -> (event type, severity) of the transition event
TRANSITION_EVENTS: dict[ListenerState, tuple[EventType, Severity]] = {
    ListenerState.CRITICAL: (EventType.CPU_USAGE_CRITICAL, Severity.CRITICAL),
    ListenerState.WARNING: (EventType.CPU_USAGE_WARNING, Severity.HIGH),
    ListenerState.NORMAL: (EventType.CPU_USAGE_NORMAL, Severity.LOW),
}


class IListener(Protocol):
    """A timer-driven signal listener."""

    @property
    def name(self) -> str:
        """Listener identifier, used as the event source."""
        ...

    async def start(self) -> None:
        """Start sampling. No-op if already started."""
        ...

    async def stop(self) -> None:
        """Stop sampling. No-op if already stopped."""
        ...


def classify(usage: float, warning: float, critical: float) -> ListenerState:
    """Map a usage sample onto a listener state (strict thresholds)."""
    if usage > critical:
        return ListenerState.CRITICAL
    if usage > warning:
        return ListenerState.WARNING
    return ListenerState.NORMAL


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, value))


class CpuListener:
    """Samples CPU load and publishes an Event whenever its state changes.

    Staying in the same state never emits, so sustained load produces one
    event on entry and one on exit. Recovery to normal emits a low-severity
    `cpu_usage_normal` event.
    """

    def __init__(
        self,
        event_bus: IEventBus,
        metrics_source: IMetricsSource,
        config: AgentConfig,
    ):
        check_agent_config(config)
        self._event_bus = event_bus
        self._metrics_source = metrics_source
        self._config = config
        self._state = ListenerState.NORMAL
        self._window: MovingAverage | None = None
        self._timer: RecurringTimer | None = None
        logger.info("CPU listener initialized (history size: %s)", config.window_size)

    @property
    def name(self) -> str:
        return SOURCE

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def window(self) -> MovingAverage | None:
        """Moving-average window; None while stopped."""
        return self._window

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    async def start(self) -> None:
        """Create a fresh window and start the sampling timer."""
        if self._timer is not None:
            return

        logger.info("Starting CPU listener")
        self._window = MovingAverage(self._config.window_size)
        self._event_bus.subscribe(Topic.CONFIG_RELOADED, self._handle_config_reloaded)
        self._timer = RecurringTimer(
            self._config.process_interval / 1000,
            self.tick,
            name=SOURCE,
        )
        self._timer.start()

    async def stop(self) -> None:
        """Cancel the timer and drop the window."""
        if self._timer is None:
            return

        logger.info("Stopping CPU listener")
        timer, self._timer = self._timer, None
        await timer.stop()
        self._event_bus.unsubscribe(Topic.CONFIG_RELOADED, self._handle_config_reloaded)
        self._window = None

    async def tick(self) -> Event | None:
        """Run one sampling cycle. Returns the published event, if any.

        Normally driven by the timer. It may also be called on a stopped
        listener (tests do this without a clock): the cycle then runs on a
        fresh window, since stop() discards the previous one.
        """
        if self._window is None:
            self._window = MovingAverage(self._config.window_size)
        window = self._window

        try:
            load = await asyncio.wait_for(
                self._metrics_source.sample_cpu_load(),
                timeout=self._config.sample_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "CPU sample timed out after %.1fs; skipping tick",
                self._config.sample_timeout,
            )
            return None
        except Exception:
            logger.exception("Error checking CPU usage; skipping tick")
            return None

        usage = load.overall
        avg = window.push(usage)
        logger.debug("CPU current: %.2f%%, moving avg: %.2f%%", usage, avg)

        previous = self._state
        new_state = classify(
            usage,
            self._config.cpu_warning_threshold,
            self._config.cpu_critical_threshold,
        )
        self._state = new_state

        if new_state == previous:
            return None

        event_type, severity = TRANSITION_EVENTS[new_state]
        payload = {
            "type": event_type,
            "source": SOURCE,
            "severity": severity,
            "value": _clamp_unit(usage / 100),
            "metadata": {
                META_AVERAGE: avg,
                META_FROM_STATE: previous.value,
                META_TO_STATE: new_state.value,
                META_CORES: list(load.per_core),
            },
        }
        return await self._fire_event(payload)

    async def _fire_event(self, payload: dict) -> Event | None:
        """Validate and publish an event; invalid payloads are dropped."""
        try:
            event = Event.model_validate(payload)
        except ValidationError as e:
            logger.error(
                "Invalid CPU event schema: %s",
                e,
                extra={"context": {"payload": payload, "errors": e.errors()}},
            )
            return None

        logger.info(
            "Firing event: %s, usage: %.2f%%", event.type.value, (event.value or 0) * 100
        )
        await self._event_bus.publish(Topic.EVENT, event)
        return event

    async def _handle_config_reloaded(self, config: AgentConfig) -> None:
        """Adopt new thresholds, interval and window size."""
        try:
            check_agent_config(config)
        except ConfigurationError as e:
            logger.error("Ignoring invalid reloaded config: %s", e)
            return

        old_size = self._config.window_size
        self._config = config

        if self._timer is not None:
            self._timer.interval = config.process_interval / 1000
        if self._window is not None and config.window_size != old_size:
            self._window = MovingAverage(config.window_size)

        logger.info(
            "CPU listener reconfigured: warning=%s critical=%s interval=%sms window=%s",
            config.cpu_warning_threshold,
            config.cpu_critical_threshold,
            config.process_interval,
            config.window_size,
        )
