"""Executor: turns Interventions into user-facing notifications."""

import asyncio
from typing import Callable, Protocol

from ..config import AgentConfig
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import Intervention, InterventionType, NotificationRequest, Topic
from ..notifier import INotifier
from ..recorder import IRecorder

logger = get_logger(__name__)

DEFAULT_BREATHING_DURATION = 60
BREATHING_ACTIONS = ["Start", "Dismiss"]
NOTIFICATION_TIMEOUT = 30  # seconds


RequestBuilder = Callable[[Intervention], NotificationRequest]


class IExecutor(Protocol):
    """Executes Interventions."""

    async def start(self) -> None:
        """Subscribe to EventBus topics: INTERVENTION, CONFIG_RELOADED."""
        ...

    async def stop(self) -> None:
        """Unsubscribe and cancel in-flight deliveries."""
        ...


def build_breathing_request(intervention: Intervention) -> NotificationRequest:
    duration = intervention.parameters.get("duration", DEFAULT_BREATHING_DURATION)
    return NotificationRequest(
        title="High CPU Usage Detected!",
        message=f"How about a quick {duration}-second breathing exercise?",
        subtitle="Stoic Agent Suggestion",
        sound=True,
        actions=list(BREATHING_ACTIONS),
        timeout_seconds=NOTIFICATION_TIMEOUT,
    )


def build_quote_request(intervention: Intervention) -> NotificationRequest:
    quote = intervention.parameters.get("quote", "")
    author = intervention.parameters.get("author", "")
    message = f'"{quote}"'
    if author:
        message += f" - {author}"
    return NotificationRequest(
        title="A thought for the moment",
        message=message,
        subtitle="Stoic Agent",
        timeout_seconds=NOTIFICATION_TIMEOUT,
    )


def build_question_request(intervention: Intervention) -> NotificationRequest:
    return NotificationRequest(
        title="A question to consider",
        message=intervention.parameters.get("question") or intervention.reason,
        subtitle="Stoic Agent",
        timeout_seconds=NOTIFICATION_TIMEOUT,
    )


class ExecutorService:
    """Maps intervention types to notifications and delivers them in the background.

    The bus handler only builds the request; delivery runs as a detached task
    so a slow notifier never holds up the bus. Each intervention gets exactly
    one delivery attempt. While notifications are switched off (at
    construction or by a reloaded config) requests are recorded as skipped
    and the notifier is not called.
    """

    def __init__(
        self,
        event_bus: IEventBus,
        notifier: INotifier,
        recorder: IRecorder | None = None,
        notifications_enabled: bool = True,
    ):
        self._event_bus = event_bus
        self._notifier = notifier
        self._recorder = recorder
        self._notifications_enabled = notifications_enabled
        self._handlers: dict[InterventionType, RequestBuilder] = {
            InterventionType.SUGGEST_BREATHING: build_breathing_request,
            InterventionType.SHOW_QUOTE: build_quote_request,
            InterventionType.ASK_COGNITIVE_QUESTION: build_question_request,
        }
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of deliveries still in flight."""
        return len(self._pending)

    @property
    def notifications_enabled(self) -> bool:
        return self._notifications_enabled

    async def start(self) -> None:
        """Subscribe to INTERVENTION and CONFIG_RELOADED topics."""
        self._event_bus.subscribe(Topic.INTERVENTION, self.handle_intervention)
        self._event_bus.subscribe(Topic.CONFIG_RELOADED, self._handle_config_reloaded)

    async def stop(self) -> None:
        """Unsubscribe and cancel deliveries that have not finished."""
        self._event_bus.unsubscribe(Topic.INTERVENTION, self.handle_intervention)
        self._event_bus.unsubscribe(Topic.CONFIG_RELOADED, self._handle_config_reloaded)
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def wait_idle(self) -> None:
        """Wait until every in-flight delivery has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def handle_intervention(self, intervention: Intervention) -> None:
        """Handle incoming Intervention from EventBus."""
        logger.info("Executor received intervention: %s", intervention.type.value)

        builder = self._handlers.get(intervention.type)
        if builder is None:
            logger.warning(
                "No action defined for intervention type: %s", intervention.type.value
            )
            return

        request = builder(intervention)
        task = asyncio.create_task(
            self._deliver(intervention, request),
            name=f"notify-{intervention.id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _handle_config_reloaded(self, config: AgentConfig) -> None:
        if config.notifications_enabled != self._notifications_enabled:
            logger.info(
                "Notifications %s by config reload",
                "enabled" if config.notifications_enabled else "disabled",
            )
        self._notifications_enabled = config.notifications_enabled

    async def _deliver(
        self, intervention: Intervention, request: NotificationRequest
    ) -> None:
        """Send one notification; failures are logged, never retried."""
        if not self._notifications_enabled:
            logger.info("Notifications are disabled by config. Skipping: %s", request.title)
            await self._record(intervention, request, "skipped")
            return

        logger.info("Sending notification: %s - %s", request.title, request.message)

        try:
            result = await self._notifier.notify(request)
        except Exception as e:
            logger.error(
                "Failed to send %s notification: %s",
                intervention.type.value,
                e,
                exc_info=True,
            )
            await self._record(intervention, request, "failed", error=str(e))
            return

        if not result.delivered:
            await self._record(intervention, request, "skipped")
            return

        if result.response:
            logger.info(
                "User responded '%s' to %s", result.response, intervention.type.value
            )
        await self._record(intervention, request, "delivered", response=result.response)

    async def _record(
        self,
        intervention: Intervention,
        request: NotificationRequest,
        status: str,
        response: str | None = None,
        error: str | None = None,
    ) -> None:
        if self._recorder is None:
            return
        await self._recorder.record_notification(
            intervention, request, status, response=response, error=error
        )
