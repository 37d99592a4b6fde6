"""EventBus implementation for pub/sub messaging."""

from typing import Any, Awaitable, Callable, Protocol

from ..config import AgentConfig
from ..logging_config import get_logger
from ..models import Event, Intervention, Topic

logger = get_logger(__name__)


TopicHandler = Callable[[Any], Awaitable[None]]

# Payload type carried by each topic
TOPIC_PAYLOADS: dict[Topic, type] = {
    Topic.EVENT: Event,
    Topic.INTERVENTION: Intervention,
    Topic.CONFIG_RELOADED: AgentConfig,
}


def resolve_topic(topic: Topic | str) -> Topic:
    """Map a topic or its string value onto the closed Topic set."""
    try:
        return Topic(topic)
    except ValueError:
        raise ValueError(
            f"Unknown topic {topic!r}; expected one of "
            f"{[t.value for t in Topic]}"
        ) from None


def _handler_name(handler: TopicHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


class IEventBus(Protocol):
    """In-process pub/sub for agent events, interventions and config reloads."""

    def subscribe(self, topic: Topic | str, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        ...

    def unsubscribe(self, topic: Topic | str, handler: TopicHandler) -> None:
        """Remove a handler from a topic (no-op if absent)."""
        ...

    async def publish(self, topic: Topic | str, payload: Any) -> int:
        """Deliver payload to every handler currently subscribed to topic."""
        ...


class EventBus:
    """In-memory pub/sub event bus.

    Handlers of a topic run one after another, in registration order, inside
    the publisher's task. A failing handler is logged and skipped; the
    remaining handlers still run and the publisher never sees the error.
    The handler list is snapshotted per publish, so (un)subscribing while a
    delivery is in flight only affects later publishes.
    """

    def __init__(self):
        self._subscribers: dict[Topic, list[TopicHandler]] = {
            topic: [] for topic in Topic
        }

    def subscribe(self, topic: Topic | str, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        topic = resolve_topic(topic)
        self._subscribers[topic].append(handler)
        logger.debug("Subscribed to '%s': %s", topic.value, _handler_name(handler))

    def unsubscribe(self, topic: Topic | str, handler: TopicHandler) -> None:
        """Remove a previously registered handler."""
        topic = resolve_topic(topic)
        handlers = self._subscribers[topic]
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(
                "Unsubscribed from '%s': %s", topic.value, _handler_name(handler)
            )

    async def publish(self, topic: Topic | str, payload: Any) -> int:
        """Publish payload to topic. Returns the number of handlers that succeeded."""
        topic = resolve_topic(topic)
        expected = TOPIC_PAYLOADS[topic]
        if not isinstance(payload, expected):
            raise TypeError(
                f"Topic '{topic.value}' carries {expected.__name__}, "
                f"got {type(payload).__name__}"
            )

        handlers = tuple(self._subscribers[topic])
        if not handlers:
            logger.debug("No subscribers for topic: %s", topic.value)
            return 0

        delivered = 0
        for handler in handlers:
            try:
                await handler(payload)
            except Exception:
                logger.exception(
                    "Error in handler %s for topic %s",
                    _handler_name(handler),
                    topic.value,
                )
            else:
                delivered += 1

        return delivered

    def subscriber_count(self, topic: Topic | str | None = None) -> int:
        """Return the number of subscribers, optionally for a single topic."""
        if topic is None:
            return sum(len(handlers) for handlers in self._subscribers.values())
        return len(self._subscribers[resolve_topic(topic)])
