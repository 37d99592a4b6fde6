"""EventBus module."""

from .event_bus import TOPIC_PAYLOADS, EventBus, IEventBus, TopicHandler, resolve_topic

__all__ = ["EventBus", "IEventBus", "TopicHandler", "TOPIC_PAYLOADS", "resolve_topic"]
