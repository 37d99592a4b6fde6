"""EventBus topic definitions."""

from enum import Enum


class Topic(str, Enum):
    """EventBus topics."""

    EVENT = "agent:event"
    INTERVENTION = "agent:intervention"
    CONFIG_RELOADED = "config:reloaded"
