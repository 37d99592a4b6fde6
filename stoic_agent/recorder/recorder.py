"""Recorder: appends bus traffic and notification outcomes to Storage."""

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import (
    Event,
    Intervention,
    NotificationRecord,
    NotificationRequest,
    Topic,
)
from ..storage import IStorage

logger = get_logger(__name__)


class IRecorder(Protocol):
    """Records history. Two channels: EventBus subscription + direct calls."""

    async def record_notification(
        self,
        intervention: Intervention,
        request: NotificationRequest,
        status: str,
        response: str | None = None,
        error: str | None = None,
    ) -> None:
        """Save a notification attempt to Storage."""
        ...


class Recorder:
    """Saves Events and Interventions seen on the bus, plus notification attempts.

    Storage failures are logged and never reach the publisher.
    """

    def __init__(self, event_bus: IEventBus, storage: IStorage):
        self._event_bus = event_bus
        self._storage = storage

    async def start(self) -> None:
        """Subscribe to EVENT and INTERVENTION topics."""
        self._event_bus.subscribe(Topic.EVENT, self._handle_event)
        self._event_bus.subscribe(Topic.INTERVENTION, self._handle_intervention)

    async def stop(self) -> None:
        """Unsubscribe from EventBus."""
        self._event_bus.unsubscribe(Topic.EVENT, self._handle_event)
        self._event_bus.unsubscribe(Topic.INTERVENTION, self._handle_intervention)

    async def _handle_event(self, event: Event) -> None:
        try:
            await self._storage.save_event(event)
        except (sqlite3.Error, RuntimeError):
            logger.exception("Failed to record event %s", event.id)

    async def _handle_intervention(self, intervention: Intervention) -> None:
        try:
            await self._storage.save_intervention(intervention)
        except (sqlite3.Error, RuntimeError):
            logger.exception("Failed to record intervention %s", intervention.id)

    async def record_notification(
        self,
        intervention: Intervention,
        request: NotificationRequest,
        status: str,
        response: str | None = None,
        error: str | None = None,
    ) -> None:
        """Save a notification attempt to Storage."""
        record = NotificationRecord(
            id=str(uuid.uuid4()),
            intervention_id=intervention.id,
            title=request.title,
            message=request.message,
            status=status,
            response=response,
            error=error,
            timestamp=datetime.now(timezone.utc),
        )
        try:
            await self._storage.save_notification(record)
        except (sqlite3.Error, RuntimeError):
            logger.exception(
                "Failed to record notification for intervention %s", intervention.id
            )
