"""Tests for Storage."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from stoic_agent.models import (
    Event,
    EventType,
    Intervention,
    InterventionType,
    NotificationRecord,
    Severity,
)
from stoic_agent.storage import Storage


def make_event(minutes_ago=0, type=EventType.CPU_USAGE_WARNING, **kwargs):
    return Event(
        type=type,
        source="cpu-listener",
        severity=Severity.HIGH,
        value=0.75,
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        **kwargs,
    )


def make_intervention(minutes_ago=0):
    return Intervention(
        type=InterventionType.SUGGEST_BREATHING,
        source="simple-rules-planner",
        reason="High CPU",
        urgency=0.6,
        parameters={"duration": 60},
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )


class TestStorageEvents:
    """Tests for event persistence."""

    @pytest.mark.asyncio
    async def test_save_and_get_event(self, storage):
        """Test that an event round-trips through SQLite."""
        event = make_event(metadata={"average": 72.5, "cores": [70, 75]})
        await storage.save_event(event)

        events = await storage.get_events()

        assert len(events) == 1
        assert events[0] == event

    @pytest.mark.asyncio
    async def test_newest_first_and_limit(self, storage):
        """Test ordering and limit."""
        for minutes in (3, 1, 2):
            await storage.save_event(make_event(minutes_ago=minutes))

        events = await storage.get_events(limit=2)

        assert len(events) == 2
        assert events[0].timestamp > events[1].timestamp

    @pytest.mark.asyncio
    async def test_filter_by_time_and_type(self, storage):
        """Test the after and event_types filters."""
        await storage.save_event(make_event(minutes_ago=10))
        recent = make_event(minutes_ago=1, type=EventType.CPU_USAGE_CRITICAL)
        await storage.save_event(recent)
        await storage.save_event(make_event(minutes_ago=1))

        after = datetime.now(timezone.utc) - timedelta(minutes=5)
        events = await storage.get_events(after=after, event_types=["cpu_usage_critical"])

        assert [e.id for e in events] == [recent.id]

    @pytest.mark.asyncio
    async def test_duplicate_event_ignored(self, storage):
        """Test that saving the same event twice keeps one row."""
        event = make_event()
        await storage.save_event(event)
        await storage.save_event(event)

        assert len(await storage.get_events()) == 1


class TestStorageInterventions:
    """Tests for intervention persistence."""

    @pytest.mark.asyncio
    async def test_save_and_get_intervention(self, storage):
        """Test that an intervention round-trips through SQLite."""
        intervention = make_intervention()
        await storage.save_intervention(intervention)

        assert await storage.get_interventions() == [intervention]

    @pytest.mark.asyncio
    async def test_filter_after(self, storage):
        """Test the after filter."""
        await storage.save_intervention(make_intervention(minutes_ago=30))
        recent = make_intervention(minutes_ago=1)
        await storage.save_intervention(recent)

        after = datetime.now(timezone.utc) - timedelta(minutes=5)
        assert [i.id for i in await storage.get_interventions(after=after)] == [recent.id]


class TestStorageNotifications:
    """Tests for notification records."""

    @pytest.mark.asyncio
    async def test_save_and_filter_notifications(self, storage):
        """Test saving attempts and filtering by intervention."""
        first = NotificationRecord(
            id=str(uuid.uuid4()),
            intervention_id="i-1",
            title="t",
            message="m",
            status="delivered",
            response="start",
            timestamp=datetime.now(timezone.utc),
        )
        second = NotificationRecord(
            id=str(uuid.uuid4()),
            intervention_id="i-2",
            title="t",
            message="m",
            status="failed",
            error="no display",
            timestamp=datetime.now(timezone.utc),
        )
        await storage.save_notification(first)
        await storage.save_notification(second)

        assert len(await storage.get_notifications()) == 2
        records = await storage.get_notifications(intervention_id="i-2")
        assert records == [second]


class TestStorageLifecycle:
    """Tests for init/clear/close."""

    @pytest.mark.asyncio
    async def test_clear(self, storage):
        """Test that clear() removes everything."""
        await storage.save_event(make_event())
        await storage.save_intervention(make_intervention())

        await storage.clear()

        assert await storage.get_events() == []
        assert await storage.get_interventions() == []

    @pytest.mark.asyncio
    async def test_uninitialized_storage_raises(self):
        """Test that using storage before init() fails."""
        storage = Storage(":memory:")
        with pytest.raises(RuntimeError, match="not initialized"):
            await storage.get_events()

    @pytest.mark.asyncio
    async def test_file_database_persists(self, tmp_path):
        """Test that data survives reopening a file database."""
        db_path = tmp_path / "nested" / "stoic.db"
        event = make_event()

        storage = Storage(db_path)
        await storage.init()
        await storage.save_event(event)
        await storage.close()

        reopened = Storage(db_path)
        await reopened.init()
        try:
            assert [e.id for e in await reopened.get_events()] == [event.id]
        finally:
            await reopened.close()
