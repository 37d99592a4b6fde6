"""SQLite storage implementation."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import Event, Intervention, NotificationRecord


def _to_utc(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


class IStorage(Protocol):
    """Append-only persistence for events, interventions and notifications."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # Events
    async def save_event(self, event: Event) -> None:
        """Append an event."""
        ...

    async def get_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        limit: int = 100,
    ) -> list[Event]:
        """Get events (newest first) with optional filters."""
        ...

    # Interventions
    async def save_intervention(self, intervention: Intervention) -> None:
        """Append an intervention."""
        ...

    async def get_interventions(
        self, after: datetime | None = None, limit: int = 100
    ) -> list[Intervention]:
        """Get interventions (newest first)."""
        ...

    # Notifications
    async def save_notification(self, record: NotificationRecord) -> None:
        """Append a notification attempt."""
        ...

    async def get_notifications(
        self, intervention_id: str | None = None, limit: int = 100
    ) -> list[NotificationRecord]:
        """Get notification attempts (newest first)."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


class Storage:
    """SQLite storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path)

        # Read and execute schema
        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Storage not initialized")
        return self._conn

    # Events
    async def save_event(self, event: Event) -> None:
        """Append an event."""
        conn = self._require_conn()
        await conn.execute(
            """
            INSERT OR IGNORE INTO events
            (id, type, source, severity, timestamp, value, metadata)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.id,
                event.type.value,
                event.source,
                event.severity.value,
                event.timestamp.isoformat(),
                event.value,
                json.dumps(event.metadata, default=str),
            ),
        )
        await conn.commit()

    async def get_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        limit: int = 100,
    ) -> list[Event]:
        """Get events (newest first) with optional filters."""
        conn = self._require_conn()

        # Build query dynamically
        conditions = []
        params: list = []

        if after:
            conditions.append("timestamp > ?")
            params.append(after.isoformat())
        if event_types:
            placeholders = ",".join("?" * len(event_types))
            conditions.append(f"type IN ({placeholders})")
            params.extend(event_types)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        query = f"""
            SELECT id, type, source, severity, timestamp, value, metadata
            FROM events
            {where_clause}
            ORDER BY timestamp DESC
            LIMIT ?
        """
        params.append(limit)

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()

        return [
            Event(
                id=row[0],
                type=row[1],
                source=row[2],
                severity=row[3],
                timestamp=_to_utc(row[4]),
                value=row[5],
                metadata=json.loads(row[6]),
            )
            for row in rows
        ]

    # Interventions
    async def save_intervention(self, intervention: Intervention) -> None:
        """Append an intervention."""
        conn = self._require_conn()
        await conn.execute(
            """
            INSERT OR IGNORE INTO interventions
            (id, type, source, reason, timestamp, urgency, parameters)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                intervention.id,
                intervention.type.value,
                intervention.source,
                intervention.reason,
                intervention.timestamp.isoformat(),
                intervention.urgency,
                json.dumps(intervention.parameters, default=str),
            ),
        )
        await conn.commit()

    async def get_interventions(
        self, after: datetime | None = None, limit: int = 100
    ) -> list[Intervention]:
        """Get interventions (newest first)."""
        conn = self._require_conn()

        if after:
            cursor = await conn.execute(
                """
                SELECT id, type, source, reason, timestamp, urgency, parameters
                FROM interventions
                WHERE timestamp > ?
                ORDER BY timestamp DESC
                LIMIT ?
                """,
                (after.isoformat(), limit),
            )
        else:
            cursor = await conn.execute(
                """
                SELECT id, type, source, reason, timestamp, urgency, parameters
                FROM interventions
                ORDER BY timestamp DESC
                LIMIT ?
                """,
                (limit,),
            )
        rows = await cursor.fetchall()

        return [
            Intervention(
                id=row[0],
                type=row[1],
                source=row[2],
                reason=row[3],
                timestamp=_to_utc(row[4]),
                urgency=row[5],
                parameters=json.loads(row[6]),
            )
            for row in rows
        ]

    # Notifications
    async def save_notification(self, record: NotificationRecord) -> None:
        """Append a notification attempt."""
        conn = self._require_conn()
        await conn.execute(
            """
            INSERT INTO notifications
            (id, intervention_id, title, message, status, response, error, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.intervention_id,
                record.title,
                record.message,
                record.status,
                record.response,
                record.error,
                record.timestamp.isoformat(),
            ),
        )
        await conn.commit()

    async def get_notifications(
        self, intervention_id: str | None = None, limit: int = 100
    ) -> list[NotificationRecord]:
        """Get notification attempts (newest first)."""
        conn = self._require_conn()

        where_clause = "WHERE intervention_id = ?" if intervention_id else ""
        params: list = [intervention_id] if intervention_id else []
        params.append(limit)

        cursor = await conn.execute(
            f"""
            SELECT id, intervention_id, title, message, status, response, error, timestamp
            FROM notifications
            {where_clause}
            ORDER BY timestamp DESC
            LIMIT ?
            """,
            params,
        )
        rows = await cursor.fetchall()

        return [
            NotificationRecord(
                id=row[0],
                intervention_id=row[1],
                title=row[2],
                message=row[3],
                status=row[4],
                response=row[5],
                error=row[6],
                timestamp=_to_utc(row[7]),
            )
            for row in rows
        ]

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        conn = self._require_conn()

        for table in ["notifications", "interventions", "events"]:
            await conn.execute(f"DELETE FROM {table}")

        await conn.commit()
