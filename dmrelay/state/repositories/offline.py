"""Offline queue repository for undelivered messages."""
import aiosqlite
from datetime import datetime

from dmrelay.state.models.offline import OfflineEntry

_COLUMNS = ("namespace, message_id, sender_id, receiver_id, content, subject, "
            "created_at, queued_at")


class OfflineRepository:
    """Manages the append-only offline message log.

    Every query is scoped to one namespace so entries queued under one
    account are invisible to another.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append(self, entry: OfflineEntry) -> bool:
        """Insert an entry unless its id is already queued.

        Returns:
            True if a row was written, False for a duplicate id.
        """
        cursor = await self._conn.execute(
            f"INSERT OR IGNORE INTO offline_messages ({_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                entry.namespace,
                entry.message_id,
                entry.sender_id,
                entry.receiver_id,
                entry.content,
                entry.subject,
                entry.created_at.isoformat(),
                entry.queued_at.isoformat(),
            ),
        )
        await self._conn.commit()
        return cursor.rowcount > 0

    async def list_conversation(self, namespace: str, user_id: str, peer_id: str) -> list[OfflineEntry]:
        """List entries exchanged between ``user_id`` and ``peer_id``, oldest first."""
        cursor = await self._conn.execute(
            "SELECT * FROM offline_messages WHERE namespace = ? AND ("
            "(sender_id = ? AND receiver_id = ?) OR (sender_id = ? AND receiver_id = ?)) "
            "ORDER BY created_at ASC, seq ASC",
            (namespace, user_id, peer_id, peer_id, user_id),
        )
        rows = await cursor.fetchall()
        return [self._row_to_entry(r) for r in rows]

    async def list_all(self, namespace: str) -> list[OfflineEntry]:
        cursor = await self._conn.execute(
            "SELECT * FROM offline_messages WHERE namespace = ? "
            "ORDER BY created_at ASC, seq ASC",
            (namespace,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_entry(r) for r in rows]

    async def remove(self, namespace: str, message_id: str) -> bool:
        cursor = await self._conn.execute(
            "DELETE FROM offline_messages WHERE namespace = ? AND message_id = ?",
            (namespace, message_id),
        )
        await self._conn.commit()
        return cursor.rowcount > 0

    async def clear_conversation(self, namespace: str, user_id: str, peer_id: str) -> int:
        """Delete every entry between the two users. Returns rows removed."""
        cursor = await self._conn.execute(
            "DELETE FROM offline_messages WHERE namespace = ? AND ("
            "(sender_id = ? AND receiver_id = ?) OR (sender_id = ? AND receiver_id = ?))",
            (namespace, user_id, peer_id, peer_id, user_id),
        )
        await self._conn.commit()
        return cursor.rowcount

    async def count(self, namespace: str) -> int:
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM offline_messages WHERE namespace = ?", (namespace,)
        )
        return (await cursor.fetchone())[0]

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> OfflineEntry:
        """Convert a database row to an OfflineEntry."""
        return OfflineEntry(
            namespace=row["namespace"],
            message_id=row["message_id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            content=row["content"],
            subject=row["subject"],
            created_at=datetime.fromisoformat(row["created_at"]),
            queued_at=datetime.fromisoformat(row["queued_at"]),
            seq=row["seq"],
        )
