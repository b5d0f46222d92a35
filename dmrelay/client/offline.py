"""Durable queue of messages that could not be delivered."""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone

from dmrelay.state.database import DatabaseManager
from dmrelay.state.models.client_state import ClientState
from dmrelay.state.models.offline import OfflineEntry
from dmrelay.state.repositories.client_state import ClientStateRepository
from dmrelay.state.repositories.offline import OfflineRepository

from .message import Message
from .types import MessageStatus

logger = logging.getLogger(__name__)


def user_namespace(user_id: str) -> str:
    """Storage namespace for ``user_id``.

    Args:
        user_id: Authenticated user identifier.

    Returns:
        ``user:`` followed by the first 16 hex digits of its SHA-256.
    """
    return "user:" + hashlib.sha256(user_id.encode("utf-8")).hexdigest()[:16]


def _to_entry(namespace: str, message: Message) -> OfflineEntry:
    return OfflineEntry(
        namespace=namespace,
        message_id=message.id,
        sender_id=message.sender,
        receiver_id=message.receiver,
        content=message.content,
        subject=message.subject,
        created_at=message.created_at.astimezone(timezone.utc),
        queued_at=datetime.now(timezone.utc),
    )


def _to_message(entry: OfflineEntry) -> Message:
    return Message(
        id=entry.message_id,
        sender=entry.sender_id,
        receiver=entry.receiver_id,
        content=entry.content,
        subject=entry.subject,
        created_at=entry.created_at,
        status=MessageStatus.QUEUED_OFFLINE,
    )


class OfflineStore:
    """Offline log and local-mode flag for one user, backed by SQLite.

    Each call opens its own connection and each write is a single committed
    statement, so an interrupted process never leaves a partial entry.
    """

    def __init__(self, db: DatabaseManager, user_id: str) -> None:
        self._db = db
        self._user_id = user_id
        self._namespace = user_namespace(user_id)

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def namespace(self) -> str:
        return self._namespace

    async def _ready(self) -> None:
        if not self._db.is_initialized:
            await self._db.initialize()

    async def append(self, message: Message) -> bool:
        """Queue ``message``. Re-appending an id already queued is a no-op.

        Returns:
            True if the message was newly stored.
        """
        await self._ready()
        async with self._db.connection() as conn:
            written = await OfflineRepository(conn).append(_to_entry(self._namespace, message))
        if written:
            logger.info("Queued offline: id=%s receiver=%s", message.id, message.receiver)
        else:
            logger.debug("Already queued: id=%s", message.id)
        return written

    async def list(self, peer: str) -> list[Message]:
        """Queued messages between the current user and ``peer``, oldest first."""
        await self._ready()
        async with self._db.connection() as conn:
            entries = await OfflineRepository(conn).list_conversation(self._namespace, self._user_id, peer)
        return [_to_message(e) for e in entries]

    async def list_all(self) -> list[Message]:
        await self._ready()
        async with self._db.connection() as conn:
            entries = await OfflineRepository(conn).list_all(self._namespace)
        return [_to_message(e) for e in entries]

    async def remove(self, message_id: str) -> bool:
        await self._ready()
        async with self._db.connection() as conn:
            return await OfflineRepository(conn).remove(self._namespace, message_id)

    async def clear(self, peer: str) -> int:
        await self._ready()
        async with self._db.connection() as conn:
            removed = await OfflineRepository(conn).clear_conversation(self._namespace, self._user_id, peer)
        logger.info("Cleared offline conversation: peer=%s removed=%d", peer, removed)
        return removed

    async def count(self) -> int:
        await self._ready()
        async with self._db.connection() as conn:
            return await OfflineRepository(conn).count(self._namespace)

    async def load_local_mode(self) -> bool:
        """Local-mode flag saved by an earlier process for this user."""
        await self._ready()
        async with self._db.connection() as conn:
            state = await ClientStateRepository(conn).get(self._namespace)
        return state.local_mode if state else False

    async def save_local_mode(self, local_mode: bool, reason: str = "") -> None:
        await self._ready()
        state = ClientState(namespace=self._namespace, local_mode=local_mode,
                            reason=reason if local_mode else "", updated_at=datetime.now(timezone.utc))
        async with self._db.connection() as conn:
            await ClientStateRepository(conn).upsert(state)
