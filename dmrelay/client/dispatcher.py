"""Multi-candidate dispatcher for direct messages."""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from .attempts import DeliveryAttempt, execute_candidate
from .catalog import EndpointCandidate, EndpointCatalog
from .exceptions import InvalidArgument
from .message import Message, new_local_id
from .offline import OfflineStore
from .session import Session
from .transport import Transport
from .types import MessageStatus, Operation

if TYPE_CHECKING:
    from dmrelay.diagnostics.connectivity import ConnectivityReport

logger = logging.getLogger(__name__)

T = TypeVar("T")

HISTORY_SIZE = 200


@dataclass
class FlushResult:
    peer: str
    delivered: list[Message] = field(default_factory=list)
    remaining: int = 0

    @property
    def complete(self) -> bool:
        return self.remaining == 0


def _require(value: str, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} cannot be empty")
    return value.strip()


def _json_object(text: str) -> dict:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _parse_unread_count(text: str) -> int:
    data: Any = json.loads(text)
    if isinstance(data, dict):
        data = next((data[k] for k in ("count", "unreadCount", "unread") if k in data), None)
    if isinstance(data, bool) or not isinstance(data, int) or data < 0:
        raise ValueError("expected a non-negative unread count")
    return data


def _parse_conversation(text: str) -> list[Message]:
    data: Any = json.loads(text)
    if isinstance(data, dict):
        data = data.get("messages")
    if not isinstance(data, list):
        raise ValueError("expected a JSON list of messages")
    messages = []
    for item in data:
        try:
            messages.append(Message.from_server(item))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Skipping malformed message in conversation: %s", e)
    return messages


class Dispatcher:
    """Delivers, fetches and marks messages through the first working candidate.

    Must be used as an async context manager; it opens the transport and
    restores local mode saved by an earlier process for the same user.
    Candidates are tried strictly one after another, and a single pass over
    the scope-eligible list is made per call. When every candidate fails a
    send is queued in the offline store and the session enters local mode.
    """

    def __init__(self, transport: Transport, session: Session, store: OfflineStore,
                 catalog: EndpointCatalog | None = None, history_size: int = HISTORY_SIZE) -> None:
        if store.user_id != session.user_id:
            raise InvalidArgument("Offline store belongs to a different user than the session")
        self._transport = transport
        self._session = session
        self._store = store
        self._catalog = catalog or EndpointCatalog()
        self._last_attempts: list[DeliveryAttempt] = []
        self._history: deque[DeliveryAttempt] = deque(maxlen=history_size)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def catalog(self) -> EndpointCatalog:
        return self._catalog

    @property
    def store(self) -> OfflineStore:
        return self._store

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def last_attempts(self) -> list[DeliveryAttempt]:
        """Attempts made by the most recent operation."""
        return list(self._last_attempts)

    @property
    def history(self) -> list[DeliveryAttempt]:
        """Every attempt made in this process, oldest first, bounded."""
        return list(self._history)

    async def __aenter__(self) -> "Dispatcher":
        if not self._session.local_mode and await self._store.load_local_mode():
            logger.info("Restored local mode: user=%s", self._session.user_id)
            self._session.local_mode = True
        await self._transport.__aenter__()
        return self

    async def __aexit__(self, *args) -> None:
        await self._transport.__aexit__(*args)

    async def _enter_local_mode(self, reason: str) -> None:
        self._session.enter_local_mode(reason)
        await self._store.save_local_mode(True, reason)

    async def leave_local_mode(self, report: ConnectivityReport) -> bool:
        """Clear local mode, here and on disk, if ``report`` shows the backend is reachable."""
        left = self._session.leave_local_mode(report)
        if left:
            await self._store.save_local_mode(False)
        return left

    def _candidates(self, operation: Operation) -> list[EndpointCandidate]:
        return self._catalog.eligible(operation, self._session.role)

    async def _run(self, operation: Operation, peer: str, parse: Callable[[str], T] | None,
                   body_for: Callable[[EndpointCandidate], Any] | None = None) -> tuple[bool, T | None]:
        candidates = self._candidates(operation)
        for candidate in candidates:
            body = body_for(candidate) if body_for else None
            attempt, parsed = await execute_candidate(self._transport, operation, candidate, body, peer, parse)
            self._last_attempts.append(attempt)
            self._history.append(attempt)
            if attempt.succeeded:
                return True, parsed
        logger.warning("All candidates failed: op=%s peer=%s tried=%d", operation.value, peer, len(candidates))
        return False, None

    async def _deliver(self, draft: Message) -> Message | None:
        ok, sent = await self._run(
            Operation.SEND, draft.receiver,
            parse=lambda text: Message.from_server(_json_object(text), draft),
            body_for=lambda c: c.build_body(draft.receiver, draft.content, draft.subject),
        )
        return sent if ok else None

    async def send(self, receiver: str, content: str, subject: str = "") -> Message:
        """Deliver a direct message, or queue it offline if no candidate works.

        Raises:
            InvalidArgument: If ``receiver`` or ``content`` is blank.
        """
        self._last_attempts = []
        receiver = _require(receiver, "receiver")
        _require(content, "content")
        draft = Message(id=new_local_id(), sender=self._session.user_id, receiver=receiver,
                        content=content, subject=subject or "")
        sent = await self._deliver(draft)
        if sent is not None:
            logger.info("Message sent: id=%s receiver=%s attempts=%d", sent.id, receiver, len(self._last_attempts))
            return sent
        queued = draft.with_status(MessageStatus.QUEUED_OFFLINE)
        await self._store.append(queued)
        await self._enter_local_mode(f"send to {receiver} exhausted {len(self._last_attempts)} candidates")
        return queued

    async def fetch_messages(self, peer: str) -> list[Message]:
        """Conversation with ``peer`` in chronological order.

        Queued offline messages are merged in while the session is in local
        mode; if no candidate answers, only the queued messages are returned.
        """
        self._last_attempts = []
        peer = _require(peer, "peer")
        ok, messages = await self._run(Operation.FETCH, peer, parse=_parse_conversation)
        if not ok:
            await self._enter_local_mode(f"fetch for {peer} exhausted {len(self._last_attempts)} candidates")
            return await self._store.list(peer)
        merged = list(messages or [])
        if self._session.local_mode:
            merged.extend(await self._store.list(peer))
        merged.sort(key=lambda m: m.created_at)
        return merged

    async def mark_read(self, peer: str) -> None:
        """Best-effort read receipt for messages from ``peer``."""
        self._last_attempts = []
        peer = _require(peer, "peer")
        ok, _ = await self._run(Operation.MARK_READ, peer, parse=None)
        if not ok:
            logger.info("Could not mark messages from %s as read", peer)
            await self._enter_local_mode(f"mark-read for {peer} exhausted {len(self._last_attempts)} candidates")

    async def unread_count(self) -> int | None:
        """Number of unread messages for the session user.

        Returns None when no candidate answers; the count is not tracked locally.
        """
        self._last_attempts = []
        ok, count = await self._run(Operation.UNREAD_COUNT, "", parse=_parse_unread_count)
        if not ok:
            await self._enter_local_mode(f"unread-count exhausted {len(self._last_attempts)} candidates")
            return None
        return count

    async def flush(self, peer: str) -> FlushResult:
        """Replay queued messages to ``peer`` in their original order.

        Each delivered entry is removed from the store. Replay stops at the
        first entry no candidate accepts, so later messages never overtake
        earlier ones. A flush does not queue anything new.
        """
        self._last_attempts = []
        peer = _require(peer, "peer")
        pending = [m for m in await self._store.list(peer) if m.sender == self._session.user_id]
        result = FlushResult(peer=peer, remaining=len(pending))
        for entry in pending:
            sent = await self._deliver(entry)
            if sent is None:
                await self._enter_local_mode(f"flush to {peer} halted at {entry.id}")
                break
            await self._store.remove(entry.id)
            result.delivered.append(sent)
            result.remaining -= 1
        logger.info("Flush: peer=%s delivered=%d remaining=%d", peer, len(result.delivered), result.remaining)
        return result
