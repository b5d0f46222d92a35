"""Candidate endpoints for each logical messaging operation.

The backend's route and payload contract is not fixed, so every operation
has an ordered list of (route, method, payload shape, role scope)
combinations. The dispatcher walks the scope-eligible ones in order; the
format probe walks every send variant. A diagnostic report may permute an
operation's order, but a permutation never drops a candidate.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

from .types import Operation, Scope

PayloadShape = Callable[[str, str, str], dict[str, Any]]


@dataclass(frozen=True)
class EndpointCandidate:
    name: str
    description: str
    route: str
    method: str
    payload_shape: PayloadShape | None = None
    scope: Scope = Scope.ANY
    send_credentials: bool = True

    def eligible_for(self, role: Scope) -> bool:
        return self.scope is Scope.ANY or self.scope is Scope(role)

    def path(self, peer: str = "") -> str:
        return self.route.format(peer=peer)

    def build_body(self, receiver: str, content: str, subject: str) -> dict[str, Any] | None:
        if self.payload_shape is None:
            return None
        return self.payload_shape(receiver, content, subject)


def _standard(r: str, c: str, s: str) -> dict[str, Any]:
    return {"recipientId": r, "content": c, "subject": s}


def _basic(r: str, c: str, s: str) -> dict[str, Any]:
    return {"recipientId": r, "content": c}


def _receiver_field(r: str, c: str, s: str) -> dict[str, Any]:
    return {"receiver": r, "content": c}


def _receiver_id(r: str, c: str, s: str) -> dict[str, Any]:
    return {"receiverId": r, "content": c}


def _both_recipient_fields(r: str, c: str, s: str) -> dict[str, Any]:
    return {"recipientId": r, "receiver": r, "content": c}


def _with_type(r: str, c: str, s: str) -> dict[str, Any]:
    return {"recipientId": r, "content": c, "type": "direct"}


def _message_field(r: str, c: str, s: str) -> dict[str, Any]:
    return {"recipientId": r, "message": c}


def _all_aliases(r: str, c: str, s: str) -> dict[str, Any]:
    return {"recipient": r, "recipientId": r, "message": c, "content": c, "subject": s, "type": "direct"}


def _object_id(r: str, c: str, s: str) -> dict[str, Any]:
    return {"recipientId": {"$oid": r}, "content": c}


SEND_CANDIDATES: tuple[EndpointCandidate, ...] = (
    EndpointCandidate("standard", "Standard format", "/messages/direct", "POST", _standard),
    EndpointCandidate("staff-endpoint", "Staff-specific endpoint", "/staff/messages/direct", "POST", _standard, Scope.STAFF),
    EndpointCandidate("admin-endpoint", "Admin-specific endpoint", "/admin/messages/direct", "POST", _standard, Scope.ADMIN),
    EndpointCandidate("student-endpoint", "Student-specific endpoint", "/student/messages/direct", "POST", _basic, Scope.STUDENT),
    EndpointCandidate("basic", "Basic format", "/messages/direct", "POST", _basic),
    EndpointCandidate("alternative-fields", "Alternative field names", "/messages/direct", "POST", _all_aliases),
    EndpointCandidate("receiver-field", "Using 'receiver' field", "/messages/direct", "POST", _receiver_field),
    EndpointCandidate("multiple-recipient-fields", "Multiple recipient field names", "/messages/direct", "POST", _both_recipient_fields),
    EndpointCandidate("with-type", "With message type field", "/messages/direct", "POST", _with_type),
    EndpointCandidate("message-field", "Using 'message' field instead of 'content'", "/messages/direct", "POST", _message_field),
    EndpointCandidate("object-id", "Object ID format", "/messages/direct", "POST", _object_id),
    EndpointCandidate("receiver-id-field", "Using 'receiverId' field", "/messages/direct", "POST", _receiver_id),
    EndpointCandidate("minimal-no-credentials", "Without credentials", "/messages/direct", "POST", _basic,
                      send_credentials=False),
)

FETCH_CANDIDATES: tuple[EndpointCandidate, ...] = (
    EndpointCandidate("direct", "Direct conversation", "/messages/direct/{peer}", "GET"),
    EndpointCandidate("staff-direct", "Staff conversation", "/staff/messages/direct/{peer}", "GET", scope=Scope.STAFF),
    EndpointCandidate("admin-direct", "Admin conversation", "/admin/messages/direct/{peer}", "GET", scope=Scope.ADMIN),
    EndpointCandidate("by-peer", "Conversation by peer id", "/messages/{peer}", "GET"),
)

MARK_READ_CANDIDATES: tuple[EndpointCandidate, ...] = (
    EndpointCandidate("read", "Mark read", "/messages/read/{peer}", "PUT"),
    EndpointCandidate("staff-read", "Staff mark read", "/staff/messages/read/{peer}", "PUT", scope=Scope.STAFF),
    EndpointCandidate("admin-read", "Admin mark read", "/admin/messages/read/{peer}", "PUT", scope=Scope.ADMIN),
)

UNREAD_COUNT_CANDIDATES: tuple[EndpointCandidate, ...] = (
    EndpointCandidate("unread-count", "Unread count", "/messages/unread/count", "GET"),
    EndpointCandidate("staff-unread-count", "Staff unread count", "/staff/messages/unread/count", "GET", scope=Scope.STAFF),
)


class EndpointCatalog:
    """Ordered candidates per operation, with reorderable priority."""

    def __init__(self, candidates: dict[Operation, Sequence[EndpointCandidate]] | None = None) -> None:
        source = candidates if candidates is not None else {
            Operation.SEND: SEND_CANDIDATES,
            Operation.FETCH: FETCH_CANDIDATES,
            Operation.MARK_READ: MARK_READ_CANDIDATES,
            Operation.UNREAD_COUNT: UNREAD_COUNT_CANDIDATES,
        }
        self._candidates: dict[Operation, list[EndpointCandidate]] = {}
        for op in Operation:
            items = list(source.get(op, ()))
            names = [c.name for c in items]
            if len(set(names)) != len(names):
                raise ValueError(f"Duplicate candidate names for {op.value}: {names}")
            self._candidates[op] = items

    def all(self, operation: Operation) -> list[EndpointCandidate]:
        return list(self._candidates[operation])

    def eligible(self, operation: Operation, role: Scope) -> list[EndpointCandidate]:
        return [c for c in self._candidates[operation] if c.eligible_for(role)]

    def get(self, operation: Operation, name: str) -> EndpointCandidate | None:
        return next((c for c in self._candidates[operation] if c.name == name), None)

    def names(self, operation: Operation) -> list[str]:
        return [c.name for c in self._candidates[operation]]

    def promote(self, operation: Operation, preferred: Iterable[str]) -> list[str]:
        """Move ``preferred`` names to the front, keeping the rest in order.

        Unknown names are ignored. Returns the resulting order.
        """
        current = self._candidates[operation]
        by_name = {c.name: c for c in current}
        front: list[EndpointCandidate] = []
        for name in preferred:
            c = by_name.get(name)
            if c is not None and c not in front:
                front.append(c)
        self._candidates[operation] = front + [c for c in current if c not in front]
        return self.names(operation)
