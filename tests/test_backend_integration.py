"""End-to-end tests against an in-process FastAPI messaging backend."""
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest
from fastapi import APIRouter, FastAPI, Header, Request, status
from fastapi.responses import JSONResponse

from dmrelay.client import Dispatcher, MessageStatus, OfflineStore, Operation, Scope, Session, Transport
from dmrelay.diagnostics import run_diagnostics


def create_message_router(store: list[dict], recipient_field: str) -> APIRouter:
    """Direct message routes of a backend that only understands one recipient field."""
    router = APIRouter()

    def _user(token: str | None) -> str:
        return token or ""

    @router.post("/api/messages/direct", status_code=status.HTTP_201_CREATED)
    async def send_direct(request: Request, x_auth_token: str | None = Header(default=None)) -> Any:
        body = await request.json()
        receiver = body.get(recipient_field)
        if not _user(x_auth_token) or not isinstance(receiver, str) or not body.get("content"):
            return JSONResponse(status_code=400, content={"error": f"{recipient_field} and content required"})
        doc = {
            "_id": uuid.uuid4().hex[:24],
            "sender": {"_id": _user(x_auth_token), "name": _user(x_auth_token).title()},
            "receiver": receiver,
            "content": body["content"],
            "subject": body.get("subject", ""),
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "status": "unread",
        }
        store.append(doc)
        return doc

    @router.get("/api/messages/direct/{peer}")
    async def conversation(peer: str, x_auth_token: str | None = Header(default=None)) -> Any:
        me = _user(x_auth_token)
        docs = [d for d in store if {d["sender"]["_id"], d["receiver"]} == {me, peer}]
        return list(reversed(docs))

    @router.get("/api/messages/unread/count")
    async def unread_count(x_auth_token: str | None = Header(default=None)) -> Any:
        me = _user(x_auth_token)
        return {"count": sum(1 for d in store if d["receiver"] == me and d["status"] == "unread")}

    @router.put("/api/messages/read/{peer}")
    async def mark_read(peer: str, x_auth_token: str | None = Header(default=None)) -> Any:
        me = _user(x_auth_token)
        updated = 0
        for d in store:
            if d["sender"]["_id"] == peer and d["receiver"] == me and d["status"] == "unread":
                d["status"] = "read"
                updated += 1
        return {"updated": updated}

    return router


def create_backend_app(recipient_field: str = "receiver") -> FastAPI:
    app = FastAPI(title="Fake messaging backend")
    app.state.down = False
    app.state.messages = []

    @app.middleware("http")
    async def outage(request: Request, call_next):
        if request.app.state.down:
            return JSONResponse(status_code=503, content={"error": "maintenance"})
        return await call_next(request)

    @app.get("/api")
    async def root() -> dict:
        return {"status": "ok"}

    @app.head("/")
    async def origin() -> None:
        return None

    app.include_router(create_message_router(app.state.messages, recipient_field))
    return app


@pytest.fixture
def backend_app() -> FastAPI:
    return create_backend_app()


def _dispatcher(app: FastAPI, user: str, db) -> Dispatcher:
    transport = Transport("http://testserver/api", token=user, http_transport=httpx.ASGITransport(app=app))
    return Dispatcher(transport, Session(user, Scope.STUDENT, user), OfflineStore(db, user))


class TestConversation:
    @pytest.mark.asyncio
    async def test_send_fetch_and_mark_read(self, backend_app: FastAPI, db) -> None:
        async with _dispatcher(backend_app, "alice", db) as alice:
            sent = await alice.send("bob", "Hello Bob", "Hi")
            assert sent.status is MessageStatus.SENT
            assert not sent.is_local
            assert alice.last_attempts[-1].candidate == "receiver-field"
            assert all(not a.succeeded for a in alice.last_attempts[:-1])

        async with _dispatcher(backend_app, "bob", db) as bob:
            inbox = await bob.fetch_messages("alice")
            assert [m.content for m in inbox] == ["Hello Bob"]
            assert inbox[0].sender == "alice"
            assert inbox[0].read is False
            assert await bob.unread_count() == 1
            await bob.mark_read("alice")
            assert await bob.unread_count() == 0

        async with _dispatcher(backend_app, "alice", db) as alice:
            (msg,) = await alice.fetch_messages("bob")
            assert msg.read is True

    @pytest.mark.asyncio
    async def test_conversation_is_chronological(self, backend_app: FastAPI, db) -> None:
        async with _dispatcher(backend_app, "alice", db) as alice:
            for text in ("one", "two", "three"):
                await alice.send("bob", text)
            msgs = await alice.fetch_messages("bob")
        assert [m.content for m in msgs] == ["one", "two", "three"]


class TestOutageRecovery:
    @pytest.mark.asyncio
    async def test_queue_during_outage_then_flush(self, backend_app: FastAPI, db) -> None:
        backend_app.state.down = True
        async with _dispatcher(backend_app, "alice", db) as alice:
            queued = await alice.send("bob", "sent during outage")
            assert queued.status is MessageStatus.QUEUED_OFFLINE
            assert alice.session.local_mode

            report = await run_diagnostics(alice.transport, alice.catalog, "bob", alice.history)
            assert report.connectivity.test("root_get").success is False
            assert report.connectivity.test("raw_request").success is True
            assert report.successful_formats == []

            backend_app.state.down = False
            report = await run_diagnostics(alice.transport, alice.catalog, None, alice.history)
            assert await alice.leave_local_mode(report)

            result = await alice.flush("bob")
            assert result.complete
            assert await alice.store.count() == 0

        async with _dispatcher(backend_app, "bob", db) as bob:
            assert [m.content for m in await bob.fetch_messages("alice")] == ["sent during outage"]

    @pytest.mark.asyncio
    async def test_diagnostics_reorder_catalog(self, backend_app: FastAPI, db) -> None:
        async with _dispatcher(backend_app, "alice", db) as alice:
            report = await run_diagnostics(alice.transport, alice.catalog, "bob")
            assert report.preferred_order(Operation.SEND)[:2] == ["receiver-field", "multiple-recipient-fields"]
            report.apply_to(alice.catalog)
            await alice.send("bob", "fast path")
            assert len(alice.last_attempts) == 1