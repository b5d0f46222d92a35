"""Shared fixtures: temp databases, sessions and scripted HTTP backends."""
import json
from pathlib import Path
from typing import Any, Iterable

import httpx
import pytest
import pytest_asyncio

from dmrelay.client import OfflineStore, Scope, Session, Transport, end_session, start_session
from dmrelay.state import DatabaseManager

BASE_URL = "https://api.test/api"


class ScriptedBackend:
    """httpx MockTransport handler that replays a fixed list of outcomes.

    Each item is an int status, a ``(status, body)`` pair (str bodies are
    sent as text, anything else as JSON) or an exception to raise. Once the
    script runs out every request gets a 500.
    """

    def __init__(self, responses: Iterable[Any] = ()) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(500, text="unscripted")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, int):
            return httpx.Response(item, json={})
        status, body = item
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture(autouse=True)
def _reset_session():
    yield
    end_session()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("DMRELAY_API_URL", "DMRELAY_TOKEN", "DMRELAY_TIMEOUT", "DMRELAY_HTTP2"):
        monkeypatch.delenv(name, raising=False)


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> DatabaseManager:
    """Create and initialize a temp database."""
    manager = DatabaseManager(tmp_path / "offline.db")
    await manager.initialize()
    return manager


@pytest.fixture
def session() -> Session:
    return start_session("alice", Scope.STUDENT, "alice-token")


@pytest.fixture
def store(db: DatabaseManager) -> OfflineStore:
    return OfflineStore(db, "alice")


@pytest.fixture
def backend_factory():
    """Build a Transport wired to a ScriptedBackend."""
    def _make(responses: Iterable[Any] = (), token: str = "alice-token") -> tuple[Transport, ScriptedBackend]:
        backend = ScriptedBackend(responses)
        return Transport(BASE_URL, token=token, timeout=2.0, http_transport=backend.transport()), backend
    return _make
