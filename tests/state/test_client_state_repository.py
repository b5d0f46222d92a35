"""Tests for the client state model and repository."""
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from pathlib import Path

from dmrelay.state.database import DatabaseManager
from dmrelay.state.models.client_state import ClientState
from dmrelay.state.repositories.client_state import ClientStateRepository

NS = "user:0123456789abcdef"


@pytest_asyncio.fixture
async def state_db(tmp_path: Path) -> DatabaseManager:
    """Create and initialize a temp database."""
    manager = DatabaseManager(tmp_path / "test_state.db")
    await manager.initialize()
    return manager


class TestClientStateModel:
    def test_defaults(self) -> None:
        s = ClientState(namespace=NS, updated_at=datetime.now(timezone.utc))
        assert s.local_mode is False
        assert s.reason == ""

    def test_empty_namespace_raises(self) -> None:
        with pytest.raises(ValueError, match="namespace"):
            ClientState(namespace="", updated_at=datetime.now(timezone.utc))


class TestClientStateRepository:
    @pytest.mark.asyncio
    async def test_missing_namespace_returns_none(self, state_db: DatabaseManager) -> None:
        async with state_db.connection() as conn:
            assert await ClientStateRepository(conn).get(NS) is None

    @pytest.mark.asyncio
    async def test_upsert_replaces_previous_row(self, state_db: DatabaseManager) -> None:
        when = datetime(2026, 1, 1, tzinfo=timezone.utc)
        async with state_db.connection() as conn:
            repo = ClientStateRepository(conn)
            await repo.upsert(ClientState(namespace=NS, updated_at=when, local_mode=True, reason="send failed"))
            await repo.upsert(ClientState(namespace=NS, updated_at=when, local_mode=False))
            state = await repo.get(NS)
            cursor = await conn.execute("SELECT COUNT(*) FROM client_state")
            rows = (await cursor.fetchone())[0]
        assert state.local_mode is False
        assert state.reason == ""
        assert state.updated_at == when
        assert rows == 1

    @pytest.mark.asyncio
    async def test_offline_table_has_no_unused_columns(self, state_db: DatabaseManager) -> None:
        async with state_db.connection() as conn:
            cursor = await conn.execute("PRAGMA table_info(offline_messages)")
            columns = [r["name"] for r in await cursor.fetchall()]
        assert "status" not in columns
        assert columns[-1] == "queued_at"
