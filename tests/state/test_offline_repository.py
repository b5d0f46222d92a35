"""Tests for offline entry model and repository."""
import pytest
import pytest_asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path

from dmrelay.state.database import DatabaseManager
from dmrelay.state.models.offline import OfflineEntry
from dmrelay.state.repositories.offline import OfflineRepository

NS = "user:0123456789abcdef"


@pytest_asyncio.fixture
async def repo_db(tmp_path: Path) -> DatabaseManager:
    """Create and initialize a temp database."""
    manager = DatabaseManager(tmp_path / "test_offline.db")
    await manager.initialize()
    return manager


def _entry(
    message_id: str = "local_1_aaaaaa",
    sender_id: str = "alice",
    receiver_id: str = "bob",
    minutes: int = 0,
    **kwargs,
) -> OfflineEntry:
    """Helper to build an OfflineEntry with defaults."""
    created = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    defaults = dict(
        namespace=NS,
        message_id=message_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content="Hello offline",
        created_at=created,
        queued_at=created,
    )
    defaults.update(kwargs)
    return OfflineEntry(**defaults)


class TestOfflineEntryModel:
    """Tests for the OfflineEntry frozen dataclass."""

    def test_create_valid(self) -> None:
        e = _entry()
        assert e.subject == ""
        assert e.seq is None

    def test_empty_message_id_raises(self) -> None:
        with pytest.raises(ValueError, match="message_id"):
            _entry(message_id="")

    def test_empty_content_raises(self) -> None:
        with pytest.raises(ValueError, match="content"):
            _entry(content="")

    def test_empty_namespace_raises(self) -> None:
        with pytest.raises(ValueError, match="namespace"):
            _entry(namespace="")

    def test_frozen(self) -> None:
        e = _entry()
        with pytest.raises(AttributeError):
            e.content = "changed"  # type: ignore[misc]


class TestSchema:
    @pytest.mark.asyncio
    async def test_schema_version_recorded(self, repo_db: DatabaseManager) -> None:
        async with repo_db.connection() as conn:
            cursor = await conn.execute("SELECT version FROM schema_versions")
            rows = await cursor.fetchall()
        assert [r["version"] for r in rows] == ["1.0.0"]

    @pytest.mark.asyncio
    async def test_initialize_is_repeatable(self, repo_db: DatabaseManager) -> None:
        await repo_db.initialize()
        assert repo_db.is_initialized


class TestOfflineRepository:
    @pytest.mark.asyncio
    async def test_append_and_list(self, repo_db: DatabaseManager) -> None:
        async with repo_db.connection() as conn:
            repo = OfflineRepository(conn)
            assert await repo.append(_entry()) is True
            rows = await repo.list_conversation(NS, "alice", "bob")
        assert len(rows) == 1
        assert rows[0].seq is not None
        assert rows[0].created_at == datetime(2026, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_duplicate_id_ignored(self, repo_db: DatabaseManager) -> None:
        async with repo_db.connection() as conn:
            repo = OfflineRepository(conn)
            await repo.append(_entry())
            assert await repo.append(_entry(content="different")) is False
            rows = await repo.list_all(NS)
        assert [r.content for r in rows] == ["Hello offline"]

    @pytest.mark.asyncio
    async def test_conversation_includes_both_directions(self, repo_db: DatabaseManager) -> None:
        async with repo_db.connection() as conn:
            repo = OfflineRepository(conn)
            await repo.append(_entry("m1", minutes=2))
            await repo.append(_entry("m2", sender_id="bob", receiver_id="alice", minutes=1))
            await repo.append(_entry("m3", receiver_id="carol"))
            rows = await repo.list_conversation(NS, "alice", "bob")
        assert [r.message_id for r in rows] == ["m2", "m1"]

    @pytest.mark.asyncio
    async def test_equal_timestamps_keep_insertion_order(self, repo_db: DatabaseManager) -> None:
        async with repo_db.connection() as conn:
            repo = OfflineRepository(conn)
            for mid in ("b", "a", "c"):
                await repo.append(_entry(mid))
            rows = await repo.list_all(NS)
        assert [r.message_id for r in rows] == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_namespace_scoping(self, repo_db: DatabaseManager) -> None:
        async with repo_db.connection() as conn:
            repo = OfflineRepository(conn)
            await repo.append(_entry())
            assert await repo.count("user:other") == 0
            assert await repo.remove("user:other", "local_1_aaaaaa") is False
            assert await repo.count(NS) == 1

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, repo_db: DatabaseManager) -> None:
        async with repo_db.connection() as conn:
            repo = OfflineRepository(conn)
            await repo.append(_entry("m1"))
            await repo.append(_entry("m2"))
            await repo.append(_entry("m3", receiver_id="carol"))
            assert await repo.remove(NS, "m1") is True
            assert await repo.clear_conversation(NS, "alice", "bob") == 1
            assert await repo.count(NS) == 1
