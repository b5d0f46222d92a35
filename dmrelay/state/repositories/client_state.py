"""Client state repository."""
import aiosqlite
from datetime import datetime
from typing import Optional

from dmrelay.state.models.client_state import ClientState


class ClientStateRepository:
    """Persists the local-mode flag per user namespace.

    Each namespace has a single row. Upserting replaces the previous state.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def upsert(self, state: ClientState) -> None:
        """Insert or replace the state for a namespace.

        Args:
            state: The client state to persist.
        """
        await self._conn.execute(
            "INSERT OR REPLACE INTO client_state "
            "(namespace, local_mode, reason, updated_at) "
            "VALUES (?, ?, ?, ?)",
            (
                state.namespace,
                int(state.local_mode),
                state.reason,
                state.updated_at.isoformat(),
            ),
        )
        await self._conn.commit()

    async def get(self, namespace: str) -> Optional[ClientState]:
        """Look up the state for a namespace.

        Returns:
            The ClientState if one was ever written, None otherwise.
        """
        cursor = await self._conn.execute(
            "SELECT * FROM client_state WHERE namespace = ?", (namespace,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return ClientState(
            namespace=row["namespace"],
            local_mode=bool(row["local_mode"]),
            reason=row["reason"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
