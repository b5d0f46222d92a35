"""Per-user client state model."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ClientState:
    """Client flags that must survive between processes.

    Keyed by the same namespace as the offline queue so one account's
    flags never leak into another's.

    Attributes:
        namespace: Storage scope derived from the owning user's id.
        local_mode: True while the backend is considered unreachable.
        reason: Why local mode was last entered (empty once cleared).
        updated_at: When the row was last written.
    """

    namespace: str
    updated_at: datetime
    local_mode: bool = False
    reason: str = ""

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not self.namespace:
            raise ValueError("namespace cannot be empty")
