"""Offline queue models."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OfflineEntry:
    """A message that could not be delivered and waits for a flush.

    Attributes:
        namespace: Storage scope derived from the owning user's id.
        message_id: Client-assigned message id (``local_...``).
        sender_id: The owning user.
        receiver_id: The intended recipient.
        content: Message text.
        subject: Optional subject label.
        created_at: Client timestamp of the message.
        queued_at: When the entry was written.
        seq: Insertion order, assigned by the database.
    """

    namespace: str
    message_id: str
    sender_id: str
    receiver_id: str
    content: str
    created_at: datetime
    queued_at: datetime
    subject: str = ""
    seq: int | None = None

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not self.namespace:
            raise ValueError("namespace cannot be empty")
        if not self.message_id:
            raise ValueError("message_id cannot be empty")
        if not self.sender_id:
            raise ValueError("sender_id cannot be empty")
        if not self.receiver_id:
            raise ValueError("receiver_id cannot be empty")
        if not self.content:
            raise ValueError("content cannot be empty")
