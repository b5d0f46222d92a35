"""Message model shared by the dispatcher, the offline store and the CLI."""

import secrets
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import MessageStatus

LOCAL_ID_PREFIX = "local_"


def new_local_id(now: datetime | None = None) -> str:
    """Client-assigned id: ``local_<epoch ms>_<random hex>``."""
    ts = now or datetime.now(timezone.utc)
    return f"{LOCAL_ID_PREFIX}{int(ts.timestamp() * 1000)}_{secrets.token_hex(3)}"


def _user_ref(v: Any) -> str:
    # Populated user documents arrive as {"_id": ..., "name": ...}.
    if isinstance(v, dict):
        v = v.get("_id") or v.get("id") or v.get("$oid") or ""
    return "" if v is None else str(v)


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_local_id, min_length=1)
    sender: str
    receiver: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    subject: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")
    status: MessageStatus = MessageStatus.PENDING
    read: bool = False

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> datetime:
        """Accept ISO strings, epoch milliseconds and extended JSON ``{"$date": ...}``."""
        if isinstance(v, dict):
            if "$date" not in v:
                raise ValueError(f"Unsupported timestamp object with keys {sorted(v)}")
            v = v["$date"]
            if isinstance(v, dict):
                v = int(v.get("$numberLong", ""))
        if isinstance(v, bool):
            raise ValueError("Timestamp cannot be a boolean")
        if isinstance(v, (int, float)):
            try:
                v = datetime.fromtimestamp(v / 1000, tz=timezone.utc)
            except (OverflowError, OSError) as e:
                raise ValueError(f"Timestamp out of range: {v}") from e
        elif isinstance(v, str):
            v = datetime.fromisoformat(v.replace("Z", "+00:00"))
        elif not isinstance(v, datetime):
            raise ValueError(f"Unsupported timestamp type: {type(v).__name__}")
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_local(self) -> bool:
        return self.id.startswith(LOCAL_ID_PREFIX)

    def with_status(self, status: MessageStatus) -> "Message":
        return self.model_copy(update={"status": status})

    @classmethod
    def from_server(cls, body: dict, draft: "Message | None" = None) -> "Message":
        """Build a sent Message from a server document.

        Missing fields fall back to ``draft``. Raises ValueError (pydantic
        ValidationError) when the merged document is still incomplete.
        """
        data: dict[str, Any] = draft.model_dump() if draft else {}
        sid = body.get("_id") or body.get("id")
        if sid:
            data["id"] = _user_ref(sid)
        for key in ("sender", "receiver"):
            if body.get(key):
                data[key] = _user_ref(body[key])
        if not body.get("receiver") and body.get("recipientId"):
            data["receiver"] = _user_ref(body["recipientId"])
        content = body.get("content") or body.get("message")
        if content:
            data["content"] = content
        if body.get("subject") is not None:
            data["subject"] = body["subject"]
        if body.get("createdAt"):
            data["created_at"] = body["createdAt"]
        data["read"] = body.get("status") == "read"
        data["status"] = MessageStatus.SENT
        return cls.model_validate(data)

    def to_wire_format(self) -> dict:
        return {
            "id": self.id,
            "sender": self.sender,
            "receiver": self.receiver,
            "content": self.content,
            "subject": self.subject,
            "createdAt": self.created_at.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "status": self.status.value,
            "read": self.read,
        }
