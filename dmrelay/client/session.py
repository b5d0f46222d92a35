"""Process-wide session state.

A session is created when the user authenticates (``start_session``) and
reset on logout (``end_session``). It carries the identity consumed from the
authentication layer and the ``local_mode`` flag. Local mode is set the first
time every candidate of an operation fails and is only cleared by
``leave_local_mode`` with a connectivity report that shows the backend is
reachable again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .exceptions import InvalidArgument, SessionError
from .types import Scope

if TYPE_CHECKING:
    from dmrelay.diagnostics.connectivity import ConnectivityReport

logger = logging.getLogger(__name__)


@dataclass
class Session:
    user_id: str
    role: Scope = Scope.STUDENT
    token: str = field(default="", repr=False)
    local_mode: bool = False

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise InvalidArgument("user_id cannot be empty")
        self.role = Scope(self.role)

    def enter_local_mode(self, reason: str) -> None:
        if not self.local_mode:
            logger.warning("Entering local mode: user=%s reason=%s", self.user_id, reason)
        self.local_mode = True

    def leave_local_mode(self, report: ConnectivityReport) -> bool:
        """Clear local mode if ``report`` shows the backend is reachable."""
        if not report.backend_reachable:
            logger.info("Staying in local mode: backend unreachable")
            return False
        if self.local_mode:
            logger.info("Leaving local mode: user=%s", self.user_id)
        self.local_mode = False
        return True


_session: Session | None = None


def start_session(user_id: str, role: Scope | str = Scope.STUDENT, token: str = "") -> Session:
    """Create the process-wide session, replacing any previous one."""
    global _session
    _session = Session(user_id=user_id, role=Scope(role), token=token)
    return _session


def current_session() -> Session:
    if _session is None:
        raise SessionError("No active session. Call start_session() first.")
    return _session


def end_session() -> None:
    global _session
    _session = None
