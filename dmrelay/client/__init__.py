"""dmrelay direct-message delivery client library."""

from .attempts import DeliveryAttempt
from .catalog import EndpointCandidate, EndpointCatalog
from .dispatcher import Dispatcher, FlushResult
from .exceptions import (DeliveryError, HttpError, InvalidArgument, NetworkError, RequestTimeoutError, SessionError,
                         TransportError)
from .message import Message
from .offline import OfflineStore, user_namespace
from .session import Session, current_session, end_session, start_session
from .transport import CLIENT_VERSION, DEFAULT_TIMEOUT, Transport
from .types import AttemptOutcome, MessageStatus, Operation, Scope

__all__ = [
    "CLIENT_VERSION", "DEFAULT_TIMEOUT",
    "Dispatcher", "FlushResult", "DeliveryAttempt", "EndpointCandidate", "EndpointCatalog",
    "Message", "OfflineStore", "user_namespace", "Transport",
    "Session", "start_session", "current_session", "end_session",
    "AttemptOutcome", "MessageStatus", "Operation", "Scope",
    "DeliveryError", "InvalidArgument", "SessionError", "TransportError", "HttpError", "NetworkError",
    "RequestTimeoutError",
]

__version__ = CLIENT_VERSION
