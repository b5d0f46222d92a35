"""Type definitions and enums for the dmrelay client library."""

from enum import Enum
from typing import TypedDict


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    QUEUED_OFFLINE = "queued-offline"
    FAILED = "failed"


class Scope(str, Enum):
    ANY = "any"
    STAFF = "staff"
    ADMIN = "admin"
    STUDENT = "student"


class Operation(str, Enum):
    SEND = "send"
    FETCH = "fetch"
    MARK_READ = "mark_read"
    UNREAD_COUNT = "unread_count"


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    HTTP_ERROR = "httpError"
    NETWORK_ERROR = "networkError"
    TIMEOUT = "timeout"


class ConnectivitySummary(TypedDict):
    tests_run: int
    successful_tests: int
    backend_reachable: bool


class DiagnosticSummary(ConnectivitySummary):
    formats_tested: int
    working_formats: list[str]
