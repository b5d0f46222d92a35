"""Single-candidate request execution and the attempt record it produces."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar

from .catalog import EndpointCandidate
from .exceptions import HttpError, NetworkError, RequestTimeoutError
from .sanitize import sanitize_dict
from .transport import Transport
from .types import AttemptOutcome, Operation

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_BODY_CHARS = 2000


@dataclass(frozen=True)
class DeliveryAttempt:
    """One request against one candidate. Never mutated after creation."""

    operation: Operation
    candidate: str
    description: str
    method: str
    url: str
    started_at: datetime
    duration_ms: float
    outcome: AttemptOutcome
    http_status: Optional[int] = None
    response_body: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation.value,
            "candidate": self.candidate,
            "description": self.description,
            "method": self.method,
            "url": self.url,
            "startedAt": self.started_at.isoformat(),
            "durationMs": round(self.duration_ms, 2),
            "outcome": self.outcome.value,
            "httpStatus": self.http_status,
            "responseBody": self.response_body,
            "error": self.error,
        }


async def execute_candidate(
    transport: Transport,
    operation: Operation,
    candidate: EndpointCandidate,
    body: Any = None,
    peer: str = "",
    parse: Callable[[str], T] | None = None,
) -> tuple[DeliveryAttempt, T | None]:
    """Run ``candidate`` once and classify the result.

    A 2xx whose body ``parse`` rejects (ValueError, TypeError or
    AttributeError from a malformed document) is recorded as an
    ``httpError``. Transport failures never propagate.
    """
    url = transport.url(candidate.path(peer))
    started_at = datetime.now(timezone.utc)
    t0 = time.perf_counter()
    status: int | None = None
    text: str | None = None
    parsed: T | None = None
    error: str | None = None
    if body is not None:
        logger.debug("Payload: op=%s candidate=%s body=%s", operation.value, candidate.name,
                     sanitize_dict(body) if isinstance(body, dict) else body)
    try:
        status, text = await transport.request(candidate.method, url, body, candidate.send_credentials)
        if not 200 <= status < 300:
            raise HttpError(f"{candidate.method} {url} returned {status}", status, text)
        if parse is not None:
            try:
                parsed = parse(text)
            except (ValueError, TypeError, AttributeError) as e:
                raise HttpError(f"Unparsable {status} response: {e}", status, text) from e
        outcome = AttemptOutcome.SUCCESS
    except HttpError as e:
        outcome, error = AttemptOutcome.HTTP_ERROR, str(e)
    except RequestTimeoutError as e:
        outcome, error = AttemptOutcome.TIMEOUT, str(e)
    except NetworkError as e:
        outcome, error = AttemptOutcome.NETWORK_ERROR, str(e)
    duration_ms = (time.perf_counter() - t0) * 1000
    attempt = DeliveryAttempt(
        operation=operation, candidate=candidate.name, description=candidate.description,
        method=candidate.method, url=url, started_at=started_at, duration_ms=duration_ms,
        outcome=outcome, http_status=status,
        response_body=text[:_MAX_BODY_CHARS] if text is not None else None, error=error,
    )
    fields = {"operation": operation.value, "candidate": candidate.name, "http_status": status,
              "outcome": outcome.value, "duration_ms": round(duration_ms, 2)}
    logger.log(logging.INFO if attempt.succeeded else logging.WARNING,
               "Attempt: op=%s candidate=%s status=%s outcome=%s duration=%.2fms",
               operation.value, candidate.name, status, outcome.value, duration_ms, extra={"attempt": fields})
    return attempt, parsed
