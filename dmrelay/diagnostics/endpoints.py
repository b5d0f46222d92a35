"""Endpoint-level checks of the message service.

Run after connectivity succeeds, these look one level deeper than
reachability: whether an auth token is configured and how the listing
routes and the direct-message route answer. Nothing is posted.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from dmrelay.client.exceptions import TransportError
from dmrelay.client.transport import Transport

logger = logging.getLogger(__name__)

# (name, method, path)
ENDPOINT_CHECKS: tuple[tuple[str, str, str], ...] = (
    ("messages", "GET", "/messages"),
    ("users", "GET", "/users"),
    ("direct_options", "OPTIONS", "/messages/direct"),
)


@dataclass(frozen=True)
class EndpointCheck:
    name: str
    method: str
    url: str
    success: bool
    elapsed_ms: float
    status_code: Optional[int] = None
    detail: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "method": self.method, "url": self.url, "success": self.success,
                "statusCode": self.status_code, "elapsedMs": round(self.elapsed_ms, 2),
                "detail": self.detail, "error": self.error}


@dataclass(frozen=True)
class EndpointCheckReport:
    token_present: bool
    checks: tuple[EndpointCheck, ...] = ()
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def passed(self) -> int:
        return sum(1 for c in self.checks if c.success)

    def check(self, name: str) -> EndpointCheck | None:
        return next((c for c in self.checks if c.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "checkedAt": self.checked_at.isoformat(),
            "tokenPresent": self.token_present,
            "checks": [c.to_dict() for c in self.checks],
            "summary": {"checksRun": len(self.checks), "passed": self.passed},
        }


def _describe(text: str) -> str:
    try:
        data = json.loads(text)
    except ValueError:
        return "response is not JSON"
    if isinstance(data, list):
        return f"received {len(data)} items"
    return "response is not a list"


class EndpointCheckProbe:
    """Runs the endpoint checks one after another. Never raises for network failures."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def _check(self, name: str, method: str, path: str) -> EndpointCheck:
        url = self._transport.url(path)
        t0 = time.perf_counter()
        try:
            status, text = await self._transport.request(method, url)
        except TransportError as e:
            elapsed = (time.perf_counter() - t0) * 1000
            logger.info("Endpoint check failed: check=%s error=%s", name, e)
            return EndpointCheck(name=name, method=method, url=url, success=False, elapsed_ms=elapsed, error=str(e))
        elapsed = (time.perf_counter() - t0) * 1000
        success = 200 <= status < 300
        detail = _describe(text) if success and method == "GET" else None
        logger.info("Endpoint check: check=%s status=%s success=%s elapsed=%.2fms", name, status, success, elapsed)
        return EndpointCheck(name=name, method=method, url=url, success=success, elapsed_ms=elapsed,
                             status_code=status, detail=detail)

    async def run(self) -> EndpointCheckReport:
        if not self._transport.has_token:
            logger.warning("No auth token configured; endpoint checks run unauthenticated")
        checks = tuple([await self._check(name, method, path) for name, method, path in ENDPOINT_CHECKS])
        report = EndpointCheckReport(token_present=self._transport.has_token, checks=checks)
        logger.info("Endpoint checks: passed=%d/%d", report.passed, len(checks))
        return report
