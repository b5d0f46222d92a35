"""Backend reachability probe.

Three tests run one after another against the configured backend:

``root_get``
    GET the API base through the normal client (success on 2xx).
``raw_request``
    GET the API base straight through the HTTP transport, without client
    headers, credentials or redirects. Any HTTP response counts as success,
    which separates "the host answers" from "the API route misbehaves".
``origin_head``
    HEAD the bare origin, isolating DNS/TLS/origin failures from route
    failures (success on 2xx).

The backend is considered reachable when any single test succeeds.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from dmrelay.client.exceptions import TransportError
from dmrelay.client.transport import Transport
from dmrelay.client.types import ConnectivitySummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectivityTest:
    name: str
    url: str
    success: bool
    elapsed_ms: float
    status_code: Optional[int] = None
    body_length: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url, "success": self.success,
                "statusCode": self.status_code, "elapsedMs": round(self.elapsed_ms, 2),
                "bodyLength": self.body_length, "error": self.error}


@dataclass(frozen=True)
class ConnectivityReport:
    base_url: str
    tests: tuple[ConnectivityTest, ...]
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def successful_tests(self) -> int:
        return sum(1 for t in self.tests if t.success)

    @property
    def backend_reachable(self) -> bool:
        return self.successful_tests > 0

    @property
    def summary(self) -> ConnectivitySummary:
        return ConnectivitySummary(tests_run=len(self.tests), successful_tests=self.successful_tests,
                                   backend_reachable=self.backend_reachable)

    def test(self, name: str) -> ConnectivityTest | None:
        return next((t for t in self.tests if t.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        s = self.summary
        return {
            "baseUrl": self.base_url,
            "checkedAt": self.checked_at.isoformat(),
            "tests": [t.to_dict() for t in self.tests],
            "summary": {"testsRun": s["tests_run"], "successfulTests": s["successful_tests"],
                        "backendReachable": s["backend_reachable"]},
        }


class ConnectivityProbe:
    """Runs the reachability battery. Never raises for network failures."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def _timed(self, name: str, url: str, call: Callable[[], Awaitable[tuple[bool, int, int | None]]]) -> ConnectivityTest:
        t0 = time.perf_counter()
        try:
            success, status, length = await call()
        except TransportError as e:
            elapsed = (time.perf_counter() - t0) * 1000
            logger.info("Connectivity test failed: test=%s error=%s", name, e)
            return ConnectivityTest(name=name, url=url, success=False, elapsed_ms=elapsed, error=str(e))
        elapsed = (time.perf_counter() - t0) * 1000
        logger.info("Connectivity test: test=%s status=%s success=%s elapsed=%.2fms", name, status, success, elapsed)
        return ConnectivityTest(name=name, url=url, success=success, elapsed_ms=elapsed,
                                status_code=status, body_length=length)

    async def _root_get(self) -> tuple[bool, int, int | None]:
        status, text = await self._transport.request("GET", self._transport.base_url)
        return 200 <= status < 300, status, len(text)

    async def _raw_request(self) -> tuple[bool, int, int | None]:
        status, length = await self._transport.raw_get(self._transport.base_url)
        return True, status, length

    async def _origin_head(self) -> tuple[bool, int, int | None]:
        status, _ = await self._transport.request("HEAD", self._transport.origin)
        return 200 <= status < 300, status, None

    async def run(self) -> ConnectivityReport:
        base = self._transport.base_url
        tests = (
            await self._timed("root_get", base, self._root_get),
            await self._timed("raw_request", base, self._raw_request),
            await self._timed("origin_head", self._transport.origin, self._origin_head),
        )
        report = ConnectivityReport(base_url=base, tests=tests)
        logger.info("Connectivity: reachable=%s passed=%d/%d", report.backend_reachable,
                    report.successful_tests, len(tests))
        return report
