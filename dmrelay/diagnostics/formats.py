"""Payload format discovery for the send operation."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from dmrelay.client.attempts import DeliveryAttempt, execute_candidate
from dmrelay.client.catalog import EndpointCatalog
from dmrelay.client.transport import Transport
from dmrelay.client.types import Operation

logger = logging.getLogger(__name__)

DIAGNOSTIC_CONTENT = "This is an automated test message to identify working formats."
DIAGNOSTIC_SUBJECT = "Diagnostic Test"


@dataclass(frozen=True)
class FormatTest:
    format_description: str
    endpoint: str
    attempt: DeliveryAttempt

    @property
    def candidate(self) -> str:
        return self.attempt.candidate

    @property
    def ok(self) -> bool:
        return self.attempt.succeeded

    def to_dict(self) -> dict[str, Any]:
        return {"formatDescription": self.format_description, "endpoint": self.endpoint, "ok": self.ok,
                **self.attempt.to_dict()}


@dataclass(frozen=True)
class FormatTestReport:
    receiver: str
    sample_content: str
    tests: tuple[FormatTest, ...] = ()
    error: Optional[str] = None
    tested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def successful_formats(self) -> list[FormatTest]:
        return [t for t in self.tests if t.ok]

    @property
    def success(self) -> bool:
        return bool(self.successful_formats)

    def ranked_candidates(self) -> list[str]:
        return [t.candidate for t in self.successful_formats]

    def to_summary_dict(self) -> dict[str, Any]:
        """Run metadata without the per-test records."""
        return {
            "receiver": self.receiver,
            "sampleContent": self.sample_content,
            "testedAt": self.tested_at.isoformat(),
            "success": self.success,
            "error": self.error,
            "totalTested": len(self.tests),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.to_summary_dict(),
            "successfulFormats": [t.to_dict() for t in self.successful_formats],
            "allResults": [t.to_dict() for t in self.tests],
        }


class FormatProbe:
    """Posts the synthetic message once per send variant and records each outcome.

    Every variant in the catalog is tried, role-scoped routes included. The
    probe only reads the catalog; it keeps no dispatcher state and queues
    nothing offline. Probe messages are not cleaned up server side; they
    are recognizable by their fixed content.
    """

    def __init__(self, transport: Transport, catalog: EndpointCatalog | None = None) -> None:
        self._transport = transport
        self._catalog = catalog or EndpointCatalog()

    async def run(self, receiver: str, sample_content: str = DIAGNOSTIC_CONTENT) -> FormatTestReport:
        receiver = (receiver or "").strip()
        if not receiver:
            return FormatTestReport(receiver="", sample_content=sample_content, error="No recipient ID provided")
        results: list[FormatTest] = []
        for candidate in self._catalog.all(Operation.SEND):
            body = candidate.build_body(receiver, sample_content, DIAGNOSTIC_SUBJECT)
            attempt, _ = await execute_candidate(self._transport, Operation.SEND, candidate, body, receiver)
            results.append(FormatTest(format_description=candidate.description, endpoint=candidate.route,
                                      attempt=attempt))
            if attempt.succeeded:
                logger.info("Working format: candidate=%s endpoint=%s", candidate.name, candidate.route)
        report = FormatTestReport(receiver=receiver, sample_content=sample_content, tests=tuple(results))
        logger.info("Format probe: tested=%d working=%d", len(results), len(report.successful_formats))
        return report
