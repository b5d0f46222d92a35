"""Aggregated diagnostic report and the opt-in catalog reordering it drives."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from dmrelay.client.attempts import DeliveryAttempt
from dmrelay.client.catalog import EndpointCatalog
from dmrelay.client.transport import Transport
from dmrelay.client.types import DiagnosticSummary, Operation

from .connectivity import ConnectivityProbe, ConnectivityReport
from .endpoints import EndpointCheckProbe, EndpointCheckReport
from .formats import DIAGNOSTIC_CONTENT, FormatProbe, FormatTest, FormatTestReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosticReport:
    """Connectivity, endpoint checks, format tests and dispatcher history.

    Built on demand and never persisted by the library. ``to_dict`` output
    is JSON-serializable.
    """

    connectivity: ConnectivityReport
    formats: Optional[FormatTestReport] = None
    endpoints: Optional[EndpointCheckReport] = None
    history: tuple[DeliveryAttempt, ...] = ()
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def backend_reachable(self) -> bool:
        return self.connectivity.backend_reachable

    @property
    def format_tests(self) -> list[FormatTest]:
        return list(self.formats.tests) if self.formats else []

    @property
    def successful_formats(self) -> list[FormatTest]:
        return self.formats.successful_formats if self.formats else []

    @property
    def summary(self) -> DiagnosticSummary:
        c = self.connectivity.summary
        return DiagnosticSummary(
            tests_run=c["tests_run"], successful_tests=c["successful_tests"],
            backend_reachable=c["backend_reachable"], formats_tested=len(self.format_tests),
            working_formats=[t.candidate for t in self.successful_formats],
        )

    def preferred_order(self, operation: Operation) -> list[str]:
        """Candidate names that worked for ``operation``, best first.

        Send variants that passed the format probe come first in catalog
        order, followed by candidates ranked by successful dispatcher attempts.
        """
        ranked: list[str] = []
        if operation is Operation.SEND:
            ranked.extend(t.candidate for t in self.successful_formats)
        wins: dict[str, int] = {}
        for a in self.history:
            if a.operation is operation and a.succeeded:
                wins[a.candidate] = wins.get(a.candidate, 0) + 1
        # dicts keep first-seen order, so sorted() is stable on ties
        for name in sorted(wins, key=lambda n: -wins[n]):
            if name not in ranked:
                ranked.append(name)
        return ranked

    def apply_to(self, catalog: EndpointCatalog, operations: Iterable[Operation] = tuple(Operation)) -> dict[str, list[str]]:
        """Move working candidates to the front of ``catalog``.

        Returns the new order per operation that changed.
        """
        changed: dict[str, list[str]] = {}
        for op in operations:
            preferred = self.preferred_order(op)
            if preferred:
                changed[op.value] = catalog.promote(op, preferred)
                logger.info("Reordered catalog: op=%s order=%s", op.value, changed[op.value])
        return changed

    def to_dict(self) -> dict[str, Any]:
        s = self.summary
        return {
            "generatedAt": self.generated_at.isoformat(),
            "connectivity": self.connectivity.to_dict(),
            "endpointChecks": self.endpoints.to_dict() if self.endpoints else None,
            "formatProbe": self.formats.to_summary_dict() if self.formats else None,
            "formatTests": [t.to_dict() for t in self.format_tests],
            "successfulFormats": [t.to_dict() for t in self.successful_formats],
            "history": [a.to_dict() for a in self.history],
            "summary": {
                "testsRun": s["tests_run"],
                "successfulTests": s["successful_tests"],
                "backendReachable": s["backend_reachable"],
                "formatsTested": s["formats_tested"],
                "workingFormats": s["working_formats"],
            },
        }


async def run_diagnostics(
    transport: Transport,
    catalog: EndpointCatalog | None = None,
    receiver: str | None = None,
    history: Iterable[DeliveryAttempt] = (),
    sample_content: str = DIAGNOSTIC_CONTENT,
    check_endpoints: bool = True,
) -> DiagnosticReport:
    """Probe connectivity, then send formats and endpoint checks.

    Format tests need a receiver; both later stages are skipped when the
    backend is unreachable.
    """
    connectivity = await ConnectivityProbe(transport).run()
    formats: FormatTestReport | None = None
    if receiver and connectivity.backend_reachable:
        formats = await FormatProbe(transport, catalog).run(receiver, sample_content)
    elif receiver:
        logger.info("Skipping format probe: backend unreachable")
    endpoints: EndpointCheckReport | None = None
    if check_endpoints and connectivity.backend_reachable:
        endpoints = await EndpointCheckProbe(transport).run()
    return DiagnosticReport(connectivity=connectivity, formats=formats, endpoints=endpoints,
                            history=tuple(history))
