"""Connectivity, endpoint and payload-format diagnostics."""
from dmrelay.diagnostics.connectivity import ConnectivityProbe, ConnectivityReport, ConnectivityTest
from dmrelay.diagnostics.endpoints import EndpointCheck, EndpointCheckProbe, EndpointCheckReport
from dmrelay.diagnostics.formats import DIAGNOSTIC_CONTENT, FormatProbe, FormatTest, FormatTestReport
from dmrelay.diagnostics.report import DiagnosticReport, run_diagnostics
__all__ = ["ConnectivityProbe", "ConnectivityReport", "ConnectivityTest",
           "EndpointCheck", "EndpointCheckProbe", "EndpointCheckReport",
           "DIAGNOSTIC_CONTENT", "FormatProbe", "FormatTest", "FormatTestReport",
           "DiagnosticReport", "run_diagnostics"]
