"""auditkit - Cloud compliance scanning, control mapping and scoring."""

__version__ = "0.1.0"

from auditkit.models import (
    CheckerFailure,
    CheckResult,
    ComplianceReport,
    Priority,
    RemediationItem,
    RequirementVerdict,
    ScoreSummary,
    Severity,
    Status,
)
from auditkit.scanner import build_report, run_compliance_scan

__all__ = [
    "__version__",
    "build_report",
    "run_compliance_scan",
    "CheckerFailure",
    "CheckResult",
    "ComplianceReport",
    "Priority",
    "RemediationItem",
    "RequirementVerdict",
    "ScoreSummary",
    "Severity",
    "Status",
]
