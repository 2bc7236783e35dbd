"""Main scan interface for auditkit."""

import logging
from datetime import datetime
from typing import Iterable, Optional

from auditkit.checks.base import Checker
from auditkit.compliance.collapser import RequirementCollapser
from auditkit.compliance.mapper import FrameworkMappingTable
from auditkit.compliance.models import FrameworkName, framework_key
from auditkit.compliance.ranking import RemediationRanker
from auditkit.compliance.scoring import ScoreAggregator
from auditkit.context import ScanContext
from auditkit.errors import UnknownFrameworkError
from auditkit.models import CheckerFailure, CheckResult, ComplianceReport, utcnow
from auditkit.runner import CheckerRunner

logger = logging.getLogger(__name__)


def build_report(
    results: Iterable[CheckResult],
    framework: FrameworkName,
    table: Optional[FrameworkMappingTable] = None,
    provider: str = "aws",
    account_id: str = "unknown",
    failures: Iterable[CheckerFailure] = (),
    attempted: Optional[int] = None,
    timestamp: Optional[datetime] = None,
) -> ComplianceReport:
    """Turn a finished run's results into a compliance report.

    This does no I/O. Given the same results, failures and timestamp it
    returns an identical report regardless of result order.

    Args:
        results: Check results from every checker that succeeded.
        framework: Target framework.
        table: Mapping table. Defaults to the built-in table.
        provider: Cloud provider name.
        account_id: Account the results describe.
        failures: Checkers omitted from the run.
        attempted: Number of checkers attempted. None leaves checker
            coverage unknown.
        timestamp: Report time. Defaults to now.

    Returns:
        ComplianceReport for the framework.

    Raises:
        UnknownFrameworkError: If the framework is not in the table.
    """
    from auditkit import __version__

    table = table or FrameworkMappingTable.default()
    fw = framework_key(framework)
    failures = list(failures)

    annotated = [table.annotate(r) for r in results]
    collapsed = RequirementCollapser(table).collapse(annotated, fw)
    summary = ScoreAggregator().aggregate(collapsed.verdicts)
    remediations = RemediationRanker().rank(collapsed.verdicts)

    if collapsed.unmapped:
        logger.debug(
            f"{len(collapsed.unmapped)} results do not map to any {fw} requirement"
        )

    return ComplianceReport(
        framework=fw,
        provider=provider,
        account_id=account_id,
        timestamp=timestamp or utcnow(),
        summary=summary,
        verdicts=tuple(collapsed.verdicts),
        remediations=tuple(remediations),
        unmapped_checks=tuple(sorted({r.check_id for r in collapsed.unmapped})),
        failures=tuple(failures),
        checkers_attempted=attempted,
        version=__version__,
    )


def run_compliance_scan(
    checkers: Iterable[Checker],
    framework: FrameworkName,
    table: Optional[FrameworkMappingTable] = None,
    provider: str = "aws",
    account_id: str = "unknown",
    runner: Optional[CheckerRunner] = None,
    context: Optional[ScanContext] = None,
    timestamp: Optional[datetime] = None,
    allow_partial: bool = False,
) -> ComplianceReport:
    """Run checkers and produce a compliance report for one framework.

    Args:
        checkers: Checkers to run.
        framework: Target framework, e.g. ``"soc2"``.
        table: Mapping table. Defaults to the built-in table.
        provider: Cloud provider name.
        account_id: Account being scanned.
        runner: Checker runner. Defaults to a runner with default limits.
        context: Scan-wide cancellation context.
        timestamp: Report time. Defaults to now.
        allow_partial: Build a report from whatever finished if the scan is
            cancelled.

    Returns:
        ComplianceReport for the framework.

    Raises:
        UnknownFrameworkError: If the framework is not in the table.
        ScanCancelledError: If the scan was cancelled and partial output
            was not allowed.
    """
    table = table or FrameworkMappingTable.default()
    fw = framework_key(framework)
    if not table.has_framework(fw):
        raise UnknownFrameworkError(fw, table.frameworks())

    runner = runner or CheckerRunner()
    outcome = runner.run(checkers, context=context, allow_partial=allow_partial)

    for failure in outcome.failures:
        logger.warning(f"Omitted from report: {failure.checker_name} ({failure.error})")

    return build_report(
        outcome.results,
        fw,
        table=table,
        provider=provider,
        account_id=account_id,
        failures=outcome.failures,
        attempted=outcome.attempted,
        timestamp=timestamp,
    )
