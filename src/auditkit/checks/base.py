"""Base classes for cloud service checkers."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

from auditkit.context import ScanContext
from auditkit.errors import CheckerError, ScanCancelledError
from auditkit.evidence import format_resource_ids
from auditkit.models import CheckResult, Priority, Severity, Status

logger = logging.getLogger(__name__)


def collect(client: Any, operation: str, key: str, **kwargs: Any) -> list[dict]:
    """Call a boto3 list/describe operation and gather every page.

    Args:
        client: boto3 service client.
        operation: Client method name, e.g. ``"describe_clusters"``.
        key: Response key holding the items, e.g. ``"Clusters"``.
        **kwargs: Request parameters.

    Returns:
        Items from all pages.
    """
    if client.can_paginate(operation):
        items: list[dict] = []
        for page in client.get_paginator(operation).paginate(**kwargs):
            items.extend(page.get(key, []))
        return items
    return getattr(client, operation)(**kwargs).get(key, [])


class Checker(ABC):
    """Abstract base class for service checkers.

    A checker runs every check for one cloud service and returns one
    CheckResult per check. Raising from ``run`` means the checker produced
    nothing usable; the runner then records it as omitted.
    """

    # Display name - override in subclasses
    NAME: str = "Unknown Checker"

    @property
    def name(self) -> str:
        """Human readable checker name."""
        return self.NAME

    @abstractmethod
    def run(self, context: ScanContext) -> list[CheckResult]:
        """Run every check for this service.

        Args:
            context: Cancellation and deadline context.

        Returns:
            List of check results.
        """
        pass


class ServiceChecker(Checker):
    """Checker composed of independent check methods.

    A check method that raises is skipped so that one failing API call does
    not hide the others. If every check fails the last error is raised so
    the runner can report the whole checker as omitted.
    """

    def checks(self) -> Sequence[Callable[[], CheckResult]]:
        """Return the bound check methods in evaluation order."""
        return []

    def run(self, context: ScanContext) -> list[CheckResult]:
        results = []
        errors: list[Exception] = []
        checks = self.checks()

        for check in checks:
            context.raise_if_cancelled()
            try:
                results.append(check())
            except ScanCancelledError:
                raise
            except Exception as e:
                logger.debug(f"{self.name}: {check.__name__} skipped: {e}")
                errors.append(e)

        if checks and not results and errors:
            raise CheckerError(self.name, str(errors[-1])) from errors[-1]

        return results


class ResourceCheck:
    """Builds the three standard outcomes of a resource check.

    Every leaf check follows the same shape: enumerate resources, collect the
    offending ones, then report FAIL (with the offenders), a vacuous PASS
    when no resources exist, or PASS when all are compliant.
    """

    def __init__(
        self,
        check_id: str,
        name: str,
        control: str,
        mapping_key: str,
        severity: Severity,
        priority: Priority,
        resource_kind: str,
        remediation: str = "",
        remediation_detail: str = "",
        screenshot_guide: str = "",
        console_url: str = "",
    ) -> None:
        self.check_id = check_id
        self.name = name
        self.control = control
        self.mapping_key = mapping_key
        self.severity = severity
        self.priority = priority
        self.resource_kind = resource_kind
        self.remediation = remediation
        self.remediation_detail = remediation_detail
        self.screenshot_guide = screenshot_guide
        self.console_url = console_url

    def evaluate(
        self,
        total: int,
        offenders: Sequence[str],
        fail_message: str,
        pass_message: str,
    ) -> CheckResult:
        """Create the CheckResult for this check.

        Args:
            total: Number of resources discovered.
            offenders: IDs of resources violating the check.
            fail_message: Text after the offender count, e.g.
                ``"Redshift clusters NOT encrypted"``.
            pass_message: Text after ``"All <total>"``, e.g.
                ``"Redshift clusters are encrypted"``.

        Returns:
            CheckResult describing the outcome.
        """
        if offenders:
            return self._result(
                status=Status.FAIL,
                evidence=f"{len(offenders)} {fail_message}: {format_resource_ids(offenders)}",
                severity=self.severity,
                priority=self.priority,
                guidance=True,
            )

        if total == 0:
            return self._result(
                status=Status.PASS,
                evidence=f"No {self.resource_kind} found",
            )

        return self._result(
            status=Status.PASS,
            evidence=f"All {total} {pass_message}",
        )

    def _result(
        self,
        status: Status,
        evidence: str,
        severity: Optional[Severity] = None,
        priority: Priority = Priority.INFO,
        guidance: bool = False,
    ) -> CheckResult:
        return CheckResult(
            check_id=self.check_id,
            name=self.name,
            control=self.control,
            mapping_key=self.mapping_key,
            status=status,
            severity=severity,
            evidence=evidence,
            remediation=self.remediation if guidance else "",
            remediation_detail=self.remediation_detail if guidance else "",
            screenshot_guide=self.screenshot_guide if guidance else "",
            console_url=self.console_url if guidance else "",
            priority=priority,
        )
