"""Ordering of failing requirements for remediation."""

from typing import Iterable

from auditkit.compliance.models import requirement_sort_key
from auditkit.models import RemediationItem, RequirementVerdict, Status


class RemediationRanker:
    """Orders failing requirements for presentation.

    Sort keys: severity (CRITICAL first), then priority, then requirement
    ID in natural order. The order is total, so identical verdicts always
    rank identically.
    """

    def rank(self, verdicts: Iterable[RequirementVerdict]) -> list[RemediationItem]:
        """Build the ordered remediation list from a framework's verdicts."""
        failing = [v for v in verdicts if v.status == Status.FAIL]
        failing.sort(key=self._sort_key)
        return [self._to_item(v) for v in failing]

    def _sort_key(self, verdict: RequirementVerdict) -> tuple:
        return (
            verdict.severity.rank,
            verdict.priority.rank,
            requirement_sort_key(verdict.requirement_id),
        )

    def _to_item(self, verdict: RequirementVerdict) -> RemediationItem:
        failing = verdict.failing_results
        return RemediationItem(
            requirement_id=verdict.requirement_id,
            title=verdict.title,
            severity=verdict.severity,
            priority=verdict.priority,
            evidence=verdict.evidence,
            actions=_unique(r.remediation for r in failing),
            details=_unique(r.remediation_detail for r in failing),
            screenshot_guides=_unique(r.screenshot_guide for r in failing),
            console_urls=_unique(r.console_url for r in failing),
        )


def _unique(values: Iterable[str]) -> list[str]:
    """Drop blanks and duplicates, keeping first-seen order."""
    seen: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen
