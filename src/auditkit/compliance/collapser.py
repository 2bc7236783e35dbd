"""Collapse check results into one verdict per framework requirement."""

from dataclasses import dataclass, field
from typing import Iterable

from auditkit.compliance.mapper import FrameworkMappingTable
from auditkit.compliance.models import FrameworkName, framework_key, requirement_sort_key
from auditkit.evidence import merge_evidence
from auditkit.models import CheckResult, RequirementVerdict, Status


@dataclass
class CollapseResult:
    """Verdicts for one framework plus the results that mapped nowhere in it."""

    framework: str
    verdicts: list[RequirementVerdict] = field(default_factory=list)
    unmapped: list[CheckResult] = field(default_factory=list)


class RequirementCollapser:
    """Groups check results by requirement and resolves one status per group.

    A requirement is satisfied only if every check mapped to it passes:
    FAIL dominates WARN, WARN dominates MANUAL, MANUAL dominates PASS/INFO.
    Requirements no check maps to are MANUAL.
    """

    def __init__(self, table: FrameworkMappingTable) -> None:
        """Initialize the collapser.

        Args:
            table: Mapping table shared by reference.
        """
        self.table = table

    def collapse(self, results: Iterable[CheckResult], framework: FrameworkName) -> CollapseResult:
        """Collapse results into verdicts for one framework.

        Args:
            results: Check results from a complete run.
            framework: Target framework.

        Returns:
            CollapseResult with verdicts in requirement order.

        Raises:
            UnknownFrameworkError: If the framework is not in the table.
        """
        fw = framework_key(framework)
        requirements = self.table.requirements(fw)

        buckets: dict[str, list[CheckResult]] = {r.requirement_id: [] for r in requirements}
        unmapped: list[CheckResult] = []

        for result in results:
            requirement_id = self.table.requirement_for(result.mapping_key, fw)
            if requirement_id is None:
                unmapped.append(result)
                continue
            buckets[requirement_id].append(result)

        verdicts = []
        for requirement in requirements:
            contributors = sorted(buckets[requirement.requirement_id], key=_result_sort_key)
            verdict = self._resolve(fw, requirement.requirement_id, contributors)
            verdict.title = requirement.title
            verdict.category = requirement.category
            verdicts.append(verdict)

        verdicts.sort(key=lambda v: requirement_sort_key(v.requirement_id))
        unmapped.sort(key=_result_sort_key)

        return CollapseResult(framework=fw, verdicts=verdicts, unmapped=unmapped)

    def _resolve(
        self, framework: str, requirement_id: str, contributors: list[CheckResult]
    ) -> RequirementVerdict:
        """Resolve a single bucket into a verdict."""
        if not contributors:
            return RequirementVerdict(
                framework=framework,
                requirement_id=requirement_id,
                status=Status.MANUAL,
                evidence="No automated check covers this requirement; manual attestation required",
            )

        status = max((r.status for r in contributors), key=lambda s: s.precedence)
        if status == Status.INFO:
            status = Status.PASS

        verdict = RequirementVerdict(
            framework=framework,
            requirement_id=requirement_id,
            status=status,
            contributing_results=contributors,
        )

        if status == Status.FAIL:
            failing = [r for r in contributors if r.status == Status.FAIL]
            verdict.severity = min((r.severity for r in failing), key=lambda s: s.rank)
            verdict.priority = min((r.priority for r in failing), key=lambda p: p.rank)
            verdict.evidence = merge_evidence(r.evidence for r in failing)
        elif status == Status.WARN:
            warning = [r for r in contributors if r.status == Status.WARN]
            verdict.evidence = merge_evidence(r.evidence for r in warning)
        else:
            verdict.evidence = merge_evidence(r.evidence for r in contributors)

        return verdict


def _result_sort_key(result: CheckResult) -> tuple:
    return (result.check_id, result.status.value, result.evidence)
