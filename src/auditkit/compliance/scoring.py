"""Compliance score aggregation."""

from typing import Iterable, Optional

from auditkit.models import RequirementVerdict, ScoreSummary, Status


class ScoreAggregator:
    """Computes overall and per-category scores from requirement verdicts.

    score = 100 * passed / (total - manual)

    MANUAL requirements cannot be judged automatically and are left out of
    both numerator and denominator. When nothing is left to judge the score
    is None (reported as N/A), never 0 or 100.
    """

    def __init__(self, precision: int = 1) -> None:
        self.precision = precision

    def aggregate(self, verdicts: Iterable[RequirementVerdict]) -> ScoreSummary:
        """Compute the score summary for a framework's verdicts."""
        verdicts = list(verdicts)

        by_category: dict[str, list[RequirementVerdict]] = {}
        for verdict in verdicts:
            if verdict.category:
                by_category.setdefault(verdict.category, []).append(verdict)

        counts = _count(verdicts)
        categories = {
            category: self._score(_count(items)) for category, items in by_category.items()
        }

        return ScoreSummary(
            score=self._score(counts),
            passed=counts[Status.PASS],
            failed=counts[Status.FAIL],
            warned=counts[Status.WARN],
            manual=counts[Status.MANUAL],
            total=len(verdicts),
            categories=categories,
        )

    def _score(self, counts: dict[Status, int]) -> Optional[float]:
        total = sum(counts.values())
        automatable = total - counts[Status.MANUAL]
        if automatable <= 0:
            return None
        return round(100.0 * counts[Status.PASS] / automatable, self.precision)


def _count(verdicts: list[RequirementVerdict]) -> dict[Status, int]:
    counts = {status: 0 for status in Status}
    for verdict in verdicts:
        counts[verdict.status] += 1
    return counts
