"""Data models for compliance scan results."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Status(Enum):
    """Outcome of a single check or a collapsed requirement."""

    PASS = "PASS"
    FAIL = "FAIL"
    WARN = "WARN"
    MANUAL = "MANUAL"
    INFO = "INFO"

    @property
    def precedence(self) -> int:
        """Rank used when collapsing results (higher dominates)."""
        return _STATUS_PRECEDENCE[self]


_STATUS_PRECEDENCE = {
    Status.FAIL: 3,
    Status.WARN: 2,
    Status.MANUAL: 1,
    Status.PASS: 0,
    Status.INFO: 0,
}


class Severity(Enum):
    """Severity of a failing check."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Sort rank (lower = more severe)."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


class Priority(Enum):
    """Remediation priority, independent of severity."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        """Sort rank (lower = more urgent)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.CRITICAL: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
    Priority.INFO: 4,
}


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class CheckResult:
    """Represents the outcome of one leaf check invocation."""

    check_id: str
    name: str
    status: Status
    evidence: str
    control: str = ""
    mapping_key: str = ""
    severity: Optional[Severity] = None
    remediation: str = ""
    remediation_detail: str = ""
    screenshot_guide: str = ""
    console_url: str = ""
    priority: Priority = Priority.INFO
    timestamp: datetime = field(default_factory=utcnow)
    frameworks: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.mapping_key:
            self.mapping_key = self.check_id
        if self.status == Status.FAIL:
            if self.severity is None:
                raise ValueError(f"Failing check {self.check_id} has no severity")
            if not self.evidence:
                raise ValueError(f"Failing check {self.check_id} has no evidence")

    def with_frameworks(self, frameworks: dict[str, str]) -> "CheckResult":
        """Return a copy carrying the given framework mappings."""
        return replace(self, frameworks=dict(frameworks))

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "check_id": self.check_id,
            "control": self.control,
            "mapping_key": self.mapping_key,
            "name": self.name,
            "status": self.status.value,
            "severity": self.severity.value if self.severity else None,
            "evidence": self.evidence,
            "remediation": self.remediation,
            "remediation_detail": self.remediation_detail,
            "screenshot_guide": self.screenshot_guide,
            "console_url": self.console_url,
            "priority": self.priority.value,
            "timestamp": self.timestamp.isoformat(),
            "frameworks": dict(sorted(self.frameworks.items())),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CheckResult":
        """Create from dictionary."""
        severity = data.get("severity")
        timestamp = data.get("timestamp")
        return cls(
            check_id=data["check_id"],
            name=data.get("name", ""),
            status=Status(data["status"]),
            evidence=data.get("evidence", ""),
            control=data.get("control", ""),
            mapping_key=data.get("mapping_key", ""),
            severity=Severity(severity) if severity else None,
            remediation=data.get("remediation", ""),
            remediation_detail=data.get("remediation_detail", ""),
            screenshot_guide=data.get("screenshot_guide", ""),
            console_url=data.get("console_url", ""),
            priority=Priority(data.get("priority", "INFO")),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else utcnow(),
            frameworks=data.get("frameworks", {}),
        )


@dataclass
class CheckerFailure:
    """A checker that could not produce results."""

    checker_name: str
    error: str
    error_type: str = "Exception"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "checker": self.checker_name,
            "error": self.error,
            "error_type": self.error_type,
        }

    @classmethod
    def from_exception(cls, checker_name: str, exc: BaseException) -> "CheckerFailure":
        """Build a failure record from a raised exception."""
        return cls(
            checker_name=checker_name,
            error=str(exc) or exc.__class__.__name__,
            error_type=exc.__class__.__name__,
        )


@dataclass
class RequirementVerdict:
    """Collapsed status of one framework requirement."""

    framework: str
    requirement_id: str
    status: Status
    title: str = ""
    category: str = ""
    severity: Optional[Severity] = None
    priority: Priority = Priority.INFO
    evidence: str = ""
    contributing_results: list[CheckResult] = field(default_factory=list)

    @property
    def contributing_check_ids(self) -> list[str]:
        """Check IDs that fed this verdict."""
        return [r.check_id for r in self.contributing_results]

    @property
    def failing_results(self) -> list[CheckResult]:
        """Contributors with FAIL status."""
        return [r for r in self.contributing_results if r.status == Status.FAIL]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "framework": self.framework,
            "requirement_id": self.requirement_id,
            "title": self.title,
            "category": self.category,
            "status": self.status.value,
            "severity": self.severity.value if self.severity else None,
            "priority": self.priority.value,
            "evidence": self.evidence,
            "checks": self.contributing_check_ids,
        }


@dataclass
class RemediationItem:
    """A failing requirement with the guidance needed to fix it."""

    requirement_id: str
    title: str
    severity: Severity
    priority: Priority
    evidence: str
    actions: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)
    screenshot_guides: list[str] = field(default_factory=list)
    console_urls: list[str] = field(default_factory=list)

    @property
    def recommendation(self) -> str:
        """One-line recommendation for summaries."""
        action = self.actions[0] if self.actions else "Review failing checks"
        label = f"{self.requirement_id} {self.title}".strip()
        return f"[{self.severity.value}] {label}: {action}"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "requirement_id": self.requirement_id,
            "title": self.title,
            "severity": self.severity.value,
            "priority": self.priority.value,
            "evidence": self.evidence,
            "actions": self.actions,
            "details": self.details,
            "screenshot_guides": self.screenshot_guides,
            "console_urls": self.console_urls,
        }


@dataclass(frozen=True)
class ScoreSummary:
    """Aggregate compliance score and requirement counts.

    ``score`` is None when no requirement could be judged automatically;
    callers must check ``score_available`` rather than treating None as 0.
    """

    score: Optional[float]
    passed: int
    failed: int
    warned: int
    manual: int
    total: int
    categories: dict[str, Optional[float]] = field(default_factory=dict)

    @property
    def automatable(self) -> int:
        """Requirements that count toward the score."""
        return self.total - self.manual

    @property
    def score_available(self) -> bool:
        """Whether a numeric score could be computed."""
        return self.score is not None

    @property
    def score_label(self) -> str:
        """Display form of the score."""
        if self.score is None:
            return "N/A"
        return f"{self.score:.1f}%"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "score": self.score,
            "score_status": "ok" if self.score_available else "no_automatable_requirements",
            "passed": self.passed,
            "failed": self.failed,
            "warned": self.warned,
            "manual": self.manual,
            "total": self.total,
            "automatable": self.automatable,
            "categories": dict(sorted(self.categories.items())),
        }


@dataclass(frozen=True)
class ComplianceReport:
    """Result of one (provider, account, framework) compliance run."""

    framework: str
    provider: str
    account_id: str
    timestamp: datetime
    summary: ScoreSummary
    verdicts: tuple[RequirementVerdict, ...] = ()
    remediations: tuple[RemediationItem, ...] = ()
    unmapped_checks: tuple[str, ...] = ()
    failures: tuple[CheckerFailure, ...] = ()
    checkers_attempted: Optional[int] = None
    version: str = ""

    @property
    def score(self) -> Optional[float]:
        """Shortcut for the overall score."""
        return self.summary.score

    @property
    def checkers_succeeded(self) -> Optional[int]:
        """Number of checkers that produced results, or None if unknown."""
        if self.checkers_attempted is None:
            return None
        return self.checkers_attempted - len(self.failures)

    @property
    def recommendations(self) -> list[str]:
        """Ordered one-line recommendations."""
        return [item.recommendation for item in self.remediations]

    @property
    def has_failures(self) -> bool:
        """Whether any requirement failed."""
        return self.summary.failed > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "provider": self.provider,
            "framework": self.framework,
            "account_id": self.account_id,
            "score": self.summary.score,
            "summary": self.summary.to_dict(),
            "coverage": {
                "checkers_attempted": self.checkers_attempted,
                "checkers_succeeded": self.checkers_succeeded,
                "omitted": [f.to_dict() for f in self.failures],
            },
            "controls": [v.to_dict() for v in self.verdicts],
            "remediations": [r.to_dict() for r in self.remediations],
            "recommendations": self.recommendations,
            "unmapped_controls": list(self.unmapped_checks),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ComplianceReport":
        """Rebuild a report from its cached dictionary form.

        Contributing results are not persisted, so verdicts come back
        without them.
        """
        summary_data = data.get("summary", {})
        summary = ScoreSummary(
            score=summary_data.get("score"),
            passed=summary_data.get("passed", 0),
            failed=summary_data.get("failed", 0),
            warned=summary_data.get("warned", 0),
            manual=summary_data.get("manual", 0),
            total=summary_data.get("total", 0),
            categories=summary_data.get("categories", {}),
        )

        verdicts = []
        for item in data.get("controls", []):
            severity = item.get("severity")
            verdicts.append(
                RequirementVerdict(
                    framework=item.get("framework", data.get("framework", "")),
                    requirement_id=item["requirement_id"],
                    status=Status(item["status"]),
                    title=item.get("title", ""),
                    category=item.get("category", ""),
                    severity=Severity(severity) if severity else None,
                    priority=Priority(item.get("priority", "INFO")),
                    evidence=item.get("evidence", ""),
                )
            )

        remediations = []
        for item in data.get("remediations", []):
            remediations.append(
                RemediationItem(
                    requirement_id=item["requirement_id"],
                    title=item.get("title", ""),
                    severity=Severity(item["severity"]),
                    priority=Priority(item.get("priority", "INFO")),
                    evidence=item.get("evidence", ""),
                    actions=item.get("actions", []),
                    details=item.get("details", []),
                    screenshot_guides=item.get("screenshot_guides", []),
                    console_urls=item.get("console_urls", []),
                )
            )

        coverage = data.get("coverage", {})
        failures = [
            CheckerFailure(
                checker_name=f["checker"],
                error=f.get("error", ""),
                error_type=f.get("error_type", "Exception"),
            )
            for f in coverage.get("omitted", [])
        ]

        return cls(
            framework=data["framework"],
            provider=data.get("provider", ""),
            account_id=data.get("account_id", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            summary=summary,
            verdicts=tuple(verdicts),
            remediations=tuple(remediations),
            unmapped_checks=tuple(data.get("unmapped_controls", [])),
            failures=tuple(failures),
            checkers_attempted=coverage.get("checkers_attempted"),
            version=data.get("version", ""),
        )
