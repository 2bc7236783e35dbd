"""Tests for auditkit data models."""

from datetime import datetime, timezone

import pytest

from auditkit.evidence import format_resource_ids, merge_evidence, truncate_items
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


class TestStatus:
    """Tests for Status precedence."""

    def test_fail_dominates(self):
        statuses = [Status.PASS, Status.MANUAL, Status.FAIL, Status.WARN]
        assert max(statuses, key=lambda s: s.precedence) == Status.FAIL

    def test_warn_dominates_manual(self):
        assert Status.WARN.precedence > Status.MANUAL.precedence

    def test_pass_and_info_are_equal(self):
        assert Status.PASS.precedence == Status.INFO.precedence


class TestSeverityAndPriority:
    """Tests for Severity and Priority ordering."""

    def test_severity_rank_order(self):
        ordered = sorted(Severity, key=lambda s: s.rank)
        assert ordered == [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]

    def test_priority_info_is_least_urgent(self):
        assert max(Priority, key=lambda p: p.rank) == Priority.INFO


class TestCheckResult:
    """Tests for CheckResult dataclass."""

    def test_mapping_key_defaults_to_check_id(self):
        result = CheckResult(check_id="redshift.x", name="X", status=Status.PASS, evidence="ok")
        assert result.mapping_key == "redshift.x"

    def test_fail_requires_severity(self):
        with pytest.raises(ValueError, match="no severity"):
            CheckResult(check_id="a", name="A", status=Status.FAIL, evidence="bad")

    def test_fail_requires_evidence(self):
        with pytest.raises(ValueError, match="no evidence"):
            CheckResult(
                check_id="a", name="A", status=Status.FAIL, evidence="", severity=Severity.LOW
            )

    def test_with_frameworks_returns_copy(self):
        result = CheckResult(check_id="a", name="A", status=Status.PASS, evidence="ok")
        annotated = result.with_frameworks({"soc2": "CC6.3"})

        assert annotated.frameworks == {"soc2": "CC6.3"}
        assert result.frameworks == {}

    def test_to_dict_and_from_dict(self):
        result = CheckResult(
            check_id="redshift.cluster_encryption",
            name="Redshift Cluster Encryption",
            status=Status.FAIL,
            evidence="1 Redshift clusters NOT encrypted: [cluster-a]",
            control="CC6.3",
            mapping_key="REDSHIFT_ENCRYPTION",
            severity=Severity.CRITICAL,
            priority=Priority.CRITICAL,
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            frameworks={"soc2": "CC6.3"},
        )

        data = result.to_dict()
        assert data["status"] == "FAIL"
        assert data["severity"] == "CRITICAL"

        restored = CheckResult.from_dict(data)
        assert restored == result


class TestCheckerFailure:
    """Tests for CheckerFailure."""

    def test_from_exception(self):
        failure = CheckerFailure.from_exception("Redshift", PermissionError("AccessDenied"))

        assert failure.checker_name == "Redshift"
        assert failure.error == "AccessDenied"
        assert failure.error_type == "PermissionError"

    def test_from_exception_without_message(self):
        failure = CheckerFailure.from_exception("Redshift", RuntimeError())
        assert failure.error == "RuntimeError"


class TestScoreSummary:
    """Tests for ScoreSummary."""

    def test_score_label(self):
        summary = ScoreSummary(score=66.7, passed=2, failed=1, warned=0, manual=1, total=4)
        assert summary.score_label == "66.7%"
        assert summary.automatable == 3

    def test_unavailable_score(self):
        summary = ScoreSummary(score=None, passed=0, failed=0, warned=0, manual=3, total=3)

        assert summary.score_available is False
        assert summary.score_label == "N/A"
        assert summary.to_dict()["score_status"] == "no_automatable_requirements"
        assert summary.to_dict()["score"] is None


class TestRemediationItem:
    """Tests for RemediationItem."""

    def test_recommendation_uses_first_action(self):
        item = RemediationItem(
            requirement_id="CC6.3",
            title="Encryption of Data at Rest",
            severity=Severity.CRITICAL,
            priority=Priority.CRITICAL,
            evidence="...",
            actions=["Enable encryption", "Rotate keys"],
        )
        assert item.recommendation == "[CRITICAL] CC6.3 Encryption of Data at Rest: Enable encryption"

    def test_recommendation_without_actions(self):
        item = RemediationItem(
            requirement_id="3.4",
            title="",
            severity=Severity.LOW,
            priority=Priority.LOW,
            evidence="...",
        )
        assert item.recommendation == "[LOW] 3.4: Review failing checks"


class TestComplianceReport:
    """Tests for ComplianceReport serialization."""

    @pytest.fixture
    def report(self, fixed_time):
        verdict = RequirementVerdict(
            framework="soc2",
            requirement_id="CC6.3",
            status=Status.FAIL,
            title="Encryption of Data at Rest",
            category="Access",
            severity=Severity.HIGH,
            priority=Priority.HIGH,
            evidence="1 clusters NOT encrypted: [a]",
        )
        item = RemediationItem(
            requirement_id="CC6.3",
            title="Encryption of Data at Rest",
            severity=Severity.HIGH,
            priority=Priority.HIGH,
            evidence=verdict.evidence,
            actions=["Enable encryption"],
        )
        return ComplianceReport(
            framework="soc2",
            provider="aws",
            account_id="123456789012",
            timestamp=fixed_time,
            summary=ScoreSummary(score=0.0, passed=0, failed=1, warned=0, manual=0, total=1),
            verdicts=(verdict,),
            remediations=(item,),
            unmapped_checks=("custom.check",),
            failures=(CheckerFailure("OpenSearch Security", "AccessDenied", "ClientError"),),
            checkers_attempted=4,
            version="0.1.0",
        )

    def test_coverage_counts(self, report):
        assert report.checkers_succeeded == 3
        data = report.to_dict()
        assert data["coverage"]["checkers_attempted"] == 4
        assert data["coverage"]["omitted"] == [
            {"checker": "OpenSearch Security", "error": "AccessDenied", "error_type": "ClientError"}
        ]

    def test_has_failures(self, report):
        assert report.has_failures is True

    def test_round_trip_preserves_dict(self, report):
        restored = ComplianceReport.from_dict(report.to_dict())

        assert restored.to_dict() == report.to_dict()
        assert restored.verdicts[0].contributing_results == []

    def test_report_is_frozen(self, report):
        with pytest.raises(AttributeError):
            report.framework = "hipaa"


class TestEvidence:
    """Tests for evidence truncation helpers."""

    def test_truncate_items_under_limit(self):
        assert truncate_items(["a", "b"]) == (["a", "b"], 0)

    def test_format_resource_ids_truncates(self):
        ids = [f"cluster-{i}" for i in range(7)]
        assert format_resource_ids(ids) == (
            "[cluster-0 cluster-1 cluster-2 cluster-3 cluster-4 +2 more]"
        )

    def test_merge_evidence_truncates(self):
        texts = [f"e{i}" for i in range(8)]
        assert merge_evidence(texts) == "e0; e1; e2; e3; e4 (+3 more)"

    def test_merge_evidence_skips_blanks(self):
        assert merge_evidence(["a", "", "b"]) == "a; b"
