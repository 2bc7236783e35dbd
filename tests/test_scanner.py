"""Tests for the scan entry points."""

import random

import pytest

from auditkit import __version__, build_report, run_compliance_scan
from auditkit.compliance import FrameworkMappingTable
from auditkit.errors import UnknownFrameworkError
from auditkit.models import Severity, Status
from auditkit.runner import CheckerRunner


def _verdict(report, requirement_id):
    return next(v for v in report.verdicts if v.requirement_id == requirement_id)


class TestBuildReport:
    """Tests for the pure report pipeline."""

    def test_one_scan_two_frameworks(self, small_table, make_result, fixed_time):
        results = [
            make_result(
                "store.encryption",
                status=Status.FAIL,
                mapping_key="ENCRYPTION",
                severity=Severity.HIGH,
                evidence="1 stores NOT encrypted: [store-a]",
            )
        ]

        soc2 = build_report(results, "soc2", small_table, timestamp=fixed_time)
        pci = build_report(results, "pci-dss", small_table, timestamp=fixed_time)

        assert _verdict(soc2, "CC6.3").status == Status.FAIL
        assert _verdict(pci, "3.4").status == Status.FAIL
        assert soc2.framework == "soc2"
        assert pci.framework == "pci-dss"

    def test_one_failure_among_five_contributors(self, small_table, make_result, fixed_time):
        results = [
            make_result(f"pass.{i}", mapping_key="ENCRYPTION", evidence=f"all good {i}")
            for i in range(4)
        ]
        results.append(
            make_result(
                "fail.one",
                status=Status.FAIL,
                mapping_key="ENCRYPTION",
                severity=Severity.MEDIUM,
                evidence="the only failure",
            )
        )
        verdict = _verdict(build_report(results, "soc2", small_table, timestamp=fixed_time), "CC6.3")

        assert verdict.status == Status.FAIL
        assert verdict.severity == Severity.MEDIUM
        assert verdict.evidence == "the only failure"

    def test_score_and_remediations(self, small_table, make_result, fixed_time):
        results = [
            make_result(
                "enc", status=Status.FAIL, mapping_key="ENCRYPTION", remediation="Encrypt it"
            ),
            make_result("net", mapping_key="NETWORK"),
            make_result("log", mapping_key="LOGGING"),
        ]
        report = build_report(results, "soc2", small_table, timestamp=fixed_time)

        # CC1.1 is MANUAL; 2 of 3 automatable requirements pass
        assert report.score == 66.7
        assert report.summary.manual == 1
        assert [r.requirement_id for r in report.remediations] == ["CC6.3"]
        assert report.recommendations == [
            "[HIGH] CC6.3 Encryption of Data at Rest: Encrypt it"
        ]
        assert report.version == __version__

    def test_no_results_gives_na_score(self, small_table, fixed_time):
        report = build_report([], "soc2", small_table, timestamp=fixed_time)

        assert report.score is None
        assert report.summary.score_label == "N/A"
        assert report.to_dict()["summary"]["score_status"] == "no_automatable_requirements"
        assert report.has_failures is False

    def test_unmapped_checks_listed(self, small_table, make_result, fixed_time):
        results = [make_result("orphan.check", mapping_key="ORPHAN"), make_result("log", mapping_key="LOGGING")]
        report = build_report(results, "pci-dss", small_table, timestamp=fixed_time)

        assert report.unmapped_checks == ("log", "orphan.check")

    def test_results_annotated_with_frameworks(self, small_table, make_result, fixed_time):
        results = [make_result("enc", mapping_key="ENCRYPTION")]
        report = build_report(results, "soc2", small_table, timestamp=fixed_time)

        contributor = _verdict(report, "CC6.3").contributing_results[0]
        assert contributor.frameworks == {"soc2": "CC6.3", "pci-dss": "3.4"}
        assert results[0].frameworks == {}

    def test_idempotent_regardless_of_order(self, small_table, make_result, fixed_time):
        results = [
            make_result("a", status=Status.FAIL, mapping_key="ENCRYPTION", severity=Severity.LOW),
            make_result("b", status=Status.FAIL, mapping_key="ENCRYPTION", severity=Severity.HIGH),
            make_result("c", status=Status.WARN, mapping_key="NETWORK"),
            make_result("d", mapping_key="LOGGING"),
            make_result("e", mapping_key="UNKNOWN"),
        ]
        shuffled = list(results)
        random.Random(3).shuffle(shuffled)

        first = build_report(results, "soc2", small_table, timestamp=fixed_time)
        second = build_report(shuffled, "soc2", small_table, timestamp=fixed_time)

        assert first.to_dict() == second.to_dict()

    def test_default_table(self, make_result, fixed_time):
        results = [make_result("redshift.cluster_encryption", mapping_key="REDSHIFT_ENCRYPTION")]
        report = build_report(results, "hipaa", timestamp=fixed_time)

        assert _verdict(report, "164.312(a)(2)(iv)").status == Status.PASS

    def test_unknown_framework(self, small_table):
        with pytest.raises(UnknownFrameworkError):
            build_report([], "fedramp", small_table)

    def test_coverage_unknown_without_attempted(self, small_table, make_result, fixed_time):
        results = [make_result("store.encryption", mapping_key="ENCRYPTION")]
        report = build_report(results, "soc2", small_table, timestamp=fixed_time)

        assert report.checkers_attempted is None
        assert report.checkers_succeeded is None
        assert report.to_dict()["coverage"]["checkers_attempted"] is None

    def test_coverage_from_attempted(self, small_table, make_result, fixed_time):
        results = [make_result("store.encryption", mapping_key="ENCRYPTION")]
        report = build_report(results, "soc2", small_table, attempted=3, timestamp=fixed_time)

        assert report.checkers_succeeded == 3


class TestRunComplianceScan:
    """Tests for run_compliance_scan."""

    def test_permission_error_checker_omitted(
        self, small_table, static_checker, failing_checker, make_result, fixed_time
    ):
        checkers = [
            static_checker("Storage", [make_result("enc", mapping_key="ENCRYPTION")]),
            failing_checker("Search", PermissionError("AccessDeniedException: not authorized")),
        ]
        report = run_compliance_scan(
            checkers, "soc2", table=small_table, account_id="123456789012", timestamp=fixed_time
        )

        assert report.checkers_attempted == 2
        assert report.checkers_succeeded == 1
        assert len(report.failures) == 1
        assert report.failures[0].checker_name == "Search"
        assert "not authorized" in report.failures[0].error

        for verdict in report.verdicts:
            for result in verdict.contributing_results:
                assert result.check_id == "enc"

    def test_unknown_framework_checked_before_running(self, small_table, static_checker):
        checker = static_checker("Never", [])

        with pytest.raises(UnknownFrameworkError):
            run_compliance_scan([checker], "fedramp", table=small_table)
        assert checker.calls == 0

    def test_custom_runner_and_metadata(self, small_table, static_checker, make_result, fixed_time):
        checkers = [static_checker("One", [make_result("net", mapping_key="NETWORK")])]
        report = run_compliance_scan(
            checkers,
            "pci-dss",
            table=small_table,
            provider="aws",
            account_id="999",
            runner=CheckerRunner(max_workers=1),
            timestamp=fixed_time,
        )

        assert report.account_id == "999"
        assert report.provider == "aws"
        assert report.timestamp == fixed_time
        assert _verdict(report, "1.3").status == Status.PASS
        assert _verdict(report, "3.4").status == Status.MANUAL

    def test_all_checkers_fail(self, small_table, failing_checker, fixed_time):
        checkers = [failing_checker("A", RuntimeError("x")), failing_checker("B", RuntimeError("y"))]
        report = run_compliance_scan(checkers, "soc2", table=small_table, timestamp=fixed_time)

        assert report.checkers_succeeded == 0
        assert report.score is None
        assert all(v.status == Status.MANUAL for v in report.verdicts)

    def test_with_default_table(self, fixed_time):
        table = FrameworkMappingTable.default()
        report = run_compliance_scan([], "cmmc", table=table, timestamp=fixed_time)

        assert len(report.verdicts) == len(table.requirements("cmmc"))
