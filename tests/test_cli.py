"""Tests for CLI interface."""

import json
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from auditkit import __version__
from auditkit.checks.registry import CheckerRegistry
from auditkit.cli import main
from auditkit.models import Severity, Status


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Point the cache at a temp dir and clear scan environment variables."""
    monkeypatch.setenv("AUDITKIT_CACHE_DIR", str(tmp_path / "cache"))
    for name in ("AUDITKIT_FRAMEWORK", "AUDITKIT_MAX_WORKERS", "AWS_PROFILE", "AWS_REGION"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_aws(static_checker, failing_checker, make_result):
    """Patch AWS session setup with in-memory checkers."""

    def _patch(results, failures=()):
        registry = CheckerRegistry()
        registry.register(static_checker("Redshift Data Warehouse Security", results))
        for name, error in failures:
            registry.register(failing_checker(name, error))

        patches = [
            patch("boto3.Session"),
            patch("auditkit.checks.registry.get_account_id", return_value="123456789012"),
            patch(
                "auditkit.checks.registry.CheckerRegistry.from_session",
                return_value=registry,
            ),
        ]
        return patches

    return _patch


def _invoke_with(runner, patches, args):
    for p in patches:
        p.start()
    try:
        return runner.invoke(main, args)
    finally:
        for p in patches:
            p.stop()


class TestVersion:
    """Tests for version command."""

    def test_version_command(self, runner):
        result = runner.invoke(main, ["version"])
        assert result.exit_code == 0
        assert f"auditkit version {__version__}" in result.output

    def test_version_option(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "auditkit" in result.output


class TestFrameworks:
    """Tests for frameworks command."""

    def test_lists_default_frameworks(self, runner):
        result = runner.invoke(main, ["frameworks"])

        assert result.exit_code == 0
        for name in ("soc2", "pci-dss", "hipaa", "iso-27001", "nist-800-53", "cmmc"):
            assert name in result.output

    def test_custom_mapping_file(self, runner, tmp_path):
        path = tmp_path / "table.yaml"
        path.write_text("requirements:\n  internal:\n    R-1: Only requirement\nmappings: {}\n")

        result = runner.invoke(main, ["frameworks", "--mapping-file", str(path)])

        assert result.exit_code == 0
        assert "internal" in result.output
        assert "soc2" not in result.output


class TestScanAws:
    """Tests for scan aws command."""

    def test_failing_requirement_exits_1(self, runner, fake_aws, make_result):
        patches = fake_aws(
            [
                make_result(
                    "redshift.cluster_encryption",
                    status=Status.FAIL,
                    mapping_key="REDSHIFT_ENCRYPTION",
                    severity=Severity.CRITICAL,
                    evidence="1 Redshift clusters NOT encrypted: [cluster-a]",
                )
            ]
        )
        result = _invoke_with(runner, patches, ["scan", "aws", "--format", "json", "--no-cache"])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["framework"] == "soc2"
        assert data["account_id"] == "123456789012"
        failed = [c for c in data["controls"] if c["status"] == "FAIL"]
        assert [c["requirement_id"] for c in failed] == ["CC6.3"]

    def test_passing_scan_exits_0(self, runner, fake_aws, make_result):
        patches = fake_aws([make_result("redshift.cluster_encryption", mapping_key="REDSHIFT_ENCRYPTION")])
        result = _invoke_with(runner, patches, ["scan", "aws", "--framework", "pci-dss"])

        assert result.exit_code == 0
        assert "No failing requirements" in result.output

    def test_omitted_checker_reported(self, runner, fake_aws, make_result, tmp_path):
        patches = fake_aws(
            [make_result("redshift.cluster_encryption", mapping_key="REDSHIFT_ENCRYPTION")],
            failures=[("OpenSearch Security", PermissionError("AccessDenied"))],
        )
        output = tmp_path / "report.json"
        result = _invoke_with(
            runner, patches, ["scan", "aws", "--format", "json", "--no-cache", "-o", str(output)]
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert data["coverage"]["checkers_attempted"] == 2
        assert data["coverage"]["omitted"][0]["checker"] == "OpenSearch Security"

    def test_unknown_framework_exits_2(self, runner, fake_aws):
        patches = fake_aws([])
        result = _invoke_with(runner, patches, ["scan", "aws", "--framework", "fedramp"])

        assert result.exit_code == 2
        assert "Unknown framework" in result.output

    def test_credentials_error_exits_2(self, runner):
        with patch("boto3.Session"), patch(
            "auditkit.checks.registry.get_account_id",
            side_effect=RuntimeError("Unable to locate credentials"),
        ):
            result = runner.invoke(main, ["scan", "aws"])

        assert result.exit_code == 2
        assert "Unable to locate credentials" in result.output

    def test_output_file_and_cache(self, runner, fake_aws, make_result, tmp_path):
        patches = fake_aws([make_result("redshift.cluster_ssl", mapping_key="REDSHIFT_SSL")])
        output = tmp_path / "report.json"

        result = _invoke_with(
            runner, patches, ["scan", "aws", "--format", "json", "--output", str(output)]
        )

        assert result.exit_code == 0
        assert json.loads(output.read_text())["framework"] == "soc2"
        assert (tmp_path / "cache" / "latest-aws-123456789012-soc2.json").exists()


class TestCache:
    """Tests for cache commands."""

    def _scan(self, runner, fake_aws, make_result):
        patches = fake_aws([make_result("redshift.cluster_ssl", mapping_key="REDSHIFT_SSL")])
        result = _invoke_with(runner, patches, ["scan", "aws", "--format", "json"])
        assert result.exit_code == 0

    def test_list_empty(self, runner):
        result = runner.invoke(main, ["cache", "list"])

        assert result.exit_code == 0
        assert "No cached scans" in result.output

    def test_list_and_show(self, runner, fake_aws, make_result):
        self._scan(runner, fake_aws, make_result)

        listed = runner.invoke(main, ["cache", "list"])
        assert listed.exit_code == 0
        assert "123456789012" in listed.output

        shown = runner.invoke(
            main, ["cache", "show", "--account", "123456789012", "--format", "json"]
        )
        assert shown.exit_code == 0
        assert json.loads(shown.output)["account_id"] == "123456789012"

    def test_show_requires_account_or_file(self, runner):
        result = runner.invoke(main, ["cache", "show"])
        assert result.exit_code == 2
        assert "--account or --file" in result.output

    def test_show_missing_exits_2(self, runner):
        result = runner.invoke(main, ["cache", "show", "--account", "000000000000"])
        assert result.exit_code == 2
        assert "No cached scan found" in result.output

    def test_clear(self, runner, fake_aws, make_result):
        self._scan(runner, fake_aws, make_result)

        result = runner.invoke(main, ["cache", "clear"])

        assert result.exit_code == 0
        assert "Removed 2 cached file(s)" in result.output

    def test_show_mixed_case_framework(self, runner, fake_aws, make_result):
        self._scan(runner, fake_aws, make_result)

        result = runner.invoke(
            main,
            ["cache", "show", "--account", "123456789012", "--framework", "SOC2", "--format", "json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["framework"] == "soc2"


class TestConfigOption:
    """Tests for --config."""

    def test_framework_from_config(self, runner, fake_aws, make_result, tmp_path):
        config = tmp_path / "auditkit.yaml"
        config.write_text("framework: hipaa\ncache_enabled: false\n")
        patches = fake_aws([make_result("redshift.cluster_ssl", mapping_key="REDSHIFT_SSL")])

        result = _invoke_with(
            runner, patches, ["--config", str(config), "scan", "aws", "--format", "json"]
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["framework"] == "hipaa"


class TestInterrupt:
    """Tests for Ctrl-C during a scan."""

    def test_interrupt_cancels_scan_context(self, runner, fake_aws):
        scan = Mock(side_effect=KeyboardInterrupt)
        patches = fake_aws([]) + [patch("auditkit.scanner.run_compliance_scan", scan)]

        result = _invoke_with(runner, patches, ["scan", "aws", "--format", "json"])

        assert result.exit_code == 2
        assert "Scan interrupted" in result.output
        assert scan.call_args.kwargs["context"].cancelled
