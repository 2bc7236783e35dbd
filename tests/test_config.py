"""Tests for scan configuration."""

from pathlib import Path

import pytest

from auditkit.config import ScanConfig, default_cache_dir, load_config
from auditkit.errors import AuditKitError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("AUDITKIT_FRAMEWORK", "AUDITKIT_MAX_WORKERS", "AUDITKIT_CACHE_DIR", "AWS_PROFILE", "AWS_REGION"):
        monkeypatch.delenv(name, raising=False)


class TestScanConfig:
    """Tests for ScanConfig."""

    def test_defaults(self):
        config = ScanConfig.from_dict({})

        assert config.framework == "soc2"
        assert config.max_workers == 4
        assert config.checker_timeout == 300.0
        assert config.allow_partial is False
        assert config.cache_path == default_cache_dir()

    def test_environment_fallbacks(self, monkeypatch):
        monkeypatch.setenv("AUDITKIT_FRAMEWORK", "hipaa")
        monkeypatch.setenv("AUDITKIT_MAX_WORKERS", "8")
        monkeypatch.setenv("AUDITKIT_CACHE_DIR", "/tmp/auditkit-cache")
        monkeypatch.setenv("AWS_PROFILE", "audit")
        monkeypatch.setenv("AWS_REGION", "eu-west-1")

        config = ScanConfig.from_dict({})

        assert config.framework == "hipaa"
        assert config.max_workers == 8
        assert config.cache_path == Path("/tmp/auditkit-cache")
        assert config.profile == "audit"
        assert config.region == "eu-west-1"

    def test_explicit_values_beat_environment(self, monkeypatch):
        monkeypatch.setenv("AUDITKIT_FRAMEWORK", "hipaa")
        config = ScanConfig.from_dict({"framework": "pci-dss"})
        assert config.framework == "pci-dss"

    def test_to_dict_round_trip(self):
        config = ScanConfig(framework="cmmc", max_workers=2, cache_dir="/x")
        assert ScanConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_path(self):
        assert load_config() == ScanConfig.from_dict({})

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "auditkit.yaml"
        path.write_text("framework: iso-27001\nmax_workers: 2\nchecker_timeout: 60\nallow_partial: true\n")

        config = load_config(path)

        assert config.framework == "iso-27001"
        assert config.max_workers == 2
        assert config.checker_timeout == 60.0
        assert config.allow_partial is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).framework == "soc2"

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- soc2\n- hipaa\n")

        with pytest.raises(AuditKitError, match="must be a mapping"):
            load_config(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(AuditKitError, match="Failed to load config"):
            load_config(tmp_path / "missing.yaml")
