"""Configuration for compliance scans."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

from auditkit.errors import AuditKitError

DEFAULT_FRAMEWORK = "soc2"
DEFAULT_MAX_WORKERS = 4
DEFAULT_CHECKER_TIMEOUT = 300.0


def default_cache_dir() -> Path:
    """Get the default report cache directory."""
    return Path.home() / ".auditkit" / "cache"


@dataclass
class ScanConfig:
    """Settings for a compliance scan."""

    framework: str = DEFAULT_FRAMEWORK

    # AWS session settings (None = boto3 defaults)
    profile: Optional[str] = None
    region: Optional[str] = None

    # Runner
    max_workers: int = DEFAULT_MAX_WORKERS
    checker_timeout: float = DEFAULT_CHECKER_TIMEOUT
    allow_partial: bool = False

    # Custom mapping table (YAML); None = built-in table
    mapping_file: Optional[str] = None

    # Report cache
    cache_enabled: bool = True
    cache_dir: Optional[str] = None

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict) -> "ScanConfig":
        """Create config from dictionary, falling back to environment variables."""
        return cls(
            framework=data.get("framework") or os.environ.get("AUDITKIT_FRAMEWORK", DEFAULT_FRAMEWORK),
            profile=data.get("profile") or os.environ.get("AWS_PROFILE"),
            region=data.get("region") or os.environ.get("AWS_REGION"),
            max_workers=int(
                data.get("max_workers") or os.environ.get("AUDITKIT_MAX_WORKERS", DEFAULT_MAX_WORKERS)
            ),
            checker_timeout=float(data.get("checker_timeout", DEFAULT_CHECKER_TIMEOUT)),
            allow_partial=data.get("allow_partial", False),
            mapping_file=data.get("mapping_file"),
            cache_enabled=data.get("cache_enabled", True),
            cache_dir=data.get("cache_dir") or os.environ.get("AUDITKIT_CACHE_DIR"),
            log_level=data.get("log_level", "WARNING"),
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "framework": self.framework,
            "profile": self.profile,
            "region": self.region,
            "max_workers": self.max_workers,
            "checker_timeout": self.checker_timeout,
            "allow_partial": self.allow_partial,
            "mapping_file": self.mapping_file,
            "cache_enabled": self.cache_enabled,
            "cache_dir": self.cache_dir,
            "log_level": self.log_level,
        }

    @property
    def cache_path(self) -> Path:
        """Resolved report cache directory."""
        if self.cache_dir:
            return Path(self.cache_dir).expanduser()
        return default_cache_dir()


def load_config(path: Optional[Union[str, Path]] = None) -> ScanConfig:
    """Load scan configuration from a YAML file.

    Args:
        path: Path to the config file. If None, only environment variables
            and defaults apply.

    Returns:
        ScanConfig instance.

    Raises:
        AuditKitError: If the file cannot be read or parsed.
    """
    if path is None:
        return ScanConfig.from_dict({})

    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise AuditKitError(f"Failed to load config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise AuditKitError(f"Config {path} must be a mapping")

    return ScanConfig.from_dict(data)
