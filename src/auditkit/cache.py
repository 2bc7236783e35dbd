"""Local cache of compliance reports for offline viewing."""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional, Union

from auditkit.compliance.models import FrameworkName, framework_key
from auditkit.config import default_cache_dir
from auditkit.errors import CacheError
from auditkit.models import ComplianceReport, utcnow

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def scan_filename(
    provider: str, account_id: str, framework: FrameworkName, timestamp: datetime
) -> str:
    """File name of one cached scan."""
    stamp = timestamp.strftime(TIMESTAMP_FORMAT)
    return f"scan-{provider}-{account_id}-{framework_key(framework)}-{stamp}.json"


def latest_filename(provider: str, account_id: str, framework: FrameworkName) -> str:
    """File name of the latest-scan copy for a provider/account/framework."""
    return f"latest-{provider}-{account_id}-{framework_key(framework)}.json"


class ReportCache:
    """Stores compliance reports as JSON files.

    Each save writes a timestamped file plus a ``latest-`` copy, so the most
    recent report for a (provider, account, framework) can be read without
    listing the directory.
    """

    def __init__(self, base_path: Optional[Union[str, Path]] = None) -> None:
        """Initialize the cache.

        Args:
            base_path: Cache directory. Defaults to ``~/.auditkit/cache``.

        Raises:
            CacheError: If the directory cannot be created.
        """
        self.base_path = Path(base_path).expanduser() if base_path else default_cache_dir()
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(f"Failed to create cache directory {self.base_path}: {e}") from e

    def save(self, report: ComplianceReport) -> Path:
        """Save a report and update the latest copy.

        Args:
            report: Report to store.

        Returns:
            Path of the timestamped file.

        Raises:
            CacheError: If a file cannot be written.
        """
        data = json.dumps(report.to_dict(), indent=2)
        scan_path = self.base_path / scan_filename(
            report.provider, report.account_id, report.framework, report.timestamp
        )
        latest_path = self.base_path / latest_filename(
            report.provider, report.account_id, report.framework
        )

        for path in (scan_path, latest_path):
            try:
                path.write_text(data, encoding="utf-8")
            except OSError as e:
                raise CacheError(f"Failed to write cache file {path}: {e}") from e

        logger.debug(f"Cached report at {scan_path}")
        return scan_path

    def load_latest(
        self, provider: str, account_id: str, framework: FrameworkName
    ) -> ComplianceReport:
        """Load the most recent report for a provider/account/framework."""
        return self.load_file(self.base_path / latest_filename(provider, account_id, framework))

    def load_by_timestamp(
        self, provider: str, account_id: str, framework: FrameworkName, timestamp: datetime
    ) -> ComplianceReport:
        """Load the report saved at a specific timestamp."""
        return self.load_file(
            self.base_path / scan_filename(provider, account_id, framework, timestamp)
        )

    def load_file(self, path: Union[str, Path]) -> ComplianceReport:
        """Load a report from a specific file.

        Raises:
            CacheError: If the file is missing or cannot be parsed.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise CacheError(f"No cached scan found at {path}") from e
        except OSError as e:
            raise CacheError(f"Failed to read cache file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CacheError(f"Failed to parse cache file {path}: {e}") from e

        try:
            return ComplianceReport.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise CacheError(f"Invalid cached report {path}: {e}") from e

    def list_scans(
        self, provider: str, account_id: str, framework: FrameworkName
    ) -> list[ComplianceReport]:
        """List cached reports for a provider/account/framework, oldest first.

        Unreadable files are skipped.
        """
        pattern = f"scan-{provider}-{account_id}-{framework_key(framework)}-*.json"
        reports = []
        for path in sorted(self.base_path.glob(pattern)):
            try:
                reports.append(self.load_file(path))
            except CacheError as e:
                logger.debug(f"Skipping {path.name}: {e}")
        reports.sort(key=lambda r: r.timestamp)
        return reports

    def has_cached_scan(
        self, provider: str, account_id: str, framework: FrameworkName
    ) -> bool:
        """Check whether a latest report exists."""
        return (self.base_path / latest_filename(provider, account_id, framework)).exists()

    def info(self) -> dict[str, Any]:
        """Describe the cache contents.

        Returns:
            Dict with ``cache_path``, ``total_files`` and ``scans`` (one entry
            per readable timestamped file).
        """
        files = [p for p in sorted(self.base_path.iterdir()) if p.is_file()]
        scans = []
        for path in files:
            if path.suffix != ".json" or path.name.startswith("latest"):
                continue
            try:
                report = self.load_file(path)
            except CacheError as e:
                logger.debug(f"Skipping {path.name}: {e}")
                continue
            scans.append(
                {
                    "filename": path.name,
                    "provider": report.provider,
                    "framework": report.framework,
                    "account": report.account_id,
                    "timestamp": report.timestamp.isoformat(),
                    "score": report.score,
                    "size": path.stat().st_size,
                }
            )

        return {
            "cache_path": str(self.base_path),
            "total_files": len(files),
            "scans": scans,
        }

    def clear(self) -> int:
        """Remove every cached file.

        Returns:
            Number of files removed.

        Raises:
            CacheError: If a file cannot be removed.
        """
        removed = 0
        for path in self.base_path.iterdir():
            if not path.is_file():
                continue
            try:
                path.unlink()
            except OSError as e:
                raise CacheError(f"Failed to remove {path.name}: {e}") from e
            removed += 1
        return removed

    def clear_older_than(self, age: timedelta) -> int:
        """Remove timestamped reports older than ``age``.

        Latest copies are kept so offline viewing keeps working.

        Returns:
            Number of files removed.
        """
        cutoff = utcnow() - age
        removed = 0
        for path in self.base_path.glob("scan-*.json"):
            try:
                report = self.load_file(path)
            except CacheError:
                continue
            if _as_utc(report.timestamp) < cutoff:
                try:
                    path.unlink()
                    removed += 1
                except OSError as e:
                    logger.warning(f"Failed to remove {path.name}: {e}")
        return removed

    def scan_age(self, provider: str, account_id: str, framework: FrameworkName) -> timedelta:
        """How old the latest cached report is."""
        report = self.load_latest(provider, account_id, framework)
        return utcnow() - _as_utc(report.timestamp)


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp
