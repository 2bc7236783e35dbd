"""ElastiCache checks."""

from typing import Any, Optional

from auditkit.checks.base import ResourceCheck, ServiceChecker, collect
from auditkit.context import ScanContext
from auditkit.models import CheckResult, Priority, Severity

CONSOLE_URL = "https://console.aws.amazon.com/elasticache/"
REDIS_CONSOLE_URL = "https://console.aws.amazon.com/elasticache/home#redis:"

MIN_SNAPSHOT_RETENTION_DAYS = 7

ENCRYPTION_AT_REST = ResourceCheck(
    check_id="elasticache.encryption_at_rest",
    name="ElastiCache Encryption at Rest",
    control="CC6.3",
    mapping_key="ELASTICACHE_ENCRYPTION",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    resource_kind="ElastiCache clusters",
    remediation="Enable encryption at rest for ElastiCache clusters",
    remediation_detail=(
        "Encryption at rest must be enabled when creating the cluster. "
        "Create new cluster with AtRestEncryptionEnabled=true and migrate data."
    ),
    screenshot_guide=(
        "ElastiCache Console → Redis/Memcached → Select cluster → Description → "
        "Screenshot showing 'Encryption at rest: Enabled'"
    ),
    console_url=CONSOLE_URL,
)

ENCRYPTION_IN_TRANSIT = ResourceCheck(
    check_id="elasticache.encryption_in_transit",
    name="ElastiCache Encryption in Transit",
    control="CC6.4",
    mapping_key="ELASTICACHE_TRANSIT",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    resource_kind="ElastiCache clusters",
    remediation="Enable encryption in transit (TLS) for ElastiCache clusters",
    remediation_detail=(
        "Transit encryption must be enabled when creating the cluster. "
        "Create new cluster with TransitEncryptionEnabled=true."
    ),
    screenshot_guide=(
        "ElastiCache Console → Select cluster → Description → "
        "Screenshot showing 'Encryption in transit: Enabled'"
    ),
    console_url=CONSOLE_URL,
)

AUTO_MINOR_UPGRADE = ResourceCheck(
    check_id="elasticache.auto_minor_version_upgrade",
    name="ElastiCache Auto Minor Version Upgrade",
    control="CC7.5",
    mapping_key="ELASTICACHE_PATCHING",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="ElastiCache clusters",
    remediation="Enable auto minor version upgrade for ElastiCache clusters",
    remediation_detail=(
        "aws elasticache modify-cache-cluster --cache-cluster-id [CLUSTER_ID] "
        "--auto-minor-version-upgrade"
    ),
    screenshot_guide=(
        "ElastiCache Console → Select cluster → Maintenance → "
        "Screenshot showing 'Auto minor version upgrade: Yes'"
    ),
    console_url=CONSOLE_URL,
)

AUTH_TOKEN = ResourceCheck(
    check_id="elasticache.redis_auth_token",
    name="ElastiCache Redis AUTH Token",
    control="CC6.6",
    mapping_key="ELASTICACHE_AUTH",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    resource_kind="Redis replication groups",
    remediation="Enable AUTH token for Redis replication groups",
    remediation_detail=(
        "AUTH token must be enabled when creating the replication group. "
        "Create new group with AuthToken parameter set."
    ),
    screenshot_guide=(
        "ElastiCache Console → Redis → Select replication group → Description → "
        "Screenshot showing 'AUTH token: Enabled'"
    ),
    console_url=REDIS_CONSOLE_URL,
)

BACKUP_RETENTION = ResourceCheck(
    check_id="elasticache.backup_retention",
    name="ElastiCache Backup Retention",
    control="A1.2",
    mapping_key="ELASTICACHE_BACKUP",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="Redis replication groups",
    remediation="Increase snapshot retention period to at least 7 days",
    remediation_detail=(
        "aws elasticache modify-replication-group --replication-group-id [GROUP_ID] "
        "--snapshot-retention-limit 7"
    ),
    screenshot_guide=(
        "ElastiCache Console → Redis → Select group → Backup → "
        "Screenshot showing retention >= 7 days"
    ),
    console_url=REDIS_CONSOLE_URL,
)


class ElastiCacheChecker(ServiceChecker):
    """Checks ElastiCache clusters and Redis replication groups."""

    NAME = "ElastiCache Security"

    def __init__(self, client: Any) -> None:
        """Initialize the checker.

        Args:
            client: boto3 ElastiCache client.
        """
        self.client = client
        self._clusters: Optional[list[dict]] = None
        self._groups: Optional[list[dict]] = None

    def run(self, context: ScanContext) -> list[CheckResult]:
        self._clusters = None
        self._groups = None
        return super().run(context)

    def checks(self):
        return [
            self.check_encryption_at_rest,
            self.check_encryption_in_transit,
            self.check_auto_minor_version_upgrade,
            self.check_auth_token,
            self.check_backup_retention,
        ]

    def _describe_clusters(self) -> list[dict]:
        if self._clusters is None:
            self._clusters = collect(self.client, "describe_cache_clusters", "CacheClusters")
        return self._clusters

    def _describe_replication_groups(self) -> list[dict]:
        if self._groups is None:
            self._groups = collect(self.client, "describe_replication_groups", "ReplicationGroups")
        return self._groups

    def check_encryption_at_rest(self) -> CheckResult:
        clusters = self._describe_clusters()
        offenders = [c["CacheClusterId"] for c in clusters if not c.get("AtRestEncryptionEnabled")]
        return ENCRYPTION_AT_REST.evaluate(
            len(clusters),
            offenders,
            "ElastiCache clusters without encryption at rest",
            "ElastiCache clusters have encryption at rest enabled",
        )

    def check_encryption_in_transit(self) -> CheckResult:
        clusters = self._describe_clusters()
        offenders = [c["CacheClusterId"] for c in clusters if not c.get("TransitEncryptionEnabled")]
        return ENCRYPTION_IN_TRANSIT.evaluate(
            len(clusters),
            offenders,
            "ElastiCache clusters without encryption in transit",
            "ElastiCache clusters have encryption in transit enabled",
        )

    def check_auto_minor_version_upgrade(self) -> CheckResult:
        clusters = self._describe_clusters()
        offenders = [c["CacheClusterId"] for c in clusters if not c.get("AutoMinorVersionUpgrade")]
        return AUTO_MINOR_UPGRADE.evaluate(
            len(clusters),
            offenders,
            "ElastiCache clusters without auto minor version upgrade",
            "ElastiCache clusters have auto minor version upgrade enabled",
        )

    def check_auth_token(self) -> CheckResult:
        groups = self._describe_replication_groups()
        offenders = [g["ReplicationGroupId"] for g in groups if not g.get("AuthTokenEnabled")]
        return AUTH_TOKEN.evaluate(
            len(groups),
            offenders,
            "Redis replication groups without AUTH token",
            "Redis replication groups have AUTH token enabled",
        )

    def check_backup_retention(self) -> CheckResult:
        groups = self._describe_replication_groups()
        offenders = []
        for group in groups:
            retention = group.get("SnapshotRetentionLimit")
            if retention is not None and retention < MIN_SNAPSHOT_RETENTION_DAYS:
                offenders.append(f"{group['ReplicationGroupId']} ({retention} days)")

        return BACKUP_RETENTION.evaluate(
            len(groups),
            offenders,
            f"Redis groups with backup retention < {MIN_SNAPSHOT_RETENTION_DAYS} days",
            "Redis replication groups have adequate backup retention",
        )
