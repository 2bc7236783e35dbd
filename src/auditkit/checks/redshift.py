"""Redshift data warehouse checks."""

from typing import Any, Optional

from auditkit.checks.base import ResourceCheck, ServiceChecker, collect
from auditkit.context import ScanContext
from auditkit.models import CheckResult, Priority, Severity

CONSOLE_URL = "https://console.aws.amazon.com/redshiftv2/home#clusters"

MIN_SNAPSHOT_RETENTION_DAYS = 7

ENCRYPTION = ResourceCheck(
    check_id="redshift.cluster_encryption",
    name="Redshift Cluster Encryption",
    control="CC6.3",
    mapping_key="REDSHIFT_ENCRYPTION",
    severity=Severity.CRITICAL,
    priority=Priority.CRITICAL,
    resource_kind="Redshift clusters",
    remediation="Enable encryption for Redshift clusters",
    remediation_detail=(
        "1. Create snapshot of unencrypted cluster\n"
        "2. Restore snapshot with encryption enabled\n"
        "3. Update applications to use new endpoint\n"
        "4. Delete unencrypted cluster"
    ),
    screenshot_guide=(
        "Redshift Console → Clusters → Select cluster → Properties → "
        "Screenshot showing 'Encrypted: Yes'"
    ),
    console_url=CONSOLE_URL,
)

PUBLIC_ACCESS = ResourceCheck(
    check_id="redshift.cluster_public_access",
    name="Redshift Public Access",
    control="CC6.1",
    mapping_key="REDSHIFT_NETWORK",
    severity=Severity.CRITICAL,
    priority=Priority.CRITICAL,
    resource_kind="Redshift clusters",
    remediation="Disable public accessibility for Redshift clusters",
    remediation_detail=(
        "aws redshift modify-cluster --cluster-identifier [CLUSTER_ID] --no-publicly-accessible"
    ),
    screenshot_guide=(
        "Redshift Console → Clusters → Select cluster → Properties → "
        "Screenshot showing 'Publicly accessible: No'"
    ),
    console_url=CONSOLE_URL,
)

AUDIT_LOGGING = ResourceCheck(
    check_id="redshift.cluster_logging",
    name="Redshift Audit Logging",
    control="CC7.1",
    mapping_key="REDSHIFT_LOGGING",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    resource_kind="Redshift clusters",
    remediation="Enable audit logging for Redshift clusters",
    remediation_detail=(
        "aws redshift enable-logging --cluster-identifier [CLUSTER_ID] "
        "--bucket-name [S3_BUCKET] --s3-key-prefix 'redshift-logs/'"
    ),
    screenshot_guide=(
        "Redshift Console → Clusters → Select cluster → Properties → Audit logging → "
        "Screenshot showing 'Enabled'"
    ),
    console_url=CONSOLE_URL,
)

REQUIRE_SSL = ResourceCheck(
    check_id="redshift.cluster_ssl",
    name="Redshift SSL Required",
    control="CC6.4",
    mapping_key="REDSHIFT_SSL",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    resource_kind="Redshift clusters",
    remediation="Enable require_ssl parameter for Redshift clusters",
    remediation_detail=(
        "1. Create/modify parameter group with require_ssl=true\n"
        "2. Associate parameter group with cluster\n"
        "3. Reboot cluster to apply changes"
    ),
    screenshot_guide=(
        "Redshift Console → Parameter groups → Select group → Parameters → "
        "Screenshot showing 'require_ssl: true'"
    ),
    console_url="https://console.aws.amazon.com/redshiftv2/home#parameter-groups",
)

VERSION_UPGRADE = ResourceCheck(
    check_id="redshift.cluster_version_upgrade",
    name="Redshift Auto Version Upgrade",
    control="CC7.5",
    mapping_key="REDSHIFT_PATCHING",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="Redshift clusters",
    remediation="Enable automatic version upgrades for Redshift clusters",
    remediation_detail=(
        "aws redshift modify-cluster --cluster-identifier [CLUSTER_ID] --allow-version-upgrade"
    ),
    screenshot_guide=(
        "Redshift Console → Clusters → Select cluster → Maintenance → "
        "Screenshot showing 'Allow version upgrade: Yes'"
    ),
    console_url=CONSOLE_URL,
)

BACKUP_RETENTION = ResourceCheck(
    check_id="redshift.cluster_backup_retention",
    name="Redshift Backup Retention",
    control="A1.2",
    mapping_key="REDSHIFT_BACKUP",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="Redshift clusters",
    remediation="Increase automated snapshot retention period to at least 7 days",
    remediation_detail=(
        "aws redshift modify-cluster --cluster-identifier [CLUSTER_ID] "
        "--automated-snapshot-retention-period 7"
    ),
    screenshot_guide=(
        "Redshift Console → Clusters → Select cluster → Backup → "
        "Screenshot showing retention period >= 7 days"
    ),
    console_url=CONSOLE_URL,
)

ENHANCED_VPC_ROUTING = ResourceCheck(
    check_id="redshift.cluster_enhanced_vpc_routing",
    name="Redshift Enhanced VPC Routing",
    control="CC6.1",
    mapping_key="REDSHIFT_NETWORK",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="Redshift clusters",
    remediation="Enable enhanced VPC routing for better network security",
    remediation_detail=(
        "aws redshift modify-cluster --cluster-identifier [CLUSTER_ID] --enhanced-vpc-routing\n"
        "Note: This causes brief cluster unavailability"
    ),
    screenshot_guide=(
        "Redshift Console → Clusters → Select cluster → Properties → Network → "
        "Screenshot showing 'Enhanced VPC routing: Enabled'"
    ),
    console_url=CONSOLE_URL,
)


class RedshiftChecker(ServiceChecker):
    """Checks Redshift clusters for encryption, exposure and operational settings."""

    NAME = "Redshift Data Warehouse Security"

    def __init__(self, client: Any) -> None:
        """Initialize the checker.

        Args:
            client: boto3 Redshift client.
        """
        self.client = client
        self._clusters: Optional[list[dict]] = None

    def run(self, context: ScanContext) -> list[CheckResult]:
        self._clusters = None
        return super().run(context)

    def checks(self):
        return [
            self.check_cluster_encryption,
            self.check_cluster_public_access,
            self.check_cluster_logging,
            self.check_cluster_ssl,
            self.check_cluster_version_upgrade,
            self.check_cluster_backup_retention,
            self.check_cluster_enhanced_vpc_routing,
        ]

    def _describe_clusters(self) -> list[dict]:
        if self._clusters is None:
            self._clusters = collect(self.client, "describe_clusters", "Clusters")
        return self._clusters

    def check_cluster_encryption(self) -> CheckResult:
        clusters = self._describe_clusters()
        unencrypted = [c["ClusterIdentifier"] for c in clusters if not c.get("Encrypted")]
        return ENCRYPTION.evaluate(
            len(clusters),
            unencrypted,
            "Redshift clusters NOT encrypted",
            "Redshift clusters are encrypted",
        )

    def check_cluster_public_access(self) -> CheckResult:
        clusters = self._describe_clusters()
        public = [c["ClusterIdentifier"] for c in clusters if c.get("PubliclyAccessible")]
        return PUBLIC_ACCESS.evaluate(
            len(clusters),
            public,
            "Redshift clusters are publicly accessible",
            "Redshift clusters are private (not publicly accessible)",
        )

    def check_cluster_logging(self) -> CheckResult:
        clusters = self._describe_clusters()
        no_logging = []
        for cluster in clusters:
            cluster_id = cluster["ClusterIdentifier"]
            try:
                status = self.client.describe_logging_status(ClusterIdentifier=cluster_id)
            except Exception:
                # Unreadable logging status counts as not enabled
                no_logging.append(cluster_id)
                continue
            if not status.get("LoggingEnabled"):
                no_logging.append(cluster_id)

        return AUDIT_LOGGING.evaluate(
            len(clusters),
            no_logging,
            "Redshift clusters without audit logging",
            "Redshift clusters have audit logging enabled",
        )

    def check_cluster_ssl(self) -> CheckResult:
        clusters = self._describe_clusters()
        no_ssl = []
        for cluster in clusters:
            cluster_id = cluster["ClusterIdentifier"]
            for group in cluster.get("ClusterParameterGroups") or []:
                try:
                    params = collect(
                        self.client,
                        "describe_cluster_parameters",
                        "Parameters",
                        ParameterGroupName=group["ParameterGroupName"],
                    )
                except Exception:
                    continue

                ssl_required = any(
                    p.get("ParameterName") == "require_ssl" and p.get("ParameterValue") == "true"
                    for p in params
                )
                if not ssl_required:
                    no_ssl.append(cluster_id)
                    break

        return REQUIRE_SSL.evaluate(
            len(clusters),
            no_ssl,
            "Redshift clusters do not require SSL",
            "Redshift clusters require SSL connections",
        )

    def check_cluster_version_upgrade(self) -> CheckResult:
        clusters = self._describe_clusters()
        no_upgrade = [c["ClusterIdentifier"] for c in clusters if not c.get("AllowVersionUpgrade")]
        return VERSION_UPGRADE.evaluate(
            len(clusters),
            no_upgrade,
            "Redshift clusters have auto version upgrade disabled",
            "Redshift clusters have auto version upgrade enabled",
        )

    def check_cluster_backup_retention(self) -> CheckResult:
        clusters = self._describe_clusters()
        low_retention = []
        for cluster in clusters:
            retention = cluster.get("AutomatedSnapshotRetentionPeriod")
            if retention is not None and retention < MIN_SNAPSHOT_RETENTION_DAYS:
                low_retention.append(f"{cluster['ClusterIdentifier']} ({retention} days)")

        return BACKUP_RETENTION.evaluate(
            len(clusters),
            low_retention,
            f"Redshift clusters with backup retention < {MIN_SNAPSHOT_RETENTION_DAYS} days",
            f"Redshift clusters have adequate backup retention (>= {MIN_SNAPSHOT_RETENTION_DAYS} days)",
        )

    def check_cluster_enhanced_vpc_routing(self) -> CheckResult:
        clusters = self._describe_clusters()
        no_routing = [c["ClusterIdentifier"] for c in clusters if not c.get("EnhancedVpcRouting")]
        return ENHANCED_VPC_ROUTING.evaluate(
            len(clusters),
            no_routing,
            "Redshift clusters without enhanced VPC routing",
            "Redshift clusters have enhanced VPC routing enabled",
        )
