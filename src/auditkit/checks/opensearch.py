"""OpenSearch domain checks."""

import logging
from typing import Any, Callable, Optional

from auditkit.checks.base import ResourceCheck, ServiceChecker
from auditkit.context import ScanContext
from auditkit.models import CheckResult, Priority, Severity

logger = logging.getLogger(__name__)

CONSOLE_URL = "https://console.aws.amazon.com/aos/home#opensearch/domains"


def _opensearch_check(**kwargs: Any) -> ResourceCheck:
    return ResourceCheck(resource_kind="OpenSearch domains", console_url=CONSOLE_URL, **kwargs)


ENCRYPTION_AT_REST = _opensearch_check(
    check_id="opensearch.encryption_at_rest",
    name="OpenSearch Encryption at Rest",
    control="CC6.3",
    mapping_key="OPENSEARCH_ENCRYPTION",
    severity=Severity.CRITICAL,
    priority=Priority.CRITICAL,
    remediation="Enable encryption at rest for OpenSearch domains",
    remediation_detail="Update domain configuration to enable encryption at rest with KMS key",
    screenshot_guide=(
        "OpenSearch Console → Domains → Select domain → Security → "
        "Screenshot showing 'Encryption at rest: Enabled'"
    ),
)

NODE_TO_NODE = _opensearch_check(
    check_id="opensearch.node_to_node_encryption",
    name="OpenSearch Node-to-Node Encryption",
    control="CC6.4",
    mapping_key="OPENSEARCH_TRANSIT",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    remediation="Enable node-to-node encryption for OpenSearch domains",
    remediation_detail=(
        "Update domain configuration to enable node-to-node encryption "
        "(may require blue/green deployment)"
    ),
    screenshot_guide=(
        "OpenSearch Console → Domains → Select domain → Security → "
        "Screenshot showing 'Node-to-node encryption: Enabled'"
    ),
)

ENFORCE_HTTPS = _opensearch_check(
    check_id="opensearch.enforce_https",
    name="OpenSearch HTTPS Required",
    control="CC6.4",
    mapping_key="OPENSEARCH_HTTPS",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    remediation="Enable HTTPS enforcement for OpenSearch domains",
    remediation_detail="Update domain endpoint options to enforce HTTPS and use TLS 1.2 minimum",
    screenshot_guide=(
        "OpenSearch Console → Domains → Select domain → Security → "
        "Screenshot showing 'Require HTTPS: Yes'"
    ),
)

VPC_DEPLOYMENT = _opensearch_check(
    check_id="opensearch.vpc_deployment",
    name="OpenSearch VPC Deployment",
    control="CC6.1",
    mapping_key="OPENSEARCH_NETWORK",
    severity=Severity.CRITICAL,
    priority=Priority.CRITICAL,
    remediation="Deploy OpenSearch domains within a VPC",
    remediation_detail=(
        "Create new domain in VPC. Note: Moving from public to VPC requires recreating the domain."
    ),
    screenshot_guide=(
        "OpenSearch Console → Domains → Select domain → Network → "
        "Screenshot showing VPC configuration"
    ),
)

AUDIT_LOGS = _opensearch_check(
    check_id="opensearch.audit_logs",
    name="OpenSearch Audit Logs",
    control="CC7.1",
    mapping_key="OPENSEARCH_LOGGING",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    remediation="Enable audit logging for OpenSearch domains",
    remediation_detail="Configure log publishing options to enable AUDIT_LOGS to CloudWatch Logs",
    screenshot_guide=(
        "OpenSearch Console → Domains → Select domain → Logs → "
        "Screenshot showing 'Audit logs: Enabled'"
    ),
)

FINE_GRAINED_ACCESS = _opensearch_check(
    check_id="opensearch.fine_grained_access_control",
    name="OpenSearch Fine-Grained Access Control",
    control="CC6.6",
    mapping_key="OPENSEARCH_ACCESS",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    remediation="Enable fine-grained access control for OpenSearch domains",
    remediation_detail=(
        "Enable Advanced Security Options with fine-grained access control. "
        "Requires encryption at rest and node-to-node encryption."
    ),
    screenshot_guide=(
        "OpenSearch Console → Domains → Select domain → Security → "
        "Screenshot showing 'Fine-grained access control: Enabled'"
    ),
)


class OpenSearchChecker(ServiceChecker):
    """Checks OpenSearch domains for encryption, exposure and audit settings."""

    NAME = "OpenSearch Security"

    def __init__(self, client: Any) -> None:
        """Initialize the checker.

        Args:
            client: boto3 OpenSearch client.
        """
        self.client = client
        self._domains: Optional[list[str]] = None
        self._details: dict[str, Optional[dict]] = {}

    def run(self, context: ScanContext) -> list[CheckResult]:
        self._domains = None
        self._details = {}
        return super().run(context)

    def checks(self):
        return [
            self.check_encryption_at_rest,
            self.check_node_to_node_encryption,
            self.check_https,
            self.check_vpc_deployment,
            self.check_audit_logs,
            self.check_fine_grained_access_control,
        ]

    def _domain_names(self) -> list[str]:
        if self._domains is None:
            response = self.client.list_domain_names()
            self._domains = [d["DomainName"] for d in response.get("DomainNames", [])]
        return self._domains

    def _domain_status(self, name: str) -> Optional[dict]:
        """Describe a domain once per run; None when the call fails."""
        if name not in self._details:
            try:
                response = self.client.describe_domain(DomainName=name)
                self._details[name] = response.get("DomainStatus", {})
            except Exception as e:
                logger.debug(f"Could not describe OpenSearch domain {name}: {e}")
                self._details[name] = None
        return self._details[name]

    def _offenders(self, violates: Callable[[dict], bool]) -> tuple[int, list[str]]:
        names = self._domain_names()
        offenders = []
        for name in names:
            status = self._domain_status(name)
            if status is None:
                continue
            if violates(status):
                offenders.append(name)
        return len(names), offenders

    def check_encryption_at_rest(self) -> CheckResult:
        total, offenders = self._offenders(
            lambda s: not (s.get("EncryptionAtRestOptions") or {}).get("Enabled")
        )
        return ENCRYPTION_AT_REST.evaluate(
            total,
            offenders,
            "OpenSearch domains without encryption at rest",
            "OpenSearch domains have encryption at rest enabled",
        )

    def check_node_to_node_encryption(self) -> CheckResult:
        total, offenders = self._offenders(
            lambda s: not (s.get("NodeToNodeEncryptionOptions") or {}).get("Enabled")
        )
        return NODE_TO_NODE.evaluate(
            total,
            offenders,
            "OpenSearch domains without node-to-node encryption",
            "OpenSearch domains have node-to-node encryption enabled",
        )

    def check_https(self) -> CheckResult:
        total, offenders = self._offenders(
            lambda s: not (s.get("DomainEndpointOptions") or {}).get("EnforceHTTPS")
        )
        return ENFORCE_HTTPS.evaluate(
            total,
            offenders,
            "OpenSearch domains not enforcing HTTPS",
            "OpenSearch domains enforce HTTPS",
        )

    def check_vpc_deployment(self) -> CheckResult:
        # No VPC subnets means the domain has a public endpoint
        total, offenders = self._offenders(
            lambda s: not (s.get("VPCOptions") or {}).get("SubnetIds")
        )
        return VPC_DEPLOYMENT.evaluate(
            total,
            offenders,
            "OpenSearch domains are publicly accessible (not in VPC)",
            "OpenSearch domains are deployed in VPC",
        )

    def check_audit_logs(self) -> CheckResult:
        def audit_disabled(status: dict) -> bool:
            options = status.get("LogPublishingOptions") or {}
            return not (options.get("AUDIT_LOGS") or {}).get("Enabled")

        total, offenders = self._offenders(audit_disabled)
        return AUDIT_LOGS.evaluate(
            total,
            offenders,
            "OpenSearch domains without audit logging",
            "OpenSearch domains have audit logging enabled",
        )

    def check_fine_grained_access_control(self) -> CheckResult:
        total, offenders = self._offenders(
            lambda s: not (s.get("AdvancedSecurityOptions") or {}).get("Enabled")
        )
        return FINE_GRAINED_ACCESS.evaluate(
            total,
            offenders,
            "OpenSearch domains without fine-grained access control",
            "OpenSearch domains have fine-grained access control enabled",
        )
