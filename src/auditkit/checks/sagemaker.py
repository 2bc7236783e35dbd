"""SageMaker checks."""

import logging
from typing import Any, Optional

from auditkit.checks.base import ResourceCheck, ServiceChecker, collect
from auditkit.context import ScanContext
from auditkit.models import CheckResult, Priority, Severity

logger = logging.getLogger(__name__)

NOTEBOOK_CONSOLE_URL = "https://console.aws.amazon.com/sagemaker/home#/notebook-instances"

# Training jobs and models are sampled, not exhaustively listed.
MAX_SAMPLED_ITEMS = 100

NOTEBOOK_ENCRYPTION = ResourceCheck(
    check_id="sagemaker.notebook_encryption",
    name="SageMaker Notebook Encryption",
    control="CC6.3",
    mapping_key="SAGEMAKER_ENCRYPTION",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    resource_kind="SageMaker notebooks",
    remediation="Enable KMS encryption for SageMaker notebooks",
    remediation_detail=(
        "Create new notebook instance with KMS key or recreate existing notebooks "
        "with encryption enabled"
    ),
    screenshot_guide=(
        "SageMaker Console → Notebook instances → Select instance → Configuration → "
        "Screenshot showing KMS Key ARN"
    ),
    console_url=NOTEBOOK_CONSOLE_URL,
)

NOTEBOOK_DIRECT_INTERNET = ResourceCheck(
    check_id="sagemaker.notebook_direct_internet",
    name="SageMaker Direct Internet Access",
    control="CC6.1",
    mapping_key="SAGEMAKER_NETWORK",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="SageMaker notebooks",
    remediation="Disable direct internet access and use VPC for network isolation",
    remediation_detail=(
        "Recreate notebook instance in VPC with DirectInternetAccess=Disabled, "
        "use NAT gateway for outbound access"
    ),
    screenshot_guide=(
        "SageMaker Console → Notebook → Network → "
        "Screenshot showing 'Direct internet access: Disabled'"
    ),
    console_url=NOTEBOOK_CONSOLE_URL,
)

NOTEBOOK_ROOT_ACCESS = ResourceCheck(
    check_id="sagemaker.notebook_root_access",
    name="SageMaker Root Access",
    control="CC6.6",
    mapping_key="SAGEMAKER_ACCESS",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="SageMaker notebooks",
    remediation="Disable root access for notebook instances",
    remediation_detail=(
        "Update notebook instance to disable root access: aws sagemaker "
        "update-notebook-instance --notebook-instance-name NAME --root-access Disabled"
    ),
    screenshot_guide=(
        "SageMaker Console → Notebook → Permissions → Screenshot showing 'Root access: Disabled'"
    ),
    console_url=NOTEBOOK_CONSOLE_URL,
)

ENDPOINT_ENCRYPTION = ResourceCheck(
    check_id="sagemaker.endpoint_encryption",
    name="SageMaker Endpoint Encryption",
    control="CC6.3",
    mapping_key="SAGEMAKER_ENCRYPTION",
    severity=Severity.HIGH,
    priority=Priority.HIGH,
    resource_kind="SageMaker endpoints",
    remediation="Enable KMS encryption for SageMaker endpoints",
    remediation_detail=(
        "Create new endpoint config with KmsKeyId specified, then update endpoint "
        "to use new config"
    ),
    screenshot_guide=(
        "SageMaker Console → Endpoints → Select endpoint → Configuration → "
        "Screenshot showing KMS Key ARN"
    ),
    console_url="https://console.aws.amazon.com/sagemaker/home#/endpoints",
)

TRAINING_JOB_ENCRYPTION = ResourceCheck(
    check_id="sagemaker.training_job_encryption",
    name="SageMaker Training Job Encryption",
    control="CC6.3",
    mapping_key="SAGEMAKER_ENCRYPTION",
    severity=Severity.MEDIUM,
    priority=Priority.MEDIUM,
    resource_kind="SageMaker training jobs",
    remediation="Enable KMS encryption for training job volumes",
    remediation_detail="When creating training jobs, specify VolumeKmsKeyId in ResourceConfig",
    screenshot_guide=(
        "SageMaker Console → Training jobs → Select job → Configuration → "
        "Screenshot showing encryption settings"
    ),
    console_url="https://console.aws.amazon.com/sagemaker/home#/jobs",
)

MODEL_NETWORK_ISOLATION = ResourceCheck(
    check_id="sagemaker.model_network_isolation",
    name="SageMaker Model Network Isolation",
    control="CC6.1",
    mapping_key="SAGEMAKER_NETWORK",
    severity=Severity.LOW,
    priority=Priority.LOW,
    resource_kind="SageMaker models",
    remediation="Enable network isolation for SageMaker models",
    remediation_detail=(
        "When creating models, set EnableNetworkIsolation=true to prevent network "
        "access during inference"
    ),
    screenshot_guide=(
        "SageMaker Console → Models → Select model → Network → "
        "Screenshot showing isolation settings"
    ),
    console_url="https://console.aws.amazon.com/sagemaker/home#/models",
)


class SageMakerChecker(ServiceChecker):
    """Checks SageMaker notebooks, endpoints, training jobs and models."""

    NAME = "SageMaker ML Security"

    def __init__(self, client: Any) -> None:
        """Initialize the checker.

        Args:
            client: boto3 SageMaker client.
        """
        self.client = client
        self._notebooks: Optional[list[tuple[str, Optional[dict]]]] = None

    def run(self, context: ScanContext) -> list[CheckResult]:
        self._notebooks = None
        return super().run(context)

    def checks(self):
        return [
            self.check_notebook_encryption,
            self.check_notebook_direct_internet,
            self.check_notebook_root_access,
            self.check_endpoint_encryption,
            self.check_training_job_encryption,
            self.check_model_network_isolation,
        ]

    def _describe_notebooks(self) -> list[tuple[str, Optional[dict]]]:
        """List notebooks with their details (None when describe fails)."""
        if self._notebooks is None:
            notebooks = []
            for nb in collect(self.client, "list_notebook_instances", "NotebookInstances"):
                name = nb["NotebookInstanceName"]
                try:
                    detail = self.client.describe_notebook_instance(NotebookInstanceName=name)
                except Exception as e:
                    logger.debug(f"Could not describe notebook {name}: {e}")
                    detail = None
                notebooks.append((name, detail))
            self._notebooks = notebooks
        return self._notebooks

    def check_notebook_encryption(self) -> CheckResult:
        notebooks = self._describe_notebooks()
        offenders = [
            name for name, detail in notebooks
            if detail is not None and not detail.get("KmsKeyId")
        ]
        return NOTEBOOK_ENCRYPTION.evaluate(
            len(notebooks),
            offenders,
            "notebooks without KMS encryption",
            "notebooks are encrypted with KMS",
        )

    def check_notebook_direct_internet(self) -> CheckResult:
        notebooks = self._describe_notebooks()
        offenders = [
            name for name, detail in notebooks
            if detail is not None and detail.get("DirectInternetAccess") == "Enabled"
        ]
        return NOTEBOOK_DIRECT_INTERNET.evaluate(
            len(notebooks),
            offenders,
            "notebooks have direct internet access enabled",
            "notebooks have direct internet access disabled",
        )

    def check_notebook_root_access(self) -> CheckResult:
        notebooks = self._describe_notebooks()
        offenders = [
            name for name, detail in notebooks
            if detail is not None and detail.get("RootAccess") == "Enabled"
        ]
        return NOTEBOOK_ROOT_ACCESS.evaluate(
            len(notebooks),
            offenders,
            "notebooks have root access enabled",
            "notebooks have root access disabled",
        )

    def check_endpoint_encryption(self) -> CheckResult:
        endpoints = collect(self.client, "list_endpoints", "Endpoints")
        offenders = []
        for endpoint in endpoints:
            name = endpoint["EndpointName"]
            try:
                detail = self.client.describe_endpoint(EndpointName=name)
                config = self.client.describe_endpoint_config(
                    EndpointConfigName=detail["EndpointConfigName"]
                )
            except Exception as e:
                logger.debug(f"Could not describe endpoint {name}: {e}")
                continue
            if not config.get("KmsKeyId"):
                offenders.append(name)

        return ENDPOINT_ENCRYPTION.evaluate(
            len(endpoints),
            offenders,
            "endpoints without KMS encryption",
            "endpoints are encrypted with KMS",
        )

    def check_training_job_encryption(self) -> CheckResult:
        response = self.client.list_training_jobs(MaxResults=MAX_SAMPLED_ITEMS)
        jobs = response.get("TrainingJobSummaries", [])
        offenders = []
        for job in jobs:
            name = job["TrainingJobName"]
            try:
                detail = self.client.describe_training_job(TrainingJobName=name)
            except Exception as e:
                logger.debug(f"Could not describe training job {name}: {e}")
                continue
            resource_config = detail.get("ResourceConfig")
            if resource_config is not None and not resource_config.get("VolumeKmsKeyId"):
                offenders.append(name)

        return TRAINING_JOB_ENCRYPTION.evaluate(
            len(jobs),
            offenders,
            "training jobs without volume encryption",
            "recent training jobs have volume encryption enabled",
        )

    def check_model_network_isolation(self) -> CheckResult:
        response = self.client.list_models(MaxResults=MAX_SAMPLED_ITEMS)
        models = response.get("Models", [])
        offenders = []
        for model in models:
            name = model["ModelName"]
            try:
                detail = self.client.describe_model(ModelName=name)
            except Exception as e:
                logger.debug(f"Could not describe model {name}: {e}")
                continue
            if not detail.get("EnableNetworkIsolation"):
                offenders.append(name)

        return MODEL_NETWORK_ISOLATION.evaluate(
            len(models),
            offenders,
            "models without network isolation",
            "models have network isolation enabled",
        )
