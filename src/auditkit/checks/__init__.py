"""AWS service checkers."""

from auditkit.checks.base import Checker, ResourceCheck, ServiceChecker
from auditkit.checks.elasticache import ElastiCacheChecker
from auditkit.checks.opensearch import OpenSearchChecker
from auditkit.checks.redshift import RedshiftChecker
from auditkit.checks.registry import CheckerRegistry, get_account_id
from auditkit.checks.sagemaker import SageMakerChecker

__all__ = [
    "Checker",
    "CheckerRegistry",
    "ElastiCacheChecker",
    "OpenSearchChecker",
    "RedshiftChecker",
    "ResourceCheck",
    "SageMakerChecker",
    "ServiceChecker",
    "get_account_id",
]
