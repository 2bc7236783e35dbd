"""Checker registry for managing AWS service checkers."""

import logging
from typing import Any, Callable, Optional

import boto3
from botocore.config import Config

from auditkit.checks.base import Checker

logger = logging.getLogger(__name__)

# botocore retries throttling and transient errors inside each call
BOTO_CONFIG = Config(
    retries={"max_attempts": 10, "mode": "adaptive"},
    connect_timeout=10,
    read_timeout=60,
)

ClientFactory = Callable[[str], Any]


class CheckerRegistry:
    """Registry for service checkers.

    Checkers run in registration order. Registering the same checker twice
    runs it twice; the registry does not deduplicate.
    """

    def __init__(self) -> None:
        """Initialize the checker registry."""
        self._checkers: list[Checker] = []

    def register(self, checker: Checker) -> None:
        """Register a checker.

        Args:
            checker: Checker instance to register.
        """
        self._checkers.append(checker)

    def get(self, name: str) -> Optional[Checker]:
        """Get the first checker registered under a name.

        Args:
            name: The checker name.

        Returns:
            Checker instance or None if not found.
        """
        for checker in self._checkers:
            if checker.name == name:
                return checker
        return None

    def get_all(self) -> list[Checker]:
        """Get all registered checkers.

        Returns:
            List of registered checkers in registration order.
        """
        return list(self._checkers)

    def names(self) -> list[str]:
        """Get the names of all registered checkers."""
        return [c.name for c in self._checkers]

    def clear(self) -> None:
        """Clear all registered checkers."""
        self._checkers.clear()

    def __len__(self) -> int:
        return len(self._checkers)

    @classmethod
    def from_session(
        cls,
        session: Optional[Any] = None,
        region: Optional[str] = None,
    ) -> "CheckerRegistry":
        """Build a registry with the default AWS checkers.

        Args:
            session: boto3 Session. If None, uses default credentials.
            region: AWS region; defaults to the session's region.

        Returns:
            CheckerRegistry with every default checker registered.
        """
        session = session or boto3.Session()
        region = region or session.region_name

        def client_for(service: str) -> Any:
            return session.client(service, region_name=region, config=BOTO_CONFIG)

        registry = cls()
        _register_default_checkers(registry, client_for)
        logger.debug(f"Registered {len(registry)} checkers for region {region}")
        return registry


def _register_default_checkers(registry: CheckerRegistry, client_for: ClientFactory) -> None:
    """Register all default checkers."""
    from auditkit.checks.elasticache import ElastiCacheChecker
    from auditkit.checks.opensearch import OpenSearchChecker
    from auditkit.checks.redshift import RedshiftChecker
    from auditkit.checks.sagemaker import SageMakerChecker

    registry.register(RedshiftChecker(client_for("redshift")))
    registry.register(ElastiCacheChecker(client_for("elasticache")))
    registry.register(OpenSearchChecker(client_for("opensearch")))
    registry.register(SageMakerChecker(client_for("sagemaker")))


def get_account_id(session: Optional[Any] = None) -> str:
    """Get the AWS account ID for a session via STS."""
    session = session or boto3.Session()
    sts = session.client("sts", config=BOTO_CONFIG)
    return sts.get_caller_identity()["Account"]
