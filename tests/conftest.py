"""Pytest configuration and fixtures for auditkit tests."""

from datetime import datetime, timezone
from typing import Any, Optional
from unittest.mock import Mock

import pytest

from auditkit.checks.base import Checker
from auditkit.compliance.mapper import FrameworkMappingTable
from auditkit.models import CheckResult, Priority, Severity, Status


class StaticChecker(Checker):
    """Checker returning a fixed list of results."""

    def __init__(self, name: str, results: list[CheckResult]) -> None:
        self.NAME = name
        self.results = results
        self.calls = 0

    def run(self, context):
        self.calls += 1
        return list(self.results)


class FailingChecker(Checker):
    """Checker that raises on every run."""

    def __init__(self, name: str, error: Exception) -> None:
        self.NAME = name
        self.error = error

    def run(self, context):
        raise self.error


@pytest.fixture
def fixed_time() -> datetime:
    """Return a fixed report timestamp."""
    return datetime(2024, 1, 15, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_result():
    """Factory for CheckResults with sensible defaults."""

    def _make(
        check_id: str,
        status: Status = Status.PASS,
        mapping_key: str = "",
        severity: Optional[Severity] = None,
        evidence: Optional[str] = None,
        priority: Priority = Priority.INFO,
        remediation: str = "",
        console_url: str = "",
    ) -> CheckResult:
        if status == Status.FAIL and severity is None:
            severity = Severity.HIGH
        return CheckResult(
            check_id=check_id,
            name=check_id.replace(".", " ").title(),
            status=status,
            evidence=evidence if evidence is not None else f"{check_id} {status.value.lower()}",
            mapping_key=mapping_key,
            severity=severity,
            priority=priority,
            remediation=remediation,
            console_url=console_url,
        )

    return _make


@pytest.fixture
def small_table() -> FrameworkMappingTable:
    """Synthetic two-framework mapping table."""
    return FrameworkMappingTable(
        mappings={
            "ENCRYPTION": {"soc2": "CC6.3", "pci-dss": "3.4"},
            "NETWORK": {"soc2": "CC6.1", "pci-dss": "1.3"},
            "LOGGING": {"soc2": "CC7.2"},
        },
        requirements={
            "soc2": {
                "CC1.1": ("Integrity and Ethical Values", "Control Environment"),
                "CC6.1": ("Logical Access Security", "Access"),
                "CC6.3": ("Encryption of Data at Rest", "Access"),
                "CC7.2": ("System Monitoring", "Operations"),
            },
            "pci-dss": {
                "1.3": ("Prohibit Direct Public Access", "Network Security"),
                "3.4": ("Render Stored Data Unreadable", "Protect Stored Data"),
            },
        },
    )


@pytest.fixture
def static_checker():
    """Factory for checkers returning fixed results."""
    return StaticChecker


@pytest.fixture
def failing_checker():
    """Factory for checkers that raise."""
    return FailingChecker


@pytest.fixture
def aws_client():
    """Factory for fake boto3 clients.

    Keyword arguments name client methods; values are either the response
    dict or an exception to raise. Pagination is disabled so ``collect``
    calls the method directly.
    """

    def _make(**responses: Any) -> Mock:
        client = Mock()
        client.can_paginate.return_value = False
        for method, response in responses.items():
            if isinstance(response, Exception) or callable(response):
                getattr(client, method).side_effect = response
            else:
                getattr(client, method).return_value = response
        return client

    return _make
