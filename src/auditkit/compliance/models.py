"""Data models for compliance mapping."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union


class ComplianceFramework(Enum):
    """Frameworks shipped in the default mapping table."""

    SOC2 = "soc2"
    PCI_DSS = "pci-dss"
    HIPAA = "hipaa"
    ISO_27001 = "iso-27001"
    NIST_800_53 = "nist-800-53"
    CMMC = "cmmc"


FrameworkName = Union[str, ComplianceFramework]


def framework_key(framework: FrameworkName) -> str:
    """Normalize a framework enum or name to its table key."""
    if isinstance(framework, ComplianceFramework):
        return framework.value
    return framework.strip().lower()


def requirement_sort_key(requirement_id: str) -> tuple:
    """Natural sort key so that ``CC6.10`` sorts after ``CC6.9``."""
    parts = re.split(r"(\d+)", requirement_id)
    key = tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts if p)
    # Raw ID breaks ties such as "A01" vs "A1".
    return (key, requirement_id)


@dataclass(frozen=True)
class FrameworkRequirement:
    """Represents a compliance requirement within one framework."""

    framework: str
    requirement_id: str
    title: str
    category: str = ""
