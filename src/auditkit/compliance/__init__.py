"""Compliance framework mapping, collapsing, scoring and ranking."""

from auditkit.compliance.collapser import CollapseResult, RequirementCollapser
from auditkit.compliance.mapper import FrameworkMappingTable
from auditkit.compliance.models import (
    ComplianceFramework,
    FrameworkRequirement,
    framework_key,
)
from auditkit.compliance.ranking import RemediationRanker
from auditkit.compliance.scoring import ScoreAggregator

__all__ = [
    "CollapseResult",
    "ComplianceFramework",
    "FrameworkMappingTable",
    "FrameworkRequirement",
    "RemediationRanker",
    "RequirementCollapser",
    "ScoreAggregator",
    "framework_key",
]
