"""Framework mapping table for internal check keys."""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import yaml

from auditkit.compliance.models import FrameworkName, FrameworkRequirement, framework_key
from auditkit.errors import MappingTableError, UnknownFrameworkError
from auditkit.models import CheckResult


class FrameworkMappingTable:
    """Read-only lookup from internal check keys to framework requirements.

    The table is built once and shared by reference. Nothing mutates it after
    construction, so concurrent readers need no locking.
    """

    def __init__(
        self,
        mappings: Mapping[str, Mapping[str, str]],
        requirements: Mapping[str, Mapping[str, Any]],
    ) -> None:
        """Initialize the mapping table.

        Args:
            mappings: Internal check key -> {framework: requirement_id}.
            requirements: Framework -> {requirement_id: (title, category)}.
                Values may also be dicts with ``title`` and ``category`` keys.

        Raises:
            MappingTableError: If a mapping targets a requirement that is
                not in the framework's catalog.
        """
        catalog: dict[str, Mapping[str, FrameworkRequirement]] = {}
        for framework, entries in requirements.items():
            fw = framework_key(framework)
            parsed = {}
            for requirement_id, meta in entries.items():
                title, category = _parse_requirement_meta(meta)
                parsed[str(requirement_id)] = FrameworkRequirement(
                    framework=fw,
                    requirement_id=str(requirement_id),
                    title=title,
                    category=category,
                )
            catalog[fw] = MappingProxyType(parsed)

        table: dict[str, Mapping[str, str]] = {}
        for key, targets in mappings.items():
            entry = {}
            for framework, requirement_id in targets.items():
                fw = framework_key(framework)
                requirement_id = str(requirement_id)
                if fw not in catalog:
                    raise MappingTableError(
                        f"Check key {key} maps to unknown framework {fw}"
                    )
                if requirement_id not in catalog[fw]:
                    raise MappingTableError(
                        f"Check key {key} maps to {fw} {requirement_id}, "
                        f"which is not in the {fw} catalog"
                    )
                entry[fw] = requirement_id
            table[key] = MappingProxyType(entry)

        self._catalog = MappingProxyType(catalog)
        self._table = MappingProxyType(table)

    @classmethod
    def default(cls) -> "FrameworkMappingTable":
        """Build the table shipped with auditkit."""
        from auditkit.compliance.catalog import MAPPINGS, REQUIREMENTS

        return cls(MAPPINGS, REQUIREMENTS)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FrameworkMappingTable":
        """Create a table from a ``{"requirements": ..., "mappings": ...}`` dict."""
        if not isinstance(data, Mapping):
            raise MappingTableError("Mapping table must be a mapping")
        return cls(
            mappings=data.get("mappings") or {},
            requirements=data.get("requirements") or {},
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "FrameworkMappingTable":
        """Load a custom table from a YAML file.

        Args:
            path: Path to a YAML document with ``requirements`` and
                ``mappings`` sections.

        Returns:
            FrameworkMappingTable built from the file.

        Raises:
            MappingTableError: If the file is not valid YAML or is inconsistent.
        """
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise MappingTableError(f"Failed to parse {path}: {e}") from e
        return cls.from_dict(data or {})

    def lookup(self, key: str) -> Mapping[str, str]:
        """Get the framework requirements an internal check key satisfies.

        Args:
            key: Internal check key.

        Returns:
            Mapping of framework -> requirement ID; empty for unmapped keys.
        """
        return self._table.get(key, MappingProxyType({}))

    def requirement_for(self, key: str, framework: FrameworkName) -> Optional[str]:
        """Get the requirement a key satisfies within one framework."""
        return self.lookup(key).get(framework_key(framework))

    def frameworks(self) -> list[str]:
        """Get supported framework names."""
        return sorted(self._catalog)

    def has_framework(self, framework: FrameworkName) -> bool:
        """Check whether a framework is in the table."""
        return framework_key(framework) in self._catalog

    def requirements(self, framework: FrameworkName) -> list[FrameworkRequirement]:
        """Get every requirement a framework report covers.

        Raises:
            UnknownFrameworkError: If the framework is not in the table.
        """
        fw = framework_key(framework)
        if fw not in self._catalog:
            raise UnknownFrameworkError(fw, self.frameworks())
        return list(self._catalog[fw].values())

    def get_requirement(
        self, framework: FrameworkName, requirement_id: str
    ) -> Optional[FrameworkRequirement]:
        """Get catalog metadata for one requirement."""
        return self._catalog.get(framework_key(framework), {}).get(requirement_id)

    def keys(self) -> list[str]:
        """Get all mapped internal check keys."""
        return sorted(self._table)

    def annotate(self, result: CheckResult) -> CheckResult:
        """Return a copy of the result with its framework mappings filled in."""
        return result.with_frameworks(dict(self.lookup(result.mapping_key)))

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)


def _parse_requirement_meta(meta: Any) -> tuple[str, str]:
    """Accept (title, category) tuples/lists, dicts, or a bare title."""
    if isinstance(meta, Mapping):
        return str(meta.get("title", "")), str(meta.get("category", ""))
    if isinstance(meta, (list, tuple)):
        title = meta[0] if len(meta) > 0 else ""
        category = meta[1] if len(meta) > 1 else ""
        return str(title), str(category)
    if meta is None:
        return "", ""
    return str(meta), ""
