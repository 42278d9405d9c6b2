"""Resource objects evaluated for propagation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _frozen(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


def group_from_api_version(api_version: str) -> str:
    """Return the API group of an `apiVersion` string ("" for the core group)."""
    group, sep, _ = api_version.rpartition("/")
    return group if sep else ""


@dataclass(frozen=True)
class ResourceObject:
    """Read-only view of the metadata the propagation rules look at."""

    name: str
    kind: str
    group: str = ""
    annotations: Mapping[str, str] = field(default_factory=dict)
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "annotations", _frozen(self.annotations))
        object.__setattr__(self, "labels", _frozen(self.labels))

    def annotation(self, key: str) -> str:
        """Return annotation value or empty string when absent."""
        return self.annotations.get(key, "")

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> ResourceObject:
        """Build from a Kubernetes-style manifest dictionary."""
        metadata = manifest.get("metadata") or {}
        return cls(
            name=metadata.get("name", ""),
            kind=manifest.get("kind", ""),
            group=group_from_api_version(manifest.get("apiVersion", "")),
            annotations={
                str(k): str(v) for k, v in (metadata.get("annotations") or {}).items()
            },
            labels={str(k): str(v) for k, v in (metadata.get("labels") or {}).items()},
        )
