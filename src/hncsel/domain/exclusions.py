"""Static exclusion rules for resources managed by third parties."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from hncsel.domain.resource import ResourceObject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExclusionByName:
    """Exclude a resource identified by group, kind and name."""

    name: str
    kind: str = "ConfigMap"
    group: str = ""

    def matches(self, inst: ResourceObject) -> bool:
        return (
            inst.group == self.group
            and inst.kind == self.kind
            and inst.name == self.name
        )


@dataclass(frozen=True)
class ExclusionByLabel:
    """Exclude resources carrying an exact label key/value pair."""

    key: str
    value: str

    def matches(self, inst: ResourceObject) -> bool:
        # Empty label values are legal, so presence is checked explicitly.
        return self.key in inst.labels and inst.labels[self.key] == self.value


@dataclass(frozen=True)
class ExclusionByAnnotation:
    """Exclude resources carrying an annotation; empty value matches any."""

    key: str
    value: str = ""

    def matches(self, inst: ResourceObject) -> bool:
        if self.key not in inst.annotations:
            return False
        return self.value == "" or inst.annotations[self.key] == self.value


ExclusionRule = ExclusionByName | ExclusionByLabel | ExclusionByAnnotation

# Istio and kube-root CA bundles are created in every namespace by their owners.
CONFIGMAP_EXCLUSIONS_BY_NAME: tuple[ExclusionByName, ...] = (
    ExclusionByName("istio-ca-root-cert"),
    ExclusionByName("kube-root-ca.crt"),
)

# Rancher "System Tools > Remove" objects.
EXCLUSIONS_BY_LABEL: tuple[ExclusionByLabel, ...] = (
    ExclusionByLabel("cattle.io/creator", "norman"),
)

# OpenShift project resources.
EXCLUSIONS_BY_ANNOTATION: tuple[ExclusionByAnnotation, ...] = (
    ExclusionByAnnotation("openshift.io/description"),
)


@dataclass(frozen=True)
class ExclusionPolicy:
    """Ordered exclusion tables: by name, then by label, then by annotation."""

    by_name: tuple[ExclusionByName, ...] = field(default=())
    by_label: tuple[ExclusionByLabel, ...] = field(default=())
    by_annotation: tuple[ExclusionByAnnotation, ...] = field(default=())

    @property
    def rules(self) -> tuple[ExclusionRule, ...]:
        return (*self.by_name, *self.by_label, *self.by_annotation)

    def extended(
        self,
        *,
        by_name: Iterable[ExclusionByName] = (),
        by_label: Iterable[ExclusionByLabel] = (),
        by_annotation: Iterable[ExclusionByAnnotation] = (),
    ) -> ExclusionPolicy:
        """Return a policy with extra rules appended to each table."""
        return ExclusionPolicy(
            by_name=(*self.by_name, *by_name),
            by_label=(*self.by_label, *by_label),
            by_annotation=(*self.by_annotation, *by_annotation),
        )

    def matching_rule(self, inst: ResourceObject) -> ExclusionRule | None:
        """Return the first rule that excludes the object, if any."""
        for rule in self.rules:
            if rule.matches(inst):
                return rule
        return None

    def is_excluded(self, inst: ResourceObject) -> bool:
        rule = self.matching_rule(inst)
        if rule is not None:
            logger.debug("%s/%s excluded by %r", inst.kind, inst.name, rule)
            return True
        return False


DEFAULT_EXCLUSION_POLICY = ExclusionPolicy(
    by_name=CONFIGMAP_EXCLUSIONS_BY_NAME,
    by_label=EXCLUSIONS_BY_LABEL,
    by_annotation=EXCLUSIONS_BY_ANNOTATION,
)


def is_excluded(
    inst: ResourceObject, policy: ExclusionPolicy = DEFAULT_EXCLUSION_POLICY
) -> bool:
    """Return whether the object is blocked from propagation by a static rule."""
    return policy.is_excluded(inst)
