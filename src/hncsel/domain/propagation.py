"""Propagation decisions for objects in hierarchical namespaces.

Both queries walk an ordered tuple of steps; the first step returning a
decision wins. Selectors are parsed lazily by the step that needs them, so a
directive is only validated once every earlier step was inconclusive.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from hncsel.domain.annotations import (
    ANNOTATION_ALL_SELECTOR,
    ANNOTATION_NONE_SELECTOR,
    ANNOTATION_SELECTOR,
    ANNOTATION_TREE_SELECTOR,
    get_all_selector,
    get_none_selector,
)
from hncsel.domain.errors import SelectorSyntaxError
from hncsel.domain.exclusions import DEFAULT_EXCLUSION_POLICY, ExclusionPolicy
from hncsel.domain.label_selector import Selector, parse_selector
from hncsel.domain.resource import ResourceObject
from hncsel.domain.tree_selector import TREE_DEPTH_LABEL_SUFFIX, get_tree_selector

logger = logging.getLogger(__name__)

NamespaceLabels = Mapping[str, str]


@dataclass(frozen=True)
class PropagationDecision:
    """Verdict plus the step that produced it."""

    verdict: bool
    step: str
    reason: str


StepFunc = Callable[
    ["PropagationEngine", ResourceObject, NamespaceLabels], PropagationDecision | None
]


@dataclass(frozen=True)
class DecisionStep:
    """Named link of a decision chain."""

    name: str
    decide: StepFunc


def get_selector(inst: ResourceObject) -> Selector:
    """Return the object's plain selector; everything when unset."""
    try:
        return parse_selector(inst.annotation(ANNOTATION_SELECTOR))
    except SelectorSyntaxError as exc:
        raise exc.for_annotation(ANNOTATION_SELECTOR) from exc


def _selector_mismatch(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    selector = engine.selector(inst)
    if selector.matches(ns_labels):
        return None
    return PropagationDecision(
        False, "selector", f"namespace labels do not match {ANNOTATION_SELECTOR}={selector}"
    )


def _tree_selector_mismatch(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    selector = engine.tree_selector(inst)
    if selector is None or selector.matches(ns_labels):
        return None
    return PropagationDecision(
        False,
        "tree-selector",
        f"namespace is outside {ANNOTATION_TREE_SELECTOR}={inst.annotation(ANNOTATION_TREE_SELECTOR)}",
    )


def _none_selector_set(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    if get_none_selector(inst):
        return PropagationDecision(False, "none-selector", f"{ANNOTATION_NONE_SELECTOR} is true")
    return None


def _none_selector_present(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    if get_none_selector(inst):
        return PropagationDecision(True, "none-selector", f"{ANNOTATION_NONE_SELECTOR} is set")
    return None


def _all_selector_set(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    if get_all_selector(inst):
        return PropagationDecision(True, "all-selector", f"{ANNOTATION_ALL_SELECTOR} is true")
    return None


def _excluded(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    rule = engine.exclusion_policy.matching_rule(inst)
    if rule is None:
        return None
    return PropagationDecision(False, "exclusion", f"excluded by {rule!r}")


def _selector_present(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    if engine.selector(inst).empty():
        return None
    return PropagationDecision(True, "selector", f"{ANNOTATION_SELECTOR} is set")


def _tree_selector_present(
    engine: PropagationEngine, inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision | None:
    selector = engine.tree_selector(inst)
    if selector is None or selector.empty():
        return None
    return PropagationDecision(True, "tree-selector", f"{ANNOTATION_TREE_SELECTOR} is set")


PROPAGATION_STEPS: tuple[DecisionStep, ...] = (
    DecisionStep("selector", _selector_mismatch),
    DecisionStep("tree-selector", _tree_selector_mismatch),
    DecisionStep("none-selector", _none_selector_set),
    DecisionStep("all-selector", _all_selector_set),
    DecisionStep("exclusion", _excluded),
)

EXISTENCE_STEPS: tuple[DecisionStep, ...] = (
    DecisionStep("selector", _selector_present),
    DecisionStep("tree-selector", _tree_selector_present),
    DecisionStep("none-selector", _none_selector_present),
    DecisionStep("all-selector", _all_selector_set),
)

_PROPAGATE_BY_DEFAULT = PropagationDecision(True, "default", "no rule prevents propagation")
_NO_SELECTOR = PropagationDecision(False, "default", "no propagation selector is set")


class PropagationEngine:
    """Propagation queries bound to an exclusion policy and depth-label suffix."""

    def __init__(
        self,
        exclusion_policy: ExclusionPolicy = DEFAULT_EXCLUSION_POLICY,
        depth_suffix: str = TREE_DEPTH_LABEL_SUFFIX,
    ) -> None:
        self.exclusion_policy = exclusion_policy
        self.depth_suffix = depth_suffix

    def selector(self, inst: ResourceObject) -> Selector:
        return get_selector(inst)

    def tree_selector(self, inst: ResourceObject) -> Selector | None:
        return get_tree_selector(inst, depth_suffix=self.depth_suffix)

    def _run(
        self,
        steps: tuple[DecisionStep, ...],
        inst: ResourceObject,
        ns_labels: NamespaceLabels,
        default: PropagationDecision,
    ) -> PropagationDecision:
        for step in steps:
            decision = step.decide(self, inst, ns_labels)
            if decision is not None:
                logger.debug(
                    "%s/%s decided at step %s: %s", inst.kind, inst.name, step.name, decision.reason
                )
                return decision
        return default

    def explain(self, inst: ResourceObject, ns_labels: NamespaceLabels) -> PropagationDecision:
        """Return the propagation decision and the step that made it."""
        return self._run(PROPAGATION_STEPS, inst, ns_labels, _PROPAGATE_BY_DEFAULT)

    def should_propagate(self, inst: ResourceObject, ns_labels: NamespaceLabels) -> bool:
        """Return whether the object should be copied into the namespace.

        Malformed directives raise instead of resolving to a default.
        """
        return self.explain(inst, ns_labels).verdict

    def selector_exists(self, inst: ResourceObject, ns_labels: NamespaceLabels) -> bool:
        """Return whether the object carries any propagation directive."""
        return self._run(EXISTENCE_STEPS, inst, ns_labels, _NO_SELECTOR).verdict


DEFAULT_ENGINE = PropagationEngine()


def should_propagate(inst: ResourceObject, ns_labels: NamespaceLabels) -> bool:
    """Return whether the object should be propagated, using default rules."""
    return DEFAULT_ENGINE.should_propagate(inst, ns_labels)


def selector_exists(inst: ResourceObject, ns_labels: NamespaceLabels) -> bool:
    """Return whether any propagation directive is set, using default rules."""
    return DEFAULT_ENGINE.selector_exists(inst, ns_labels)


def explain_propagation(
    inst: ResourceObject, ns_labels: NamespaceLabels
) -> PropagationDecision:
    """Return the decision with its deciding step, using default rules."""
    return DEFAULT_ENGINE.explain(inst, ns_labels)
