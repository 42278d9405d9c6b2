"""Propagation selector resolution for hierarchical namespaces."""

from hncsel.domain.annotations import (
    ANNOTATION_ALL_SELECTOR,
    ANNOTATION_NONE_SELECTOR,
    ANNOTATION_SELECTOR,
    ANNOTATION_TREE_SELECTOR,
    get_all_selector,
    get_none_selector,
    parse_flag,
    read_selector_annotations,
)
from hncsel.domain.errors import (
    InternalSelectorError,
    InvalidFlagError,
    InvalidNamespaceNameError,
    MultipleNonNegatedError,
    SelectorError,
    SelectorSyntaxError,
)
from hncsel.domain.exclusions import DEFAULT_EXCLUSION_POLICY, ExclusionPolicy, is_excluded
from hncsel.domain.label_selector import Selector, parse_selector
from hncsel.domain.propagation import (
    PropagationDecision,
    PropagationEngine,
    explain_propagation,
    get_selector,
    selector_exists,
    should_propagate,
)
from hncsel.domain.resource import ResourceObject
from hncsel.domain.tree_selector import TREE_DEPTH_LABEL_SUFFIX, get_tree_selector

__all__ = [
    "ANNOTATION_ALL_SELECTOR",
    "ANNOTATION_NONE_SELECTOR",
    "ANNOTATION_SELECTOR",
    "ANNOTATION_TREE_SELECTOR",
    "DEFAULT_EXCLUSION_POLICY",
    "ExclusionPolicy",
    "InternalSelectorError",
    "InvalidFlagError",
    "InvalidNamespaceNameError",
    "MultipleNonNegatedError",
    "PropagationDecision",
    "PropagationEngine",
    "ResourceObject",
    "Selector",
    "SelectorError",
    "SelectorSyntaxError",
    "TREE_DEPTH_LABEL_SUFFIX",
    "explain_propagation",
    "get_all_selector",
    "get_none_selector",
    "get_selector",
    "get_tree_selector",
    "is_excluded",
    "parse_flag",
    "parse_selector",
    "read_selector_annotations",
    "selector_exists",
    "should_propagate",
]
