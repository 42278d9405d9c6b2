"""Propagation annotation keys and flag parsing."""

from __future__ import annotations

from dataclasses import dataclass

from hncsel.domain.errors import InvalidFlagError
from hncsel.domain.resource import ResourceObject

ANNOTATION_PREFIX = "propagate.hnc.x-k8s.io"
ANNOTATION_SELECTOR = f"{ANNOTATION_PREFIX}/select"
ANNOTATION_TREE_SELECTOR = f"{ANNOTATION_PREFIX}/treeSelect"
ANNOTATION_NONE_SELECTOR = f"{ANNOTATION_PREFIX}/none"
ANNOTATION_ALL_SELECTOR = f"{ANNOTATION_PREFIX}/all"

SELECTOR_ANNOTATIONS: tuple[str, ...] = (
    ANNOTATION_SELECTOR,
    ANNOTATION_TREE_SELECTOR,
    ANNOTATION_NONE_SELECTOR,
    ANNOTATION_ALL_SELECTOR,
)

_TRUE_LITERALS = frozenset({"1", "t", "true"})
_FALSE_LITERALS = frozenset({"0", "f", "false"})


@dataclass(frozen=True)
class SelectorAnnotations:
    """Raw selector annotation values; empty string means not set."""

    selector: str = ""
    tree_selector: str = ""
    none_selector: str = ""
    all_selector: str = ""


def read_selector_annotations(inst: ResourceObject) -> SelectorAnnotations:
    """Extract the four selector annotation values from an object."""
    return SelectorAnnotations(
        selector=inst.annotation(ANNOTATION_SELECTOR),
        tree_selector=inst.annotation(ANNOTATION_TREE_SELECTOR),
        none_selector=inst.annotation(ANNOTATION_NONE_SELECTOR),
        all_selector=inst.annotation(ANNOTATION_ALL_SELECTOR),
    )


def parse_flag(raw: str, annotation: str) -> bool:
    """Parse a boolean flag annotation value.

    Empty means false. Otherwise accepts `true`/`false`, `t`/`f` and
    `1`/`0` in any letter case.
    """
    if raw == "":
        return False
    lowered = raw.lower()
    if lowered in _TRUE_LITERALS:
        return True
    if lowered in _FALSE_LITERALS:
        return False
    raise InvalidFlagError(raw, annotation=annotation)


def get_none_selector(inst: ResourceObject) -> bool:
    """Return True when the object asks never to be propagated."""
    return parse_flag(inst.annotation(ANNOTATION_NONE_SELECTOR), ANNOTATION_NONE_SELECTOR)


def get_all_selector(inst: ResourceObject) -> bool:
    """Return True when the object asks to be propagated everywhere."""
    return parse_flag(inst.annotation(ANNOTATION_ALL_SELECTOR), ANNOTATION_ALL_SELECTOR)
