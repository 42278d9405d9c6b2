"""Tree selectors: namespace names rewritten into depth-label requirements.

A tree selector such as ``team-a, !team-a-sandbox`` selects namespaces in the
subtree of ``team-a`` except the subtree of ``team-a-sandbox``. Every
namespace carries a ``<ancestor><suffix>`` label for each of its ancestors
(and itself), so each name becomes an existence requirement on that label.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from hncsel.domain.annotations import ANNOTATION_TREE_SELECTOR
from hncsel.domain.errors import (
    InternalSelectorError,
    InvalidNamespaceNameError,
    MultipleNonNegatedError,
    SelectorSyntaxError,
)
from hncsel.domain.label_selector import Selector, parse_selector
from hncsel.domain.resource import ResourceObject

TREE_DEPTH_LABEL_SUFFIX = "-depth"

_DNS1123_LABEL_MAX_LENGTH = 63
_DNS1123_LABEL_CHARS_RE = re.compile(r"^[a-z0-9-]*$")


@dataclass(frozen=True)
class TreeSegment:
    """One namespace entry of a tree selector."""

    namespace: str
    negated: bool = False

    def depth_requirement(self, suffix: str = TREE_DEPTH_LABEL_SUFFIX) -> str:
        """Return the label-selector requirement for this entry."""
        marker = "!" if self.negated else ""
        return f"{marker}{self.namespace}{suffix}"


def validate_namespace_name(name: str) -> list[str]:
    """Return every DNS-1123 label rule the name violates."""
    if not name:
        return ["must be at least 1 character"]
    problems: list[str] = []
    if len(name) > _DNS1123_LABEL_MAX_LENGTH:
        problems.append(f"must be no more than {_DNS1123_LABEL_MAX_LENGTH} characters")
    if not _DNS1123_LABEL_CHARS_RE.match(name):
        problems.append("must consist of lower case alphanumeric characters or '-'")
    if name.startswith("-") or name.endswith("-"):
        problems.append("must start and end with an alphanumeric character")
    return problems


def parse_tree_selector_segments(raw: str) -> list[TreeSegment]:
    """Split and validate a tree selector value.

    Raises
    ------
    InvalidNamespaceNameError
        If an entry is not a valid namespace name.
    MultipleNonNegatedError
        If more than one entry is not negated.
    """
    segments: list[TreeSegment] = []
    for seg in raw.split(","):
        seg = seg.strip()
        negated = seg.startswith("!")
        namespace = seg[1:] if negated else seg
        problems = validate_namespace_name(namespace)
        if problems:
            raise InvalidNamespaceNameError(
                namespace, problems, annotation=ANNOTATION_TREE_SELECTOR
            )
        segments.append(TreeSegment(namespace, negated))

    non_negated = [s.namespace for s in segments if not s.negated]
    if len(non_negated) > 1:
        raise MultipleNonNegatedError(non_negated, annotation=ANNOTATION_TREE_SELECTOR)
    return segments


def build_tree_selector(
    raw: str, *, depth_suffix: str = TREE_DEPTH_LABEL_SUFFIX
) -> Selector:
    """Convert a tree selector value into a label selector."""
    segments = parse_tree_selector_segments(raw)
    expression = ",".join(s.depth_requirement(depth_suffix) for s in segments)
    try:
        return parse_selector(expression, check_key_length=False)
    except SelectorSyntaxError as exc:
        # Names were validated above, so this points at a bad suffix or a bug.
        raise InternalSelectorError(str(exc), annotation=ANNOTATION_TREE_SELECTOR) from exc


def get_tree_selector(
    inst: ResourceObject, *, depth_suffix: str = TREE_DEPTH_LABEL_SUFFIX
) -> Selector | None:
    """Return the object's tree selector, or None when it has none."""
    raw = inst.annotation(ANNOTATION_TREE_SELECTOR)
    if raw == "":
        return None
    return build_tree_selector(raw, depth_suffix=depth_suffix)
