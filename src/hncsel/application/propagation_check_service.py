"""Evaluate propagation directives for objects and namespaces."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from pathlib import Path

import pandas as pd

from hncsel.domain.annotations import get_all_selector, get_none_selector
from hncsel.domain.errors import SelectorError
from hncsel.domain.propagation import PropagationDecision, PropagationEngine
from hncsel.domain.resource import ResourceObject

logger = logging.getLogger(__name__)

VERDICT_PROPAGATE = "propagate"
VERDICT_SKIP = "skip"
VERDICT_REJECTED = "rejected"

MATRIX_FILE_NAME = "propagation_matrix.csv"


@dataclass(frozen=True)
class CheckResult:
    """Decision for one object against one namespace label set."""

    object_ref: str
    namespace: str | None
    selector_exists: bool
    decision: PropagationDecision


@dataclass(frozen=True)
class DirectiveSummary:
    """Parsed form of every propagation directive on an object."""

    object_ref: str
    selector: str
    tree_selector: str
    none_selector: bool
    all_selector: bool
    selector_exists: bool


@dataclass(frozen=True)
class MatrixRow:
    """One cell of the object x namespace propagation matrix."""

    object_ref: str
    namespace: str
    verdict: str
    step: str
    reason: str


def object_ref(inst: ResourceObject) -> str:
    """Return `kind[.group]/name` for display."""
    kind = f"{inst.kind}.{inst.group}" if inst.group else inst.kind
    return f"{kind}/{inst.name}"


def check_object(
    engine: PropagationEngine,
    inst: ResourceObject,
    ns_labels: Mapping[str, str],
    *,
    namespace: str | None = None,
) -> CheckResult:
    """Decide propagation for one object; malformed directives raise."""
    return CheckResult(
        object_ref=object_ref(inst),
        namespace=namespace,
        selector_exists=engine.selector_exists(inst, ns_labels),
        decision=engine.explain(inst, ns_labels),
    )


def summarize_directives(engine: PropagationEngine, inst: ResourceObject) -> DirectiveSummary:
    """Parse every directive on the object, raising on the first malformed one."""
    tree = engine.tree_selector(inst)
    return DirectiveSummary(
        object_ref=object_ref(inst),
        selector=str(engine.selector(inst)),
        tree_selector=str(tree) if tree is not None else "",
        none_selector=get_none_selector(inst),
        all_selector=get_all_selector(inst),
        selector_exists=engine.selector_exists(inst, {}),
    )


def build_matrix(
    engine: PropagationEngine,
    objects: Iterable[ResourceObject],
    namespaces: Mapping[str, Mapping[str, str]],
) -> list[MatrixRow]:
    """Evaluate every object against every namespace.

    Objects with malformed directives are reported as rejected, the verdict
    an admission check would give them.
    """
    rows: list[MatrixRow] = []
    for inst in objects:
        ref = object_ref(inst)
        for namespace in sorted(namespaces):
            try:
                decision = engine.explain(inst, namespaces[namespace])
            except SelectorError as exc:
                logger.warning("%s: %s", ref, exc)
                rows.append(MatrixRow(ref, namespace, VERDICT_REJECTED, "error", str(exc)))
                continue
            verdict = VERDICT_PROPAGATE if decision.verdict else VERDICT_SKIP
            rows.append(MatrixRow(ref, namespace, verdict, decision.step, decision.reason))
    return rows


def verdict_counts(rows: Iterable[MatrixRow]) -> dict[str, int]:
    """Count rows per verdict, including verdicts with no rows."""
    counts = Counter(row.verdict for row in rows)
    return {
        verdict: counts.get(verdict, 0)
        for verdict in (VERDICT_PROPAGATE, VERDICT_SKIP, VERDICT_REJECTED)
    }


def matrix_frame(rows: Iterable[MatrixRow]) -> pd.DataFrame:
    """Return matrix rows as a DataFrame with stable column order."""
    return pd.DataFrame(
        [asdict(row) for row in rows],
        columns=["object_ref", "namespace", "verdict", "step", "reason"],
    )


def write_matrix_csv(rows: Iterable[MatrixRow], output_dir: Path) -> Path:
    """Write the matrix CSV into output_dir and return its path."""
    path = output_dir / MATRIX_FILE_NAME
    matrix_frame(rows).to_csv(path, index=False)
    return path
