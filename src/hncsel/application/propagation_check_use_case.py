"""Propagation check use-cases backing the CLI commands."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from hncsel.application.propagation_check_service import (
    VERDICT_REJECTED,
    CheckResult,
    DirectiveSummary,
    MatrixRow,
    build_matrix,
    check_object,
    summarize_directives,
    verdict_counts,
    write_matrix_csv,
)
from hncsel.application.run_writer import (
    RunResult,
    build_summary_lines,
    create_run,
    finalize_run,
)
from hncsel.config import SelectorConfig
from hncsel.domain.resource import ResourceObject
from hncsel.infrastructure.kubectl_client import all_namespace_labels, namespace_labels
from hncsel.infrastructure.manifest_loader import load_manifests, load_single_manifest

logger = logging.getLogger(__name__)

HNC_TREE_DEPTH_SUFFIX = ".tree.hnc.x-k8s.io/depth"


def parse_label_args(values: Sequence[str]) -> dict[str, str]:
    """Parse repeated `key=value` CLI arguments into a label map."""
    labels: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected key=value label, got {item!r}")
        labels[key.strip()] = value.strip()
    return labels


def warn_on_depth_suffix_mismatch(label_sets: Iterable[Mapping[str, str]], suffix: str) -> bool:
    """Log a warning when cluster labels use HNC depth keys but suffix differs."""
    if suffix == HNC_TREE_DEPTH_SUFFIX:
        return False
    for labels in label_sets:
        if any(key.endswith(HNC_TREE_DEPTH_SUFFIX) for key in labels):
            logger.warning(
                "namespace labels use %r depth keys but the tree depth suffix is %r; "
                "set HNCSEL_TREE_DEPTH_SUFFIX=%s for tree selectors to match",
                HNC_TREE_DEPTH_SUFFIX,
                suffix,
                HNC_TREE_DEPTH_SUFFIX,
            )
            return True
    return False


def execute_propagation_check(
    object_file: Path,
    *,
    config: SelectorConfig,
    ns_labels: Mapping[str, str] | None = None,
    namespace: str | None = None,
) -> CheckResult:
    """Decide propagation of the object in object_file.

    Labels fetched for `namespace` are overlaid with the literal `ns_labels`.
    """
    inst = ResourceObject.from_manifest(load_single_manifest(object_file))
    labels: dict[str, str] = {}
    if namespace:
        fetched = namespace_labels(namespace, kubeconfig=config.kubeconfig)
        warn_on_depth_suffix_mismatch([fetched], config.tree_depth_suffix)
        labels.update(fetched)
    labels.update(ns_labels or {})
    return check_object(config.engine(), inst, labels, namespace=namespace)


def execute_directive_validation(
    object_file: Path, *, config: SelectorConfig
) -> list[DirectiveSummary]:
    """Validate directives of every object in object_file."""
    engine = config.engine()
    return [
        summarize_directives(engine, ResourceObject.from_manifest(manifest))
        for manifest in load_manifests(object_file)
    ]


def _select_namespaces(
    available: Mapping[str, Mapping[str, str]], wanted: Sequence[str]
) -> dict[str, Mapping[str, str]]:
    if not wanted:
        return dict(available)
    missing = sorted(set(wanted) - set(available))
    if missing:
        raise ValueError(f"namespaces not found: {', '.join(missing)}")
    return {name: available[name] for name in wanted}


def execute_propagation_matrix(
    objects_file: Path,
    *,
    config: SelectorConfig,
    namespaces: Sequence[str] = (),
    reports_root: str | None = None,
) -> tuple[list[MatrixRow], RunResult | None]:
    """Evaluate every object in objects_file against cluster namespaces.

    Returns the rows and, when reports_root is given, the persisted run.
    """
    objects = [ResourceObject.from_manifest(m) for m in load_manifests(objects_file)]
    selected = _select_namespaces(
        all_namespace_labels(kubeconfig=config.kubeconfig), namespaces
    )
    warn_on_depth_suffix_mismatch(selected.values(), config.tree_depth_suffix)
    rows = build_matrix(config.engine(), objects, selected)
    if reports_root is None:
        return rows, None

    inputs = {
        "objects_file": str(objects_file),
        "namespaces": ",".join(sorted(selected)),
        "tree_depth_suffix": config.tree_depth_suffix,
    }
    ctx = create_run("propagation-matrix", inputs=inputs, reports_root=reports_root)
    write_matrix_csv(rows, ctx.output_dir)
    findings = sorted(
        {f"{row.object_ref}: {row.reason}" for row in rows if row.verdict == VERDICT_REJECTED}
    )
    summary = build_summary_lines(
        title="Propagation Matrix",
        inputs=inputs,
        counts=verdict_counts(rows),
        findings=findings,
    )
    run = finalize_run(ctx, status="success", summary_lines=summary)
    return rows, run
