"""Tests for propagation check use-cases."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from hncsel.application import (
    execute_directive_validation,
    execute_propagation_check,
    execute_propagation_matrix,
    parse_label_args,
)
from hncsel.config import SelectorConfig

_MODULE = "hncsel.application.propagation_check_use_case"


def _write_object(path: Path, annotations: dict[str, str]) -> Path:
    path.write_text(
        json.dumps(
            {
                "apiVersion": "v1",
                "kind": "ConfigMap",
                "metadata": {"name": "cfg", "annotations": annotations},
            }
        ),
        encoding="utf-8",
    )
    return path


def test_parse_label_args() -> None:
    assert parse_label_args(["env=prod", "team-a-depth=0", "empty="]) == {
        "env": "prod",
        "team-a-depth": "0",
        "empty": "",
    }
    with pytest.raises(ValueError):
        parse_label_args(["env"])


def test_check_with_literal_labels(tmp_path: Path) -> None:
    path = _write_object(tmp_path / "cfg.json", {"propagate.hnc.x-k8s.io/select": "env=prod"})
    result = execute_propagation_check(path, config=SelectorConfig(), ns_labels={"env": "prod"})
    assert result.decision.verdict
    assert result.selector_exists


def test_check_overlays_namespace_labels(tmp_path: Path) -> None:
    path = _write_object(tmp_path / "cfg.json", {"propagate.hnc.x-k8s.io/treeSelect": "team-a"})
    with patch(f"{_MODULE}.namespace_labels", return_value={"team-b-depth": "0"}) as fetch:
        result = execute_propagation_check(
            path,
            config=SelectorConfig(),
            ns_labels={"team-a-depth": "1"},
            namespace="team-b",
        )
    fetch.assert_called_once_with("team-b", kubeconfig=None)
    assert result.decision.verdict


def test_validation_reports_every_object(tmp_path: Path) -> None:
    path = tmp_path / "objects.yaml"
    path.write_text(
        "kind: ConfigMap\nmetadata:\n  name: a\n"
        "---\n"
        "kind: ConfigMap\nmetadata:\n  name: b\n  annotations:\n"
        "    propagate.hnc.x-k8s.io/all: 'true'\n",
        encoding="utf-8",
    )
    summaries = execute_directive_validation(path, config=SelectorConfig())
    assert [s.selector_exists for s in summaries] == [False, True]


def test_matrix_persists_report(tmp_path: Path) -> None:
    path = _write_object(tmp_path / "cfg.json", {"propagate.hnc.x-k8s.io/treeSelect": "team-a"})
    namespaces = {"team-a": {"team-a-depth": "0"}, "team-b": {"team-b-depth": "0"}}
    with patch(f"{_MODULE}.all_namespace_labels", return_value=namespaces):
        rows, run = execute_propagation_matrix(
            path, config=SelectorConfig(), reports_root=str(tmp_path / "reports")
        )
    assert [r.verdict for r in rows] == ["propagate", "skip"]
    assert run is not None
    assert (run.output_dir / "propagation_matrix.csv").exists()
    assert "## Verdicts" in run.summary_path.read_text(encoding="utf-8")


def test_matrix_without_report(tmp_path: Path) -> None:
    path = _write_object(tmp_path / "cfg.json", {})
    with patch(f"{_MODULE}.all_namespace_labels", return_value={"a": {}, "b": {}}):
        rows, run = execute_propagation_matrix(
            path, config=SelectorConfig(), namespaces=["b"]
        )
    assert run is None
    assert [r.namespace for r in rows] == ["b"]


def test_matrix_unknown_namespace(tmp_path: Path) -> None:
    path = _write_object(tmp_path / "cfg.json", {})
    with (
        patch(f"{_MODULE}.all_namespace_labels", return_value={"a": {}}),
        pytest.raises(ValueError, match="missing"),
    ):
        execute_propagation_matrix(path, config=SelectorConfig(), namespaces=["missing"])


def test_check_warns_on_hnc_depth_labels(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write_object(tmp_path / "cfg.json", {"propagate.hnc.x-k8s.io/treeSelect": "team-a"})
    fetched = {"team-a.tree.hnc.x-k8s.io/depth": "1"}
    with (
        patch(f"{_MODULE}.namespace_labels", return_value=fetched),
        caplog.at_level("WARNING", logger=_MODULE),
    ):
        result = execute_propagation_check(path, config=SelectorConfig(), namespace="team-b")
    assert not result.decision.verdict
    assert "HNCSEL_TREE_DEPTH_SUFFIX" in caplog.text


def test_matrix_no_warning_with_hnc_suffix(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = _write_object(tmp_path / "cfg.json", {"propagate.hnc.x-k8s.io/treeSelect": "team-a"})
    namespaces = {"team-a": {"team-a.tree.hnc.x-k8s.io/depth": "0"}}
    config = SelectorConfig(tree_depth_suffix=".tree.hnc.x-k8s.io/depth")
    with (
        patch(f"{_MODULE}.all_namespace_labels", return_value=namespaces),
        caplog.at_level("WARNING", logger=_MODULE),
    ):
        rows, _ = execute_propagation_matrix(path, config=config)
    assert [r.verdict for r in rows] == ["propagate"]
    assert "HNCSEL_TREE_DEPTH_SUFFIX" not in caplog.text


def test_matrix_warns_on_default_suffix(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write_object(tmp_path / "cfg.json", {})
    namespaces = {"team-a": {"team-a.tree.hnc.x-k8s.io/depth": "0"}}
    with (
        patch(f"{_MODULE}.all_namespace_labels", return_value=namespaces),
        caplog.at_level("WARNING", logger=_MODULE),
    ):
        execute_propagation_matrix(path, config=SelectorConfig())
    assert "HNCSEL_TREE_DEPTH_SUFFIX" in caplog.text
