"""Tests for manifest file loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from hncsel.infrastructure.manifest_loader import (
    ManifestError,
    load_manifests,
    load_single_manifest,
)


def test_load_json_list(tmp_path: Path) -> None:
    path = tmp_path / "objects.json"
    path.write_text(
        json.dumps(
            {
                "apiVersion": "v1",
                "kind": "List",
                "items": [
                    {"kind": "ConfigMap", "metadata": {"name": "a"}},
                    {"kind": "Secret", "metadata": {"name": "b"}},
                ],
            }
        ),
        encoding="utf-8",
    )
    assert [m["metadata"]["name"] for m in load_manifests(path)] == ["a", "b"]


def test_load_multi_document_yaml(tmp_path: Path) -> None:
    path = tmp_path / "objects.yaml"
    path.write_text(
        "kind: ConfigMap\nmetadata:\n  name: a\n---\n---\nkind: Role\nmetadata:\n  name: b\n",
        encoding="utf-8",
    )
    assert [m["kind"] for m in load_manifests(path)] == ["ConfigMap", "Role"]


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("kind: [unclosed\n", encoding="utf-8")
    with pytest.raises(ManifestError):
        load_manifests(path)


def test_non_mapping_document(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ManifestError, match="expected a mapping"):
        load_manifests(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        load_manifests(tmp_path / "missing.yaml")


def test_single_manifest_count(tmp_path: Path) -> None:
    path = tmp_path / "two.yaml"
    path.write_text("kind: A\n---\nkind: B\n", encoding="utf-8")
    with pytest.raises(ManifestError, match="exactly one"):
        load_single_manifest(path)
    assert isinstance(ManifestError("x"), ValueError)
