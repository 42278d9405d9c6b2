"""Tests for resource object construction."""

from __future__ import annotations

import pytest

from hncsel.domain.resource import ResourceObject, group_from_api_version


def test_group_from_api_version() -> None:
    assert group_from_api_version("v1") == ""
    assert group_from_api_version("apps/v1") == "apps"
    assert group_from_api_version("rbac.authorization.k8s.io/v1") == "rbac.authorization.k8s.io"
    assert group_from_api_version("") == ""


def test_from_manifest() -> None:
    inst = ResourceObject.from_manifest(
        {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {
                "name": "kube-root-ca.crt",
                "annotations": {"a": "1"},
                "labels": {"l": "2"},
            },
        }
    )
    assert inst.name == "kube-root-ca.crt"
    assert inst.kind == "ConfigMap"
    assert inst.group == ""
    assert inst.annotation("a") == "1"
    assert inst.annotation("missing") == ""
    assert dict(inst.labels) == {"l": "2"}


def test_from_manifest_with_null_metadata_maps() -> None:
    inst = ResourceObject.from_manifest(
        {"kind": "Role", "apiVersion": "rbac.authorization.k8s.io/v1",
         "metadata": {"name": "r", "annotations": None, "labels": None}}
    )
    assert inst.group == "rbac.authorization.k8s.io"
    assert dict(inst.annotations) == {}
    assert dict(inst.labels) == {}


def test_metadata_is_read_only() -> None:
    source = {"a": "1"}
    inst = ResourceObject(name="x", kind="Secret", annotations=source)
    source["b"] = "2"
    assert "b" not in inst.annotations
    with pytest.raises(TypeError):
        inst.annotations["c"] = "3"  # type: ignore[index]
