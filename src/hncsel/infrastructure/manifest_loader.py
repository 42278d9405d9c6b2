"""Load Kubernetes manifests from local JSON or YAML files."""

import json
from pathlib import Path
from typing import Any

import yaml


class ManifestError(ValueError):
    """Raised when a manifest file cannot be read as Kubernetes objects."""


def _flatten(documents: list[Any], source: Path) -> list[dict[str, Any]]:
    objects: list[dict[str, Any]] = []
    for doc in documents:
        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise ManifestError(f"{source}: expected a mapping, got {type(doc).__name__}")
        if "items" in doc and str(doc.get("kind", "")).endswith("List"):
            objects.extend(_flatten(list(doc["items"] or []), source))
            continue
        objects.append(doc)
    return objects


def load_manifests(path: Path) -> list[dict[str, Any]]:
    """Read every object from a JSON or (multi-document) YAML file.

    `kind: List` wrappers, as printed by `kubectl get -o json`, are unpacked.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"cannot read {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            documents = [json.loads(text)]
        else:
            documents = list(yaml.safe_load_all(text))
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"{path}: {exc}") from exc
    return _flatten(documents, path)


def load_single_manifest(path: Path) -> dict[str, Any]:
    """Read a file that must contain exactly one object."""
    objects = load_manifests(path)
    if len(objects) != 1:
        raise ManifestError(f"{path}: expected exactly one object, found {len(objects)}")
    return objects[0]
