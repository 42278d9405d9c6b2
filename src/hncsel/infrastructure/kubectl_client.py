"""Shared kubectl execution helpers."""

import json
import shlex
import subprocess
from pathlib import Path
from typing import Any, cast


class KubectlError(RuntimeError):
    """Raised when kubectl command execution fails."""


def _run_kubectl(
    command: str,
    *,
    append_json_output: bool,
    kubeconfig: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    args = ["kubectl", *shlex.split(command)]
    if kubeconfig is not None:
        args.extend(["--kubeconfig", str(kubeconfig)])
    if append_json_output:
        args.extend(["-o", "json"])
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.strip() if exc.stderr else str(exc)
        raise KubectlError(f"kubectl command failed: {stderr}") from exc
    except FileNotFoundError as exc:
        raise KubectlError("kubectl executable not found on PATH") from exc


def kubectl_json(
    command: str,
    *,
    append_json_output: bool = True,
    kubeconfig: Path | None = None,
) -> dict[str, Any]:
    """Execute kubectl command and parse JSON output."""
    result = _run_kubectl(
        command, append_json_output=append_json_output, kubeconfig=kubeconfig
    )
    try:
        return cast(dict[str, Any], json.loads(result.stdout) if result.stdout else {})
    except json.JSONDecodeError as exc:
        raise KubectlError(f"kubectl returned invalid JSON: {exc}") from exc


def namespace_labels(
    namespace: str, *, kubeconfig: Path | None = None
) -> dict[str, str]:
    """Return the labels of one namespace."""
    payload = kubectl_json(
        f"get namespace {shlex.quote(namespace)}", kubeconfig=kubeconfig
    )
    return dict(payload.get("metadata", {}).get("labels") or {})


def all_namespace_labels(*, kubeconfig: Path | None = None) -> dict[str, dict[str, str]]:
    """Return labels of every namespace keyed by namespace name."""
    payload = kubectl_json("get namespaces", kubeconfig=kubeconfig)
    return {
        item["metadata"]["name"]: dict(item["metadata"].get("labels") or {})
        for item in payload.get("items", [])
    }
