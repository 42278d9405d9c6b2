"""Persist report runs as a directory with summary.md and manifest.json."""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class RunResult:
    """Files written by a finished run."""

    run_id: str
    capability: str
    output_dir: Path
    manifest_path: Path
    summary_path: Path
    output_files: tuple[Path, ...]


@dataclass(frozen=True)
class RunContext:
    """Context of an in-progress run."""

    run_id: str
    capability: str
    output_dir: Path
    started_at: str
    inputs: dict[str, Any]


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def create_run(
    capability: str,
    *,
    inputs: dict[str, Any],
    reports_root: str = "reports",
) -> RunContext:
    """Create `<reports_root>/<capability>/<run_id>` and return its context."""
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(reports_root) / capability / run_id
    output_dir.mkdir(parents=True, exist_ok=True)
    return RunContext(
        run_id=run_id,
        capability=capability,
        output_dir=output_dir,
        started_at=_utc_now_iso(),
        inputs=inputs,
    )


def list_output_files(output_dir: Path) -> tuple[Path, ...]:
    """List report artifacts under output directory."""
    return tuple(sorted(p for p in output_dir.rglob("*") if p.is_file()))


def build_summary_lines(
    *,
    title: str,
    inputs: dict[str, Any],
    counts: dict[str, int],
    findings: list[str],
) -> list[str]:
    """Build summary markdown with inputs, verdict counts and findings."""
    lines = [f"# {title}", "", "## Inputs"]
    if inputs:
        lines.extend(f"- `{key}`: `{inputs[key]}`" for key in sorted(inputs))
    else:
        lines.append("- (none)")

    lines.extend(["", "## Verdicts"])
    lines.extend(f"- `{name}`: {count}" for name, count in sorted(counts.items()))

    lines.extend(["", "## Findings"])
    if findings:
        lines.extend(f"- {item}" for item in findings)
    else:
        lines.append("- None.")
    return lines


def finalize_run(
    ctx: RunContext,
    *,
    status: str,
    summary_lines: list[str],
    error: str | None = None,
) -> RunResult:
    """Write summary.md and manifest.json next to the run artifacts."""
    summary_path = ctx.output_dir / "summary.md"
    summary_path.write_text("\n".join(summary_lines) + "\n", encoding="utf-8")

    manifest_path = ctx.output_dir / "manifest.json"
    outputs = tuple(p for p in list_output_files(ctx.output_dir) if p != manifest_path)
    manifest_payload = {
        "run_id": ctx.run_id,
        "capability": ctx.capability,
        "started_at": ctx.started_at,
        "finished_at": _utc_now_iso(),
        "status": status,
        "inputs": ctx.inputs,
        "outputs": [str(p.relative_to(ctx.output_dir)) for p in outputs]
        + ["manifest.json"],
        "error": error,
    }
    manifest_path.write_text(
        json.dumps(manifest_payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )

    return RunResult(
        run_id=ctx.run_id,
        capability=ctx.capability,
        output_dir=ctx.output_dir,
        manifest_path=manifest_path,
        summary_path=summary_path,
        output_files=outputs + (manifest_path,),
    )
