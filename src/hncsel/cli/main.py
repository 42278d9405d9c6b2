"""CLI entrypoint for hnc propagation selector tooling."""

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from hncsel.application import (
    execute_directive_validation,
    execute_propagation_check,
    execute_propagation_matrix,
    parse_label_args,
)
from hncsel.application.stdout_renderer import (
    render_check_result,
    render_directive_summaries,
    render_matrix,
)
from hncsel.config import load_config

app = typer.Typer(
    name="hncsel",
    help="Hierarchical namespace propagation selector toolkit",
    no_args_is_help=True,
    add_completion=False,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


def _resolve_version() -> str:
    """Return installed package version or local fallback."""
    try:
        return package_version("hnc-selectors")
    except PackageNotFoundError:
        return "0.1.0"


def configure_logging(*, verbose: bool = False) -> None:
    """Route library logging to stderr through rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)
    logging.getLogger("hncsel").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every decision step.",
    ),
) -> None:
    """Handle global CLI options."""
    if version:
        console.print(f"hnc-selectors {_resolve_version()}")
        raise typer.Exit(code=0)
    configure_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=0)


def _handle_error(exc: Exception) -> None:
    """Convert domain exceptions to CLI exit codes."""
    if isinstance(exc, ValueError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    if isinstance(exc, RuntimeError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    raise exc


@app.command("check")
def check_command(
    object_file: Path = typer.Argument(
        ...,
        help="JSON or YAML file holding the object to evaluate.",
    ),
    ns_label: list[str] = typer.Option(
        [],
        "--ns-label",
        "-l",
        help="Destination namespace label as key=value (repeatable).",
    ),
    namespace: str | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help=(
            "Read destination labels from this namespace via kubectl. HNC clusters "
            "label depth as <ns>.tree.hnc.x-k8s.io/depth; set HNCSEL_TREE_DEPTH_SUFFIX to match."
        ),
    ),
) -> None:
    """Decide whether an object propagates into a namespace."""
    try:
        result = execute_propagation_check(
            object_file,
            config=load_config(),
            ns_labels=parse_label_args(ns_label),
            namespace=namespace,
        )
        render_check_result(console, result)
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


@app.command("validate")
def validate_command(
    object_file: Path = typer.Argument(
        ...,
        help="JSON or YAML file holding one or more objects.",
    ),
) -> None:
    """Parse every propagation directive; fail on malformed ones."""
    try:
        summaries = execute_directive_validation(object_file, config=load_config())
        render_directive_summaries(console, summaries)
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


@app.command("matrix")
def matrix_command(
    objects_file: Path = typer.Argument(
        ...,
        help="JSON or YAML file (List or multi-document) of objects.",
    ),
    namespaces: list[str] = typer.Option(
        [],
        "--namespace",
        "-n",
        help="Limit to these namespaces (repeatable). Default: all.",
    ),
    report: str | None = typer.Option(
        None,
        "--report",
        "-r",
        help=(
            "Persist report files under this directory. "
            "If omitted, prints stdout preview only."
        ),
    ),
) -> None:
    """Evaluate objects against every cluster namespace.

    Prints rich preview by default; use `--report/-r` to persist artifacts.
    Set HNCSEL_TREE_DEPTH_SUFFIX=.tree.hnc.x-k8s.io/depth for tree selectors
    to match the depth labels HNC writes.
    """
    try:
        rows, run = execute_propagation_matrix(
            objects_file,
            config=load_config(),
            namespaces=namespaces,
            reports_root=report,
        )
        render_matrix(console, rows)
        if run is not None:
            console.print(f"[green]Run:[/green] {run.output_dir}")
            console.print(f"[green]Manifest:[/green] {run.manifest_path}")
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


def main() -> None:
    """Project entrypoint for `hncsel` script."""
    app()


if __name__ == "__main__":
    main()
