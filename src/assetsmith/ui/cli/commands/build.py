"""Implementation of the `assetsmith build` and `assetsmith clean` commands."""

from __future__ import annotations

from pathlib import Path

from rich import box
from rich.table import Table
import typer

from assetsmith.core import AssetPipelineError

from ..state import emit_error, get_cli_state
from ..utils import build_resolver


def build(
    references: list[str] = typer.Argument(
        None,
        metavar="REFERENCE...",
        help="Logical asset paths to build in addition to the configured precompile list.",
    ),
    site_dir: Path = typer.Option(
        Path("."),
        "--site-dir",
        "-s",
        help="Site root holding the asset source directories.",
        file_okay=False,
        dir_okay=True,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML site configuration (defaults to <site-dir>/_config.yml).",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    destination: Path | None = typer.Option(
        None,
        "--destination",
        "-d",
        help="Site output directory (overrides the configured destination).",
    ),
    environment: str | None = typer.Option(
        None,
        "--env",
        "-e",
        help="Build environment: development or production.",
    ),
    clean_outputs: bool = typer.Option(
        False,
        "--clean/--no-clean",
        help="Remove outputs that this build replaced.",
    ),
    jobs: int | None = typer.Option(
        None,
        "--jobs",
        "-j",
        min=1,
        help="Number of worker threads used to resolve assets.",
    ),
) -> None:
    """Compile precompiled and requested assets, then write the manifest."""
    state = get_cli_state()
    state.events.clear()
    try:
        resolver = build_resolver(
            site_dir,
            config_path=config_path,
            environment=environment,
            destination=destination,
        )
        assets = resolver.precompile(max_workers=jobs)
        assets.extend(resolver.resolve_many(references or [], max_workers=jobs))
        manifest_path = resolver.finalize(clean=clean_outputs)
    except AssetPipelineError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    table = Table(title="Built assets", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("Asset", style="magenta")
    table.add_column("Type", style="green")
    table.add_column("URL")
    for asset in assets:
        table.add_row(asset.logical_path, asset.content_type, resolver.url_for(asset))
    state.console.print(table)
    state.console.print(f"Manifest: {manifest_path}", markup=False)
    written = len(state.consume_events("asset_write"))
    reused = len(state.consume_events("asset_reuse"))
    state.console.print(f"Wrote {written} files, reused {reused} unchanged", markup=False)


def clean(
    site_dir: Path = typer.Option(
        Path("."),
        "--site-dir",
        "-s",
        help="Site root holding the asset source directories.",
        file_okay=False,
        dir_okay=True,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML site configuration (defaults to <site-dir>/_config.yml).",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    destination: Path | None = typer.Option(
        None,
        "--destination",
        "-d",
        help="Site output directory (overrides the configured destination).",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="List stale outputs without deleting them.",
    ),
) -> None:
    """Delete build outputs that later builds replaced."""
    state = get_cli_state()
    try:
        resolver = build_resolver(site_dir, config_path=config_path, destination=destination)
        removed = resolver.clean(dry_run=dry_run)
    except AssetPipelineError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    prefix = "[dry-run] would remove" if dry_run else "Removed"
    state.console.print(f"{prefix} {len(removed)} stale outputs", markup=False)
    for path in removed:
        state.console.print(f"  - {path}", markup=False, highlight=False)


__all__ = ["build", "clean"]
