"""Commands that resolve a single reference or inspect the manifest."""

from __future__ import annotations

from pathlib import Path

from rich import box
from rich.table import Table
import typer

from assetsmith.core import AssetPipelineError, AssetTag

from ..state import emit_error, get_cli_state
from ..utils import build_resolver, parse_tag_arguments


_SITE_DIR = typer.Option(
    Path("."),
    "--site-dir",
    "-s",
    help="Site root holding the asset source directories.",
    file_okay=False,
    dir_okay=True,
)
_CONFIG = typer.Option(
    None,
    "--config",
    "-c",
    help="YAML site configuration (defaults to <site-dir>/_config.yml).",
    exists=True,
    dir_okay=False,
    readable=True,
)
_ENVIRONMENT = typer.Option(
    None,
    "--env",
    "-e",
    help="Build environment: development or production.",
)


def _render(
    reference: str,
    arguments: dict[str, object],
    *,
    site_dir: Path,
    config_path: Path | None,
    environment: str | None,
) -> str:
    try:
        resolver = build_resolver(site_dir, config_path=config_path, environment=environment)
        output = AssetTag(resolver).render(reference, arguments)
        resolver.finalize()
    except AssetPipelineError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    return output


def url(
    reference: str = typer.Argument(..., metavar="REFERENCE", help="Asset reference."),
    site_dir: Path = _SITE_DIR,
    config_path: Path | None = _CONFIG,
    environment: str | None = _ENVIRONMENT,
) -> None:
    """Print the public URL of an asset."""
    output = _render(
        reference,
        {"path": True},
        site_dir=site_dir,
        config_path=config_path,
        environment=environment,
    )
    typer.echo(output)


def tag(
    reference: str = typer.Argument(..., metavar="REFERENCE", help="Asset reference."),
    arguments: list[str] | None = typer.Option(
        None,
        "--arg",
        "-a",
        help="Tag argument as KEY=VALUE, or a bare flag such as @inline. Repeatable.",
    ),
    site_dir: Path = _SITE_DIR,
    config_path: Path | None = _CONFIG,
    environment: str | None = _ENVIRONMENT,
) -> None:
    """Render an asset tag and print the resulting markup."""
    output = _render(
        reference,
        parse_tag_arguments(arguments),
        site_dir=site_dir,
        config_path=config_path,
        environment=environment,
    )
    typer.echo(output)


def manifest(
    site_dir: Path = _SITE_DIR,
    config_path: Path | None = _CONFIG,
) -> None:
    """Print the entries recorded in the asset manifest."""
    state = get_cli_state()
    try:
        resolver = build_resolver(site_dir, config_path=config_path)
    except AssetPipelineError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    table = Table(
        title=f"Manifest: {resolver.manifest_path}",
        box=box.SQUARE,
        header_style="bold cyan",
    )
    table.add_column("Asset", style="magenta")
    table.add_column("Output", style="green")
    table.add_column("Gzip")
    table.add_column("Integrity")

    entries = resolver.manifest.entries()
    if not entries:
        table.add_row("-", "-", "-", "No assets recorded")
    for entry in entries:
        table.add_row(
            entry.logical_path,
            entry.output_path,
            entry.compressed_path or "-",
            entry.integrity or "-",
        )
    state.console.print(table)


__all__ = ["manifest", "tag", "url"]
