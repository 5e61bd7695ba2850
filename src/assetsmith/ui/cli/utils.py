"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import typer

from assetsmith.core import (
    AssetResolver,
    AssetsConfig,
    Environment,
    SiteSettings,
    load_config_file,
    resolve_config,
)

from .diagnostics import CliEmitter


DEFAULT_CONFIG_NAME = "_config.yml"


def load_site(
    site_dir: Path,
    *,
    config_path: Path | None = None,
    environment: str | None = None,
    destination: Path | None = None,
) -> tuple[AssetsConfig, SiteSettings]:
    """Read the site configuration and resolve the assets section."""
    root = site_dir.resolve()
    candidate = config_path or root / DEFAULT_CONFIG_NAME
    if config_path is not None or candidate.exists():
        assets_section, site_section = load_config_file(candidate)
    else:
        assets_section, site_section = {}, {}
    if destination is not None:
        site_section["destination"] = str(destination)

    env = Environment.parse(environment) if environment else Environment.from_env()
    config = resolve_config(env, assets_section)
    site = SiteSettings.from_mapping(site_section, root=root, environment=env)
    return config, site


def build_resolver(
    site_dir: Path,
    *,
    config_path: Path | None = None,
    environment: str | None = None,
    destination: Path | None = None,
) -> AssetResolver:
    config, site = load_site(
        site_dir,
        config_path=config_path,
        environment=environment,
        destination=destination,
    )
    return AssetResolver(config, site, emitter=CliEmitter())


def parse_tag_arguments(values: Iterable[str] | None) -> dict[str, Any]:
    """Parse ``key=value`` pairs and bare ``@flag`` switches."""
    arguments: dict[str, Any] = {}
    for raw in values or ():
        entry = raw.strip()
        if not entry:
            continue
        if "=" in entry:
            key, value = entry.split("=", 1)
            key = key.strip()
            if not key:
                raise typer.BadParameter(f"Invalid argument '{raw}', expected KEY=VALUE.")
            arguments[key] = value.strip()
        else:
            arguments[entry] = True
    return arguments


__all__ = ["build_resolver", "load_site", "parse_tag_arguments"]
