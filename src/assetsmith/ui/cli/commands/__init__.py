"""CLI command implementations exposed via `assetsmith.ui.cli`."""

from __future__ import annotations

from .build import build, clean
from .inspect import manifest, tag, url


__all__ = ["build", "clean", "manifest", "tag", "url"]
