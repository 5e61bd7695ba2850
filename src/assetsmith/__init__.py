"""Primary public API for assetsmith."""

from __future__ import annotations

from assetsmith.core import (
    DEFAULT_SOURCES,
    Asset,
    AssetNotFoundError,
    AssetPipelineError,
    AssetResolver,
    AssetsConfig,
    AssetTag,
    Environment,
    InvalidCombinationError,
    Manifest,
    ManifestEntry,
    ResolutionCallbacks,
    SiteSettings,
    TagArguments,
    build_url,
    resolve_config,
)
from assetsmith.version import get_version


__version__ = get_version()

__all__ = [
    "DEFAULT_SOURCES",
    "Asset",
    "AssetNotFoundError",
    "AssetPipelineError",
    "AssetResolver",
    "AssetTag",
    "AssetsConfig",
    "Environment",
    "InvalidCombinationError",
    "Manifest",
    "ManifestEntry",
    "ResolutionCallbacks",
    "SiteSettings",
    "TagArguments",
    "__version__",
    "build_url",
    "get_version",
    "resolve_config",
]
