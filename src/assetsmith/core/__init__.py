"""Core asset resolution, digest, manifest and URL primitives."""

from __future__ import annotations

from .arguments import TagArguments
from .assets import Asset
from .compiler import CachingCompiler, Compiler, PassthroughCompiler, build_compiler
from .config import (
    DEFAULT_SOURCES,
    AssetsConfig,
    Environment,
    SiteSettings,
    load_config_file,
    resolve_config,
)
from .exceptions import (
    AssetNotFoundError,
    AssetPipelineError,
    ConfigurationError,
    InvalidCombinationError,
    InvalidExternalError,
    ManifestError,
    MixedArgumentError,
    UnreadableSourceError,
)
from .manifest import Manifest, ManifestEntry
from .resolver import AssetResolver, ResolutionCallbacks
from .tag import AssetTag
from .urls import build_url, in_cache_dir, in_destination_dir, make_https, strip_slashes


__all__ = [
    "DEFAULT_SOURCES",
    "Asset",
    "AssetNotFoundError",
    "AssetPipelineError",
    "AssetResolver",
    "AssetTag",
    "AssetsConfig",
    "CachingCompiler",
    "Compiler",
    "ConfigurationError",
    "Environment",
    "InvalidCombinationError",
    "InvalidExternalError",
    "Manifest",
    "ManifestEntry",
    "ManifestError",
    "MixedArgumentError",
    "PassthroughCompiler",
    "ResolutionCallbacks",
    "SiteSettings",
    "TagArguments",
    "UnreadableSourceError",
    "build_compiler",
    "build_url",
    "in_cache_dir",
    "in_destination_dir",
    "load_config_file",
    "make_https",
    "resolve_config",
    "strip_slashes",
]
