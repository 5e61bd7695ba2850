"""Configuration models used by the asset pipeline.

AssetsConfig

`digest` (`bool`)
: Emit digested file names (`app-0123abcd.css`) in URLs and build output.
  Digest paths are always computed and recorded in the manifest.

`source_maps` (`bool`)
: Ask the compiler collaborator for source maps. Enabled in development only.

`subresource_integrity` (`bool`)
: Publish `integrity` attributes for stylesheets and scripts.

`destination` (`str | None`)
: Directory under the site output where assets are written, and the URL
  segment they are served from.

`compression` (`bool`)
: Let the compiler collaborator minify its output.

`gzip` (`bool`)
: Write a `.gz` sibling next to every compiled asset.

`caching` (`CachingConfig`)
: Compiler cache settings (`enabled`, `path`, `type`).

`precompile` (`list[str]`)
: Logical paths always built, whether or not a page references them.

`cdn` (`CdnConfig`)
: CDN settings. `url` switches production URLs to absolute CDN URLs;
  `baseurl` and `destination` opt the matching segments back in.

`sources` (`list[str]`)
: Directories searched for assets, relative to the site root. User entries
  are searched first; the built-in directories are always appended.

`manifest` (`str`)
: File name of the manifest, stored inside the asset destination.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, MutableMapping
import copy
from dataclasses import dataclass
from enum import Enum
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
import yaml

from .exceptions import ConfigurationError


ENVIRONMENT_VARIABLES = ("ASSETSMITH_ENV", "JEKYLL_ENV")

DEFAULT_SOURCES: tuple[str, ...] = (
    "assets/css",
    "assets/fonts",
    "assets/images",
    "assets/videos",
    "assets/javascript",
    "assets/video",
    "assets/image",
    "assets/img",
    "assets/js",
    "_assets/css",
    "_assets/fonts",
    "_assets/images",
    "_assets/videos",
    "_assets/javascript",
    "_assets/video",
    "_assets/image",
    "_assets/img",
    "_assets/js",
    "css",
    "fonts",
    "images",
    "videos",
    "javascript",
    "video",
    "image",
    "img",
    "js",
)


class Environment(str, Enum):
    """Build environment selecting the default configuration set."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str | Environment | None) -> Environment:
        """Return the environment named by ``value``; anything but production is development."""
        if isinstance(value, Environment):
            return value
        if value is not None and value.strip().lower() == cls.PRODUCTION.value:
            return cls.PRODUCTION
        return cls.DEVELOPMENT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Environment:
        """Read the environment from ``ASSETSMITH_ENV`` or ``JEKYLL_ENV``."""
        source = os.environ if environ is None else environ
        for name in ENVIRONMENT_VARIABLES:
            value = source.get(name)
            if value:
                return cls.parse(value)
        return cls.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self is Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self is Environment.DEVELOPMENT


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_thaw(item) for item in value]
    return copy.deepcopy(value)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base`` recursively; lists and scalars are replaced."""
    merged: dict[str, Any] = _thaw(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = _thaw(value)
    return merged


_SHARED_DEFAULTS: dict[str, Any] = {
    "digest": False,
    "source_maps": True,
    "subresource_integrity": False,
    "destination": "/assets",
    "compression": True,
    "gzip": False,
    "caching": {
        "enabled": True,
        "path": ".assetsmith-cache/assets",
        "type": "file",
    },
    "precompile": [],
    "cdn": {
        "baseurl": False,
        "destination": False,
        "url": None,
    },
    "sources": list(DEFAULT_SOURCES),
    "manifest": ".assets-manifest.json",
}

DEVELOPMENT: Mapping[str, Any] = _freeze(_SHARED_DEFAULTS)
PRODUCTION: Mapping[str, Any] = _freeze(deep_merge(_SHARED_DEFAULTS, {"source_maps": False}))


def defaults_for(environment: Environment) -> Mapping[str, Any]:
    """Return the read-only defaults matching ``environment``."""
    return PRODUCTION if environment.is_production else DEVELOPMENT


_TRUTHY = {"1", "true", "yes", "on"}
_FALSEY = {"0", "false", "no", "off", ""}


def coerce_flag(value: Any) -> bool:
    """Read ``value`` as a boolean; strings such as ``"off"`` or ``"yes"`` count as words."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSEY:
            return False
    return bool(value)


def _optional_text(value: Any) -> str | None:
    if value is None or value is False or value == "":
        return None
    return str(value)


def _text_list(value: Any) -> tuple[str, ...]:
    if value is None or value is False:
        return ()
    if isinstance(value, str) or not isinstance(value, Iterable):
        value = (value,)
    elif isinstance(value, Mapping):
        value = tuple(value)
    return tuple(str(item) for item in value if item is not None and item != "")


class CachingConfig(BaseModel):
    """Compiler cache settings."""

    model_config = ConfigDict(extra="allow", frozen=True)

    enabled: bool = True
    path: str = ".assetsmith-cache/assets"
    type: str = "file"

    @field_validator("enabled", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("path", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any, info: ValidationInfo) -> str:
        text = _optional_text(value)
        return text if text is not None else cls.model_fields[info.field_name].default


class CdnConfig(BaseModel):
    """CDN rewrite settings."""

    model_config = ConfigDict(extra="allow", frozen=True)

    baseurl: bool = False
    destination: bool = False
    url: str | None = None

    @field_validator("baseurl", "destination", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_url(cls, value: Any) -> str | None:
        return _optional_text(value)


class AssetsConfig(BaseModel):
    """Resolved asset configuration for one build.

    Every field accepts loosely typed YAML: flags take ``"yes"``/``"off"``
    words, a bare string stands in for a list, ``false`` clears the
    destination, and a string ``cdn`` is read as its URL.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    digest: bool = False
    source_maps: bool = True
    subresource_integrity: bool = False
    destination: str | None = "/assets"
    compression: bool = True
    gzip: bool = False
    caching: CachingConfig = Field(default_factory=CachingConfig)
    precompile: tuple[str, ...] = ()
    cdn: CdnConfig = Field(default_factory=CdnConfig)
    sources: tuple[str, ...] = DEFAULT_SOURCES
    manifest: str = ".assets-manifest.json"

    @field_validator(
        "digest", "source_maps", "subresource_integrity", "compression", "gzip", mode="before"
    )
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("destination", mode="before")
    @classmethod
    def _coerce_destination(cls, value: Any) -> str | None:
        if value is True:
            return cls.model_fields["destination"].default
        return _optional_text(value)

    @field_validator("manifest", mode="before")
    @classmethod
    def _coerce_manifest(cls, value: Any) -> str:
        return _optional_text(value) or cls.model_fields["manifest"].default

    @field_validator("precompile", "sources", mode="before")
    @classmethod
    def _coerce_sequence(cls, value: Any) -> tuple[str, ...]:
        return _text_list(value)

    @field_validator("cdn", mode="before")
    @classmethod
    def _coerce_cdn(cls, value: Any) -> Any:
        if isinstance(value, CdnConfig | Mapping):
            return value
        url = _optional_text(value)
        return {"url": url} if isinstance(value, str) and url else {}

    @field_validator("caching", mode="before")
    @classmethod
    def _coerce_caching(cls, value: Any) -> Any:
        if isinstance(value, CachingConfig | Mapping):
            return value
        if isinstance(value, bool | str):
            return {"enabled": coerce_flag(value)}
        return {}


@dataclass(frozen=True, slots=True)
class SiteSettings:
    """Host site values the pipeline needs: where it lives and how it is served."""

    root: Path
    destination: Path
    baseurl: str | None = None
    environment: Environment = Environment.DEVELOPMENT

    @classmethod
    def from_mapping(
        cls,
        site: Mapping[str, Any],
        *,
        root: Path,
        environment: Environment | str | None = None,
    ) -> SiteSettings:
        """Build settings from a host configuration mapping (`destination`, `baseurl`)."""
        destination = Path(site.get("destination") or "_site")
        if not destination.is_absolute():
            destination = root / destination
        env = Environment.from_env() if environment is None else Environment.parse(environment)
        baseurl = site.get("baseurl")
        return cls(
            root=root,
            destination=destination,
            baseurl=str(baseurl) if baseurl else None,
            environment=env,
        )


def normalise_keys(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``mapping`` with dashed keys rewritten with underscores."""
    normalised: dict[str, Any] = {}
    for key, value in mapping.items():
        name = str(key).replace("-", "_")
        normalised[name] = normalise_keys(value) if isinstance(value, Mapping) else value
    return normalised


def merge_sources(theirs: Any, ours: Any) -> list[str]:
    """Return user sources followed by every built-in source not already declared."""
    if theirs is None:
        theirs = []
    elif isinstance(theirs, str):
        theirs = [theirs]
    merged: list[str] = []
    for entry in [*theirs, *ours]:
        if entry is None:
            continue
        entry = str(entry)
        if entry not in merged:
            merged.append(entry)
    return merged


def resolve_config(
    environment: Environment | str | None = None,
    user_config: Mapping[str, Any] | None = None,
    *,
    before_merge: Callable[[MutableMapping[str, Any]], None] | None = None,
) -> AssetsConfig:
    """Merge the environment defaults with ``user_config`` into an ``AssetsConfig``.

    ``before_merge`` receives a mutable copy of the defaults before the user
    mapping is applied. Built-in sources are restored after the merge so user
    configuration can only add search directories.
    """
    env = Environment.from_env() if environment is None else Environment.parse(environment)
    defaults = defaults_for(env)

    merged = _thaw(defaults)
    if before_merge is not None:
        before_merge(merged)
    merged = deep_merge(merged, normalise_keys(user_config or {}))
    merged["sources"] = merge_sources(merged.get("sources"), defaults["sources"])

    return AssetsConfig.model_validate(merged)


def load_config_file(path: Path) -> tuple[dict[str, Any], dict[str, Any]]:
    """Load a YAML site configuration and return its assets and site sections."""
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration '{path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Configuration '{path}' must contain a mapping.")

    assets = payload.get("assets") or {}
    if not isinstance(assets, Mapping):
        raise ConfigurationError(f"The 'assets' section of '{path}' must be a mapping.")
    site = {key: value for key, value in payload.items() if key != "assets"}
    return dict(assets), site


__all__ = [
    "DEFAULT_SOURCES",
    "DEVELOPMENT",
    "PRODUCTION",
    "AssetsConfig",
    "CachingConfig",
    "CdnConfig",
    "Environment",
    "SiteSettings",
    "coerce_flag",
    "deep_merge",
    "defaults_for",
    "load_config_file",
    "merge_sources",
    "normalise_keys",
    "resolve_config",
]
