"""Default HTML attributes injected per content type."""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from .arguments import TagArguments
from .assets import Asset
from .config import AssetsConfig
from .mime import IMAGE_TYPES, SCRIPT_TYPES, STYLESHEET_TYPES


UrlBuilder = Callable[[Asset], str]


class Defaults:
    """Base class for content-type specific attribute defaults."""

    content_types: ClassVar[frozenset[str]] = frozenset()

    def __init__(
        self, args: TagArguments, asset: Asset, *, config: AssetsConfig, url_for: UrlBuilder
    ) -> None:
        self.args = args
        self.asset = asset
        self.config = config
        self.url_for = url_for

    @classmethod
    def applies_to(cls, content_type: str | None) -> bool:
        return content_type in cls.content_types

    def setters(self) -> tuple[Callable[[], None], ...]:
        return ()

    def apply(self) -> None:
        for setter in self.setters():
            setter()

    def _location(self) -> str:
        if self.asset.external:
            return self.asset.uri
        return self.url_for(self.asset)

    def _set_integrity(self) -> None:
        if self.asset.external:
            return
        self.args.attributes["integrity"] = self.asset.integrity
        self.args.set_default("crossorigin", "anonymous")


class ImageDefaults(Defaults):
    content_types = IMAGE_TYPES

    def setters(self) -> tuple[Callable[[], None], ...]:
        return (self.set_src, self.set_integrity)

    def set_src(self) -> None:
        if not self.args.inline:
            self.args.attributes["src"] = self._location()

    def set_integrity(self) -> None:
        self._set_integrity()


class StylesheetDefaults(Defaults):
    content_types = STYLESHEET_TYPES

    def setters(self) -> tuple[Callable[[], None], ...]:
        return (self.set_href, self.set_rel, self.set_integrity)

    def set_href(self) -> None:
        if not self.args.inline:
            self.args.attributes["href"] = self._location()

    def set_rel(self) -> None:
        if not self.args.inline:
            self.args.set_default("rel", "stylesheet")

    def set_integrity(self) -> None:
        if self.config.subresource_integrity and not self.args.inline:
            self._set_integrity()


class ScriptDefaults(Defaults):
    content_types = SCRIPT_TYPES

    def setters(self) -> tuple[Callable[[], None], ...]:
        return (self.set_src, self.set_integrity)

    def set_src(self) -> None:
        if not self.args.inline:
            self.args.attributes["src"] = self._location()

    def set_integrity(self) -> None:
        if self.config.subresource_integrity and not self.args.inline:
            self._set_integrity()


DEFAULT_PROVIDERS: tuple[type[Defaults], ...] = (
    ImageDefaults,
    StylesheetDefaults,
    ScriptDefaults,
)


def apply_defaults(
    args: TagArguments,
    asset: Asset,
    *,
    config: AssetsConfig,
    url_for: UrlBuilder,
    providers: tuple[type[Defaults], ...] = DEFAULT_PROVIDERS,
) -> None:
    """Run every provider matching the asset's current content type."""
    for provider in providers:
        if provider.applies_to(asset.content_type):
            provider(args, asset, config=config, url_for=url_for).apply()


__all__ = [
    "DEFAULT_PROVIDERS",
    "Defaults",
    "ImageDefaults",
    "ScriptDefaults",
    "StylesheetDefaults",
    "apply_defaults",
]
