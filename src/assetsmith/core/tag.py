"""Render a single asset tag: special-case handlers first, then markup."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any

from .arguments import TagArguments
from .assets import Asset
from .exceptions import AssetPipelineError, InvalidExternalError
from .html import HtmlBuilder, SoupHtmlBuilder
from .resolver import AssetResolver


logger = logging.getLogger(__name__)

Handler = Callable[[TagArguments, Asset, AssetResolver], str | None]


def on_path(args: TagArguments, asset: Asset, resolver: AssetResolver) -> str | None:
    """Return only the asset URL (``{% asset img.png @path %}``)."""
    if not args.path:
        return None
    if asset.external:
        raise InvalidExternalError("path")
    return resolver.url_for(asset)


def on_data_url(args: TagArguments, asset: Asset, resolver: AssetResolver) -> str | None:
    """Return a base64 data URI (``{% asset img.png @data-url %}``)."""
    if not args.data_url:
        return None
    if asset.external:
        raise InvalidExternalError("data-url")
    return asset.data_uri


HANDLERS: tuple[Handler, ...] = (on_path, on_data_url)


class AssetTag:
    """Resolve a reference and turn it into a URL, a data URI or HTML."""

    def __init__(
        self,
        resolver: AssetResolver,
        *,
        builder: HtmlBuilder | None = None,
        handlers: tuple[Handler, ...] = HANDLERS,
    ) -> None:
        self.resolver = resolver
        self.builder = builder or SoupHtmlBuilder()
        self.handlers = handlers

    def render(
        self,
        reference: str,
        arguments: TagArguments | Mapping[str, Any] | None = None,
        *,
        original: str | None = None,
    ) -> str:
        if isinstance(arguments, TagArguments):
            args = arguments
        else:
            args = TagArguments.from_mapping(reference, arguments, original=original)

        try:
            args.validate()
            asset = self.resolver.resolve(reference, args)
            return self._return_or_build(args, asset)
        except AssetPipelineError as exc:
            logger.error("Failed to render asset '%s' with %r", reference, args.as_dict())
            exc.add_note(f"asset arguments: {args.as_dict()!r}")
            raise

    def _return_or_build(self, args: TagArguments, asset: Asset) -> str:
        for handler in self.handlers:
            out = handler(args, asset, self.resolver)
            if out is not None:
                return out

        if args.inline and asset.external:
            raise InvalidExternalError("inline")
        callback = self.resolver.callbacks.on_render
        if callback is not None:
            callback(asset, args)
        return self.builder.build(asset, args, self.resolver.url_for(asset))


__all__ = ["HANDLERS", "AssetTag", "Handler", "on_data_url", "on_path"]
