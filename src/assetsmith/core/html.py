"""Minimal HTML emission for rendered asset tags."""

from __future__ import annotations

from typing import Any, Protocol

from bs4 import BeautifulSoup

from .arguments import TagArguments
from .assets import Asset
from .exceptions import UnreadableSourceError
from .mime import is_image_type, is_script_type, is_stylesheet_type


class HtmlBuilder(Protocol):
    """Turn a resolved asset and its arguments into markup."""

    def build(self, asset: Asset, args: TagArguments, url: str) -> str: ...


def _attribute_value(value: Any) -> str | None:
    if value is None or value is False:
        return None
    if value is True:
        return ""
    return str(value)


def _source_text(asset: Asset) -> str:
    try:
        return asset.text()
    except UnicodeDecodeError as exc:
        raise UnreadableSourceError(
            f"Cannot inline '{asset.logical_path}': its source is not valid UTF-8"
        ) from exc


class SoupHtmlBuilder:
    """Emit ``img``, ``link``, ``style`` and ``script`` elements with BeautifulSoup.

    Assets of any other type render as their bare URL.
    """

    def build(self, asset: Asset, args: TagArguments, url: str) -> str:
        soup = BeautifulSoup("", "html.parser")
        content_type = asset.content_type

        if is_image_type(content_type):
            element = soup.new_tag("img")
            if args.inline:
                element["src"] = asset.data_uri
        elif is_stylesheet_type(content_type):
            if args.inline:
                element = soup.new_tag("style")
                element.string = _source_text(asset)
            else:
                element = soup.new_tag("link")
        elif is_script_type(content_type):
            element = soup.new_tag("script")
            if args.inline:
                element.string = _source_text(asset)
        else:
            return url

        for name, value in args.attributes.items():
            rendered = _attribute_value(value)
            if rendered is not None:
                element[name] = rendered
        return str(element)


__all__ = ["HtmlBuilder", "SoupHtmlBuilder"]
