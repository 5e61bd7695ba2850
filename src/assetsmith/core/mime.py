"""Known asset extensions and their content types."""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse


DEFAULT_EXTERNAL_TYPE = "image/jpeg"

EXTENSION_TYPES: dict[str, str] = {
    ".apng": "image/apng",
    ".avif": "image/avif",
    ".bmp": "image/bmp",
    ".gif": "image/gif",
    ".ico": "image/x-icon",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".webp": "image/webp",
    ".css": "text/css",
    ".scss": "text/scss",
    ".sass": "text/sass",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".json": "application/json",
    ".map": "application/json",
    ".html": "text/html",
    ".txt": "text/plain",
    ".xml": "application/xml",
    ".eot": "application/vnd.ms-fontobject",
    ".otf": "font/otf",
    ".ttf": "font/ttf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".ogv": "video/ogg",
    ".webm": "video/webm",
}

IMAGE_TYPES: frozenset[str] = frozenset(
    {
        "image/bmp",
        "image/webp",
        "image/svg+xml",
        "image/jpeg",
        "image/tiff",
        "image/gif",
        "image/png",
        "image/jpg",
        "image/avif",
        "image/apng",
        "image/x-icon",
    }
)
STYLESHEET_TYPES: frozenset[str] = frozenset({"text/css"})
SCRIPT_TYPES: frozenset[str] = frozenset({"application/javascript", "text/javascript"})


def _suffix(path: str) -> str:
    parsed = urlparse(path)
    candidate = parsed.path if parsed.scheme or parsed.netloc else path
    return PurePosixPath(unquote(candidate)).suffix.lower()


def content_type_for(path: str) -> str | None:
    """Return the content type inferred from the extension of a path or URL."""
    return EXTENSION_TYPES.get(_suffix(path))


def extension_for(content_type: str) -> str | None:
    """Return the first known extension for ``content_type``."""
    for extension, candidate in EXTENSION_TYPES.items():
        if candidate == content_type:
            return extension
    return None


def is_image_type(content_type: str | None) -> bool:
    return content_type in IMAGE_TYPES


def is_stylesheet_type(content_type: str | None) -> bool:
    return content_type in STYLESHEET_TYPES


def is_script_type(content_type: str | None) -> bool:
    return content_type in SCRIPT_TYPES


__all__ = [
    "DEFAULT_EXTERNAL_TYPE",
    "EXTENSION_TYPES",
    "IMAGE_TYPES",
    "content_type_for",
    "extension_for",
    "is_image_type",
    "is_script_type",
    "is_stylesheet_type",
]
