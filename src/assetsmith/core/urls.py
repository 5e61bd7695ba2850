"""Path and URL construction for built assets."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePosixPath
import re

from .config import AssetsConfig, Environment


_EDGE_SLASHES = re.compile(r"^/|/$")
_SCHEME_PREFIX = re.compile(r"^(?:https?:)?//", re.IGNORECASE)


def strip_slashes(path: str | None) -> str | None:
    """Strip one leading and one trailing slash; empty input yields ``None``."""
    if not path:
        return None
    stripped = _EDGE_SLASHES.sub("", path)
    return stripped or None


def make_https(url: str | None) -> str | None:
    """Rewrite scheme-relative and ``http://`` URLs to ``https://``."""
    if not url:
        return None
    return _SCHEME_PREFIX.sub("https://", url, count=1)


def build_url(
    user_path: str | None = None,
    config: AssetsConfig | None = None,
    *,
    environment: Environment = Environment.DEVELOPMENT,
    baseurl: str | None = None,
) -> str:
    """Build the public URL for ``user_path``.

    Production builds with a CDN return an absolute CDN URL; every other
    combination returns a root-relative path.
    """
    config = config or AssetsConfig()
    destination = strip_slashes(config.destination)
    cdn = strip_slashes(make_https(config.cdn.url))
    base = strip_slashes(baseurl)
    production = environment.is_production

    segments: list[str | None] = []
    if production and cdn:
        segments.append(cdn)
    if not production or not cdn or config.cdn.baseurl:
        segments.append(base)
    if not production or not cdn or config.cdn.destination:
        segments.append(destination)
    if user_path:
        segments.append(user_path.lstrip("/"))

    joined = "/".join(segment for segment in segments if segment)
    if cdn and production:
        return joined
    return "/" + joined


def sanitized_path(base: Path, questionable: str | Path | None) -> Path:
    """Join ``questionable`` onto ``base`` without ever leaving ``base``."""
    if questionable is None or str(questionable) == "":
        return base
    parts: list[str] = []
    for part in PurePosixPath(str(questionable).replace("\\", "/")).parts:
        if part in {"/", ".", ""}:
            continue
        if part == "..":
            if parts:
                parts.pop()
            continue
        parts.append(part)
    return base.joinpath(*parts)


def _land(base: Path, paths: Iterable[str | Path | None]) -> Path:
    target = base
    for path in paths:
        if path is None:
            continue
        target = sanitized_path(target, path)
    return target


def in_destination_dir(
    config: AssetsConfig, site_destination: Path, *paths: str | Path | None
) -> Path:
    """Land ``paths`` inside the asset destination of the built site."""
    return _land(Path(site_destination), (strip_slashes(config.destination), *paths))


def in_cache_dir(config: AssetsConfig, root: Path, *paths: str | Path | None) -> Path:
    """Land ``paths`` inside the compiler cache directory under ``root``."""
    return _land(Path(root), (strip_slashes(config.caching.path), *paths))


def strip_paths(path: str, sources: Iterable[str]) -> str:
    """Drop a leading source directory from ``path`` when one matches."""
    for source in sources:
        prefix = source.rstrip("/") + "/"
        if path.startswith(prefix):
            return path[len(prefix) :]
    return path


def strip_secondary_content_type(content_type: str) -> str:
    """Reduce ``image/svg+xml`` style types to their trailing subtype."""
    parts = content_type.split("/")
    if len(parts) > 2:
        raise ValueError(f"{content_type} is invalid.")
    if len(parts) == 1:
        return content_type
    return f"{parts[0]}/{parts[1].rpartition('+')[2]}"


__all__ = [
    "build_url",
    "in_cache_dir",
    "in_destination_dir",
    "make_https",
    "sanitized_path",
    "strip_paths",
    "strip_secondary_content_type",
    "strip_slashes",
]
