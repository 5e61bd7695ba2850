"""Asset value objects shared by the resolver, the manifest, and the tag."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import unquote, urlparse

from .digest import digest_bytes, digest_path, digest_text, integrity
from .mime import content_type_for, extension_for


def _rename_for_type(logical_path: str, content_type: str) -> str:
    if content_type_for(logical_path) == content_type:
        return logical_path
    extension = extension_for(content_type)
    if extension is None:
        return logical_path
    path = PurePosixPath(logical_path)
    if not path.suffix:
        return f"{logical_path}{extension}"
    return path.with_suffix(extension).as_posix()


@dataclass(slots=True, frozen=True)
class Asset:
    """A resolved static file, or an external URL wrapped to look like one.

    ``digest`` is derived from ``source`` for local assets and from the URL
    string for external ones, so equal inputs always produce equal digest paths.
    """

    logical_path: str
    content_type: str
    source: bytes
    digest: str
    load_path: Path | None = None
    filename: Path | None = None
    uri: str = ""
    external: bool = False
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_source(
        cls,
        logical_path: str,
        data: bytes,
        content_type: str,
        *,
        load_path: Path | None = None,
        filename: Path | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Asset:
        """Build a local asset from its bytes."""
        return cls(
            logical_path=logical_path,
            content_type=content_type,
            source=data,
            digest=digest_bytes(data),
            load_path=load_path,
            filename=filename,
            uri=filename.resolve().as_uri() if filename is not None else logical_path,
            metadata=dict(metadata or {}),
        )

    @classmethod
    def from_url(cls, url: str, content_type: str) -> Asset:
        """Wrap an external URL without fetching it."""
        parsed = urlparse(url)
        name = PurePosixPath(unquote(parsed.path)).name or parsed.netloc or url
        return cls(
            logical_path=name,
            content_type=content_type,
            source=b"",
            digest=digest_text(url),
            uri=url,
            external=True,
        )

    def with_content(self, data: bytes, content_type: str | None = None) -> Asset:
        """Return a copy carrying compiled ``data``, digested afresh.

        A content type change also renames the logical path, so ``theme.scss``
        compiled to ``text/css`` is published as ``theme.css``.
        """
        logical_path = self.logical_path
        if content_type and content_type != self.content_type:
            logical_path = _rename_for_type(logical_path, content_type)
        content_type = content_type or self.content_type
        return Asset(
            logical_path=logical_path,
            content_type=content_type,
            source=data,
            digest=digest_bytes(data),
            load_path=self.load_path,
            filename=self.filename,
            uri=self.uri,
            external=self.external,
            metadata=dict(self.metadata),
        )

    @property
    def digest_path(self) -> str:
        return digest_path(self.logical_path, self.digest)

    @property
    def integrity(self) -> str | None:
        """Subresource-integrity value; external assets have none."""
        if self.external:
            return None
        return integrity(self.source)

    @property
    def url(self) -> str | None:
        return self.uri if self.external else None

    @property
    def data_uri(self) -> str:
        payload = base64.b64encode(self.source).decode("ascii")
        return f"data:{self.content_type};base64,{payload}"

    def output_path(self, digested: bool) -> str:
        """Path written to disk and used in URLs, digested or not."""
        return self.digest_path if digested else self.logical_path

    def text(self, encoding: str = "utf-8") -> str:
        return self.source.decode(encoding)


__all__ = ["Asset"]
