"""Compiler collaborators turning source bytes into build output."""

from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
import tempfile
from typing import Protocol, runtime_checkable

from .config import AssetsConfig
from .digest import digest_bytes
from .urls import in_cache_dir


logger = logging.getLogger(__name__)


@runtime_checkable
class Compiler(Protocol):
    """Toolchain seam: compile sources and produce compressed siblings."""

    def compile(self, data: bytes, content_type: str) -> tuple[bytes, str]: ...

    def compress(self, data: bytes) -> bytes: ...


class PassthroughCompiler:
    """Compiler that leaves sources untouched and gzips on request."""

    def compile(self, data: bytes, content_type: str) -> tuple[bytes, str]:
        return data, content_type

    def compress(self, data: bytes) -> bytes:
        # mtime pinned so identical inputs yield identical archives.
        return gzip.compress(data, compresslevel=9, mtime=0)


class CachingCompiler:
    """Memoise another compiler's output on disk, keyed by the source digest.

    Each entry is stored as ``<key>.bin`` plus a ``<key>.json`` sidecar holding
    the resulting content type, fanned out by the first two key characters.
    """

    def __init__(self, inner: Compiler, root: Path) -> None:
        self.inner = inner
        self.root = root

    def _entry(self, key: str) -> tuple[Path, Path]:
        folder = self.root / key[:2]
        return folder / f"{key}.bin", folder / f"{key}.json"

    def compile(self, data: bytes, content_type: str) -> tuple[bytes, str]:
        key = digest_bytes(content_type.encode("utf-8") + b"\0" + data)
        payload_path, meta_path = self._entry(key)
        if payload_path.exists() and meta_path.exists():
            try:
                meta = json.loads(meta_path.read_text(encoding="utf-8"))
                return payload_path.read_bytes(), str(meta["content_type"])
            except (OSError, ValueError, KeyError):
                logger.debug("Discarding unreadable cache entry %s", key, exc_info=True)

        compiled, compiled_type = self.inner.compile(data, content_type)
        self._store(payload_path, compiled)
        self._store(meta_path, json.dumps({"content_type": compiled_type}).encode("utf-8"))
        return compiled, compiled_type

    def compress(self, data: bytes) -> bytes:
        return self.inner.compress(data)

    @staticmethod
    def _store(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=target.parent, delete=False) as handle:
            handle.write(data)
        Path(handle.name).replace(target)


def build_compiler(
    config: AssetsConfig,
    root: Path,
    inner: Compiler | None = None,
) -> Compiler:
    """Return ``inner`` (or a passthrough), wrapped in a file cache when enabled."""
    compiler: Compiler = inner or PassthroughCompiler()
    caching = config.caching
    if not caching.enabled:
        return compiler
    if caching.type != "file":
        logger.warning("Unsupported cache type '%s'; compiling without a cache.", caching.type)
        return compiler
    return CachingCompiler(compiler, in_cache_dir(config, root))


__all__ = ["CachingCompiler", "Compiler", "PassthroughCompiler", "build_compiler"]
