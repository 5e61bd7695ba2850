"""Persisted mapping from logical asset names to their built outputs."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
import json
import logging
import os
from pathlib import Path, PurePosixPath
import tempfile
from threading import RLock
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ManifestError
from .urls import sanitized_path


logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1
PRIMARY_KEEP_KEY = "assets"
COMPRESSED_KEEP_KEY = "gzip"
KEEP_KEYS: tuple[str, ...] = (PRIMARY_KEEP_KEY, COMPRESSED_KEEP_KEY)


class ManifestEntry(BaseModel):
    """Build outputs recorded for one logical asset."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    logical_path: str
    digest_path: str
    output_path: str
    integrity: str | None = None
    content_type: str | None = None
    compressed_path: str | None = None
    keep: tuple[str, ...] = (PRIMARY_KEEP_KEY,)
    metadata: dict[str, Any] = Field(default_factory=dict)


class Manifest:
    """Thread-safe manifest loaded at build start and saved once at build end."""

    def __init__(
        self,
        path: Path | None = None,
        entries: Iterable[ManifestEntry] = (),
        *,
        keep_keys: Sequence[str] = KEEP_KEYS,
        retired: Iterable[str] = (),
    ) -> None:
        self.path = path
        self.keep_keys: tuple[str, ...] = tuple(keep_keys)
        self._entries: dict[str, ManifestEntry] = {entry.logical_path: entry for entry in entries}
        self._retired: set[str] = set(retired)
        self._lock = RLock()

    @classmethod
    def load(cls, path: Path, *, keep_keys: Sequence[str] = KEEP_KEYS) -> Manifest:
        """Load ``path``; a missing file yields an empty manifest."""
        if not path.exists():
            return cls(path, keep_keys=keep_keys)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ManifestError(f"Failed to read manifest '{path}': {exc}") from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("assets", {}), dict):
            raise ManifestError(f"Manifest '{path}' does not contain an asset mapping.")
        retired = payload.get("retired", [])
        if not isinstance(retired, list) or not all(isinstance(item, str) for item in retired):
            raise ManifestError(f"Manifest '{path}' has an invalid retired list.")

        entries: list[ManifestEntry] = []
        for logical_path, raw in payload.get("assets", {}).items():
            try:
                entries.append(ManifestEntry.model_validate({**raw, "logical_path": logical_path}))
            except (TypeError, ValidationError) as exc:
                raise ManifestError(f"Invalid manifest entry '{logical_path}' in '{path}'") from exc
        logger.debug("Loaded %d manifest entries from %s", len(entries), path)
        return cls(path, entries, keep_keys=keep_keys, retired=retired)

    def register(
        self,
        logical_path: str,
        digest_path: str,
        integrity: str | None = None,
        *,
        output_path: str | None = None,
        content_type: str | None = None,
        compressed_path: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ManifestEntry:
        """Record the outputs of ``logical_path``; a later registration wins.

        Outputs of the replaced entry that the new one no longer uses are kept
        as retired until ``clean`` deletes them.
        """
        keep = [PRIMARY_KEEP_KEY]
        if compressed_path:
            keep.append(COMPRESSED_KEEP_KEY)
        entry = ManifestEntry(
            logical_path=logical_path,
            digest_path=digest_path,
            output_path=output_path or digest_path,
            integrity=integrity,
            content_type=content_type,
            compressed_path=compressed_path,
            keep=tuple(keep),
            metadata=dict(metadata or {}),
        )
        with self._lock:
            previous = self._entries.get(logical_path)
            current = {entry.output_path, entry.compressed_path} - {None}
            if previous is not None:
                stale = {previous.output_path, previous.compressed_path} - current - {None}
                if stale:
                    logger.debug("Retiring outputs of %s: %s", logical_path, sorted(stale))
                    self._retired.update(stale)
            self._retired.difference_update(current)
            self._entries[logical_path] = entry
        return entry

    def lookup(self, logical_path: str) -> ManifestEntry | None:
        with self._lock:
            return self._entries.get(logical_path)

    def retired(self) -> list[str]:
        """Return replaced output paths awaiting cleanup."""
        with self._lock:
            return sorted(self._retired)

    def entries(self) -> list[ManifestEntry]:
        """Return a snapshot of the entries ordered by logical path."""
        with self._lock:
            return [self._entries[key] for key in sorted(self._entries)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, logical_path: object) -> bool:
        with self._lock:
            return logical_path in self._entries

    def __iter__(self) -> Iterator[ManifestEntry]:
        return iter(self.entries())

    def to_dict(self) -> dict[str, Any]:
        assets = {
            entry.logical_path: entry.model_dump(exclude={"logical_path"}, mode="json")
            for entry in self.entries()
        }
        return {
            "version": MANIFEST_VERSION,
            "keep_keys": list(self.keep_keys),
            "assets": assets,
            "retired": self.retired(),
        }

    def save(self, path: Path | None = None) -> Path:
        """Write the manifest atomically and return its path."""
        target = path or self.path
        if target is None:
            raise ManifestError("No manifest path configured.")
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self.to_dict(), indent=2, ensure_ascii=False, sort_keys=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.write("\n")
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self.path = target
        return target

    def live_files(self, destination_root: Path, *, gzip: bool = True) -> set[Path]:
        """Return every output still referenced by the manifest.

        Includes compressed siblings when ``gzip`` is on, and each directory on
        the way to a kept file so a cleanup pass leaves those directories alone.
        """
        root = Path(destination_root)
        live: set[Path] = set()
        for entry in self.entries():
            keep = set(entry.keep)
            if not keep.intersection(self.keep_keys):
                continue
            kept: list[str] = []
            if PRIMARY_KEEP_KEY in keep and PRIMARY_KEEP_KEY in self.keep_keys:
                kept.append(entry.output_path)
            if (
                gzip
                and entry.compressed_path
                and COMPRESSED_KEEP_KEY in keep
                and COMPRESSED_KEEP_KEY in self.keep_keys
            ):
                kept.append(entry.compressed_path)
            for relative in kept:
                live.add(sanitized_path(root, relative))
                for parent in PurePosixPath(relative).parents:
                    if parent.as_posix() in {".", ""}:
                        continue
                    live.add(sanitized_path(root, parent.as_posix()))
        return live

    def clean(
        self, destination_root: Path, *, gzip: bool = True, dry_run: bool = False
    ) -> list[Path]:
        """Delete retired outputs under ``destination_root``.

        Only paths this manifest replaced are candidates, so files written by
        anything else in the destination are never touched. Retired paths that
        became live again are forgotten instead of deleted, and directories left
        empty by a removal are pruned up to ``destination_root``.
        """
        root = Path(destination_root)
        live = self.live_files(root, gzip=gzip)
        removed: list[Path] = []
        for relative in self.retired():
            target = sanitized_path(root, relative)
            if target in live:
                self._forget(relative)
                continue
            if target.is_file():
                if not dry_run:
                    target.unlink()
                removed.append(target)
            if not dry_run:
                self._forget(relative)
                _prune_empty_parents(target, root, live)
        return removed

    def _forget(self, relative: str) -> None:
        with self._lock:
            self._retired.discard(relative)


def _prune_empty_parents(target: Path, root: Path, live: set[Path]) -> None:
    parent = target.parent
    while parent != root and root in parent.parents:
        if parent in live or not parent.is_dir() or any(parent.iterdir()):
            return
        parent.rmdir()
        parent = parent.parent


__all__ = [
    "COMPRESSED_KEEP_KEY",
    "KEEP_KEYS",
    "MANIFEST_VERSION",
    "PRIMARY_KEEP_KEY",
    "Manifest",
    "ManifestEntry",
]
