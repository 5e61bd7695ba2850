"""Resolve asset references into compiled, digested, manifest-recorded assets."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from pathlib import Path
import re
import tempfile
from threading import RLock

from .arguments import TagArguments
from .assets import Asset
from .compiler import Compiler, build_compiler
from .config import AssetsConfig, SiteSettings
from .defaults import apply_defaults
from .diagnostics import DiagnosticEmitter, ensure_emitter, record_event
from .exceptions import AssetNotFoundError, UnreadableSourceError
from .manifest import Manifest, ManifestEntry
from .mime import DEFAULT_EXTERNAL_TYPE, content_type_for
from .urls import build_url, in_destination_dir, sanitized_path, strip_paths


logger = logging.getLogger(__name__)

_EXTERNAL_PATTERN = re.compile(r"^(?:https?:)?//", re.IGNORECASE)
_FALLBACK_TYPE = "application/octet-stream"


@dataclass(slots=True)
class ResolutionCallbacks:
    """Optional hooks invoked while resolving and rendering assets."""

    on_asset: Callable[[Asset, TagArguments], None] | None = None
    on_render: Callable[[Asset, TagArguments], None] | None = None


def _write_bytes(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        dir=target.parent, prefix=f".{target.name}.", delete=False
    ) as handle:
        handle.write(data)
    Path(handle.name).replace(target)


class AssetResolver:
    """Locate, compile, digest and record assets for one build.

    One resolver is created per build. ``resolve`` may be called from several
    threads; the manifest and the compiled-asset cache are lock guarded.
    """

    def __init__(
        self,
        config: AssetsConfig,
        site: SiteSettings,
        *,
        compiler: Compiler | None = None,
        manifest: Manifest | None = None,
        emitter: DiagnosticEmitter | None = None,
        callbacks: ResolutionCallbacks | None = None,
    ) -> None:
        self.config = config
        self.site = site
        self.compiler = build_compiler(config, site.root, compiler)
        self.emitter = ensure_emitter(emitter)
        self.callbacks = callbacks or ResolutionCallbacks()
        self.manifest = manifest if manifest is not None else Manifest.load(self.manifest_path)
        self._compiled: dict[tuple[str, str], Asset] = {}
        self._lock = RLock()

    @property
    def destination_root(self) -> Path:
        return in_destination_dir(self.config, self.site.destination)

    @property
    def manifest_path(self) -> Path:
        return sanitized_path(self.destination_root, self.config.manifest)

    # URLs -----------------------------------------------------------------

    def url(self, user_path: str | None = None) -> str:
        """Build a public URL for ``user_path`` under the current site settings."""
        return build_url(
            user_path,
            self.config,
            environment=self.site.environment,
            baseurl=self.site.baseurl,
        )

    def url_for(self, asset: Asset) -> str:
        if asset.external:
            return asset.uri
        return self.url(asset.output_path(self.config.digest))

    # Classification -------------------------------------------------------

    def is_external(self, reference: str, args: TagArguments | None = None) -> bool:
        """Return whether ``reference`` points outside the site.

        An explicit ``external`` argument wins; otherwise only references
        starting with ``http://``, ``https://`` or ``//`` are external.
        """
        if args is not None and args.external is not None:
            return args.external
        return bool(_EXTERNAL_PATTERN.match(reference))

    # Internal assets ------------------------------------------------------

    def find_source(self, reference: str, *, original: str | None = None) -> tuple[Path, Path, str]:
        """Return ``(load_path, filename, logical_path)`` for the first match.

        Sources are searched in declared order. A reference that repeats its
        source directory (``assets/css/app.css``) is retried without it.
        """
        logical = reference.strip().lstrip("/")
        candidates = [logical]
        stripped = strip_paths(logical, self.config.sources)
        if stripped != logical:
            candidates.append(stripped)

        for candidate in candidates:
            for source in self.config.sources:
                load_path = sanitized_path(self.site.root, source)
                filename = sanitized_path(load_path, candidate)
                if filename.is_file():
                    return load_path, filename, candidate
        raise AssetNotFoundError(original if original is not None else reference, reference)

    def find_asset(self, reference: str, *, original: str | None = None) -> Asset:
        """Locate ``reference`` and read its source bytes."""
        load_path, filename, logical = self.find_source(reference, original=original)
        try:
            data = filename.read_bytes()
        except OSError as exc:
            raise UnreadableSourceError(f"Unable to read asset '{filename}': {exc}") from exc
        content_type = content_type_for(logical) or _FALLBACK_TYPE
        record_event(
            self.emitter,
            "asset_resolve",
            {"reference": reference, "filename": str(filename), "content_type": content_type},
        )
        return Asset.from_source(
            logical, data, content_type, load_path=load_path, filename=filename
        )

    def compile(self, asset: Asset) -> Asset:
        """Compile ``asset`` once per build, write it out and record it."""
        key = (asset.logical_path, asset.digest)
        with self._lock:
            cached = self._compiled.get(key)
        if cached is not None:
            return cached

        record_event(
            self.emitter,
            "asset_compile",
            {"logical_path": asset.logical_path, "content_type": asset.content_type},
        )
        data, content_type = self.compiler.compile(asset.source, asset.content_type)
        compiled = asset.with_content(data, content_type)
        self.write(compiled)

        with self._lock:
            return self._compiled.setdefault(key, compiled)

    def write(self, asset: Asset) -> ManifestEntry:
        """Write ``asset`` (and its gzip sibling) unless the manifest shows it is current."""
        output = asset.output_path(self.config.digest)
        target = sanitized_path(self.destination_root, output)
        compressed = f"{output}.gz" if self.config.gzip else None
        compressed_target = (
            sanitized_path(self.destination_root, compressed) if compressed else None
        )

        previous = self.manifest.lookup(asset.logical_path)
        current = (
            previous is not None
            and previous.digest_path == asset.digest_path
            and previous.output_path == output
            and previous.compressed_path == compressed
            and target.is_file()
            and (compressed_target is None or compressed_target.is_file())
        )
        if current:
            record_event(self.emitter, "asset_reuse", {"logical_path": asset.logical_path})
        else:
            _write_bytes(target, asset.source)
            if compressed_target is not None:
                _write_bytes(compressed_target, self.compiler.compress(asset.source))
            record_event(
                self.emitter,
                "asset_write",
                {"target": str(target), "gzip": compressed_target is not None},
            )

        return self.manifest.register(
            asset.logical_path,
            asset.digest_path,
            asset.integrity,
            output_path=output,
            content_type=asset.content_type,
            compressed_path=compressed,
        )

    # External assets ------------------------------------------------------

    def external_asset(self, url: str, args: TagArguments | None = None) -> Asset:
        """Wrap ``url`` as an asset without fetching it."""
        content_type = args.content_type if args is not None else None
        if not content_type:
            content_type = content_type_for(url)
        if not content_type:
            logger.debug("no type for %s, assuming %s", url, DEFAULT_EXTERNAL_TYPE)
            self.emitter.warning(f"No content type for '{url}', assuming {DEFAULT_EXTERNAL_TYPE}.")
            content_type = DEFAULT_EXTERNAL_TYPE
        record_event(self.emitter, "asset_external", {"url": url, "content_type": content_type})
        return Asset.from_url(url, content_type)

    # Entry points ---------------------------------------------------------

    def resolve(self, reference: str, args: TagArguments | None = None) -> Asset:
        """Resolve ``reference`` and inject default attributes into ``args``.

        Defaults run again after compilation since a content type change can
        change which defaults apply.
        """
        args = args if args is not None else TagArguments(reference=reference)
        if self.is_external(reference, args):
            asset = self.external_asset(reference, args)
        else:
            original = self.find_asset(reference, original=args.original)
            self._apply_defaults(args, original)
            asset = self.compile(original)
        self._apply_defaults(args, asset)

        if self.callbacks.on_asset is not None:
            self.callbacks.on_asset(asset, args)
        return asset

    def resolve_many(
        self, references: Iterable[str], *, max_workers: int | None = None
    ) -> list[Asset]:
        """Resolve independent references concurrently, preserving input order."""
        references = list(references)
        if max_workers == 1 or len(references) < 2:
            return [self.resolve(reference) for reference in references]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.resolve, references))

    def precompile(self, *, max_workers: int | None = None) -> list[Asset]:
        """Build every logical path listed under ``precompile``."""
        return self.resolve_many(self.config.precompile, max_workers=max_workers)

    def finalize(self, *, clean: bool = False) -> Path:
        """Persist the manifest once all registrations are done.

        With ``clean`` the retired outputs are deleted first, so the saved
        manifest no longer lists them.
        """
        if clean:
            self._clean(dry_run=False)
        return self._save()

    def clean(self, *, dry_run: bool = False) -> list[Path]:
        """Remove outputs replaced by later builds and record the shorter retired list."""
        removed = self._clean(dry_run=dry_run)
        if not dry_run and self.manifest_path.is_file():
            self._save()
        return removed

    def _clean(self, *, dry_run: bool) -> list[Path]:
        removed = self.manifest.clean(self.destination_root, gzip=self.config.gzip, dry_run=dry_run)
        record_event(self.emitter, "manifest_clean", {"removed": len(removed), "dry_run": dry_run})
        return removed

    def _save(self) -> Path:
        path = self.manifest.save(self.manifest_path)
        record_event(
            self.emitter, "manifest_save", {"path": str(path), "entries": len(self.manifest)}
        )
        return path

    def _apply_defaults(self, args: TagArguments, asset: Asset) -> None:
        apply_defaults(args, asset, config=self.config, url_for=self.url_for)


__all__ = ["AssetResolver", "ResolutionCallbacks"]
