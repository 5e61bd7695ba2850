import gzip
from pathlib import Path

import pytest

from assetsmith.core import (
    Asset,
    AssetNotFoundError,
    CachingCompiler,
    Manifest,
    ResolutionCallbacks,
    TagArguments,
    UnreadableSourceError,
)
from assetsmith.core.config import Environment
from assetsmith.core.digest import digest_path, digest_text, integrity

from conftest import PNG_BYTES, make_resolver


class RecordingEmitter:
    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.events: list[tuple[str, dict]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def event(self, name: str, payload) -> None:
        self.events.append((name, dict(payload)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class ScssCompiler:
    def __init__(self) -> None:
        self.calls = 0

    def compile(self, data: bytes, content_type: str) -> tuple[bytes, str]:
        self.calls += 1
        if content_type == "text/scss":
            return data.replace(b"$red", b"red"), "text/css"
        return data, content_type

    def compress(self, data: bytes) -> bytes:
        return gzip.compress(data, mtime=0)


@pytest.mark.parametrize(
    ("reference", "expected"),
    [
        ("https://example.com/a.png", True),
        ("http://example.com/a.png", True),
        ("//cdn.example.com/a.png", True),
        ("HTTPS://example.com/a.png", True),
        ("img.png", False),
        ("/img.png", False),
        ("img//icons/a.png", False),
        ("ftp://example.com/a.png", False),
    ],
)
def test_is_external(resolver_factory, reference: str, expected: bool) -> None:
    assert resolver_factory().is_external(reference) is expected


def test_external_argument_overrides_detection(resolver_factory) -> None:
    resolver = resolver_factory()
    forced = TagArguments(reference="img.png", external=True)
    local = TagArguments(reference="//cdn.io/a.png", external=False)

    assert resolver.is_external("img.png", forced) is True
    assert resolver.is_external("//cdn.io/a.png", local) is False


def test_external_asset_is_not_fetched(resolver_factory) -> None:
    resolver = resolver_factory()
    args = TagArguments(reference="https://example.com/photo.png")
    asset = resolver.resolve("https://example.com/photo.png", args)

    assert asset.external is True
    assert asset.content_type == "image/png"
    assert asset.digest == digest_text("https://example.com/photo.png")
    assert args.attributes == {"src": "https://example.com/photo.png"}
    assert resolver.url_for(asset) == "https://example.com/photo.png"
    assert len(resolver.manifest) == 0


def test_external_asset_without_extension_defaults_to_jpeg(resolver_factory) -> None:
    emitter = RecordingEmitter()
    resolver = resolver_factory(emitter=emitter)
    asset = resolver.resolve("https://example.com/photo")

    assert asset.content_type == "image/jpeg"
    assert len(emitter.warnings) == 1
    assert "image/jpeg" in emitter.warnings[0]


def test_external_type_argument_wins(resolver_factory) -> None:
    resolver = resolver_factory()
    args = TagArguments(
        reference="https://fonts.example.com/css?family=Lato", content_type="text/css"
    )
    asset = resolver.resolve(args.reference, args)

    assert asset.content_type == "text/css"
    assert args.attributes["href"] == args.reference
    assert args.attributes["rel"] == "stylesheet"


def test_internal_asset_is_written_and_recorded(resolver_factory, site_root: Path) -> None:
    resolver = resolver_factory()
    args = TagArguments(reference="img.png")
    asset = resolver.resolve("img.png", args)

    target = site_root / "_site" / "assets" / "img.png"
    assert target.read_bytes() == PNG_BYTES
    assert asset.load_path == site_root / "assets" / "img"
    assert resolver.url_for(asset) == "/assets/img.png"
    assert args.attributes["src"] == "/assets/img.png"
    assert args.attributes["integrity"] == integrity(PNG_BYTES)
    assert args.attributes["crossorigin"] == "anonymous"

    entry = resolver.manifest.lookup("img.png")
    assert entry is not None
    assert entry.digest_path == asset.digest_path
    assert entry.output_path == "img.png"
    assert entry.content_type == "image/png"


def test_digest_output_names(resolver_factory, site_root: Path) -> None:
    resolver = resolver_factory({"digest": True})
    asset = resolver.resolve("img.png")

    expected = digest_path("img.png", asset.digest)
    assert (site_root / "_site" / "assets" / expected).is_file()
    assert not (site_root / "_site" / "assets" / "img.png").exists()
    assert resolver.url_for(asset) == f"/assets/{expected}"


def test_repeated_resolution_is_stable(resolver_factory) -> None:
    resolver = resolver_factory({"digest": True})
    first = resolver.resolve("img.png")
    second = resolver.resolve("img.png")

    assert first.digest_path == second.digest_path
    assert len(resolver.manifest) == 1


def test_user_crossorigin_is_preserved(resolver_factory) -> None:
    resolver = resolver_factory()
    args = TagArguments(reference="img.png", attributes={"crossorigin": "use-credentials"})
    resolver.resolve("img.png", args)

    assert args.attributes["crossorigin"] == "use-credentials"


def test_stylesheet_integrity_requires_opt_in(resolver_factory) -> None:
    plain = TagArguments(reference="app.css")
    resolver_factory().resolve("app.css", plain)
    assert plain.attributes["rel"] == "stylesheet"
    assert "integrity" not in plain.attributes

    signed = TagArguments(reference="app.js")
    resolver_factory({"subresource_integrity": True}).resolve("app.js", signed)
    assert signed.attributes["src"] == "/assets/app.js"
    assert signed.attributes["integrity"].startswith("sha256-")


def test_missing_asset_reports_reference(resolver_factory) -> None:
    resolver = resolver_factory()
    with pytest.raises(AssetNotFoundError) as excinfo:
        resolver.resolve("missing.png")
    assert str(excinfo.value) == "Unable to find asset 'missing.png'"
    assert excinfo.value.reference == "missing.png"

    args = TagArguments(reference="missing.png", original="{{ page.image }}")
    with pytest.raises(AssetNotFoundError) as excinfo:
        resolver.resolve("missing.png", args)
    assert "{{ page.image }}" in str(excinfo.value)
    assert excinfo.value.parsed_reference == "missing.png"


def test_first_matching_source_wins(site_root: Path) -> None:
    (site_root / "img").mkdir()
    (site_root / "img" / "img.png").write_bytes(b"shadowed")

    asset = make_resolver(site_root).resolve("img.png")
    assert asset.source == PNG_BYTES

    (site_root / "vendor").mkdir()
    (site_root / "vendor" / "img.png").write_bytes(b"vendor")
    asset = make_resolver(site_root, {"sources": ["vendor"]}).resolve("img.png")
    assert asset.source == b"vendor"


def test_reference_may_repeat_its_source_directory(resolver_factory) -> None:
    asset = resolver_factory().resolve("assets/css/app.css")
    assert asset.logical_path == "app.css"


def test_unreadable_source(resolver_factory, monkeypatch: pytest.MonkeyPatch) -> None:
    resolver = resolver_factory()

    def refuse(self: Path) -> bytes:
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "read_bytes", refuse)
    with pytest.raises(UnreadableSourceError):
        resolver.find_asset("img.png")


def test_gzip_sibling(resolver_factory, site_root: Path) -> None:
    resolver = resolver_factory({"gzip": True})
    resolver.resolve("app.css")

    compressed = site_root / "_site" / "assets" / "app.css.gz"
    assert gzip.decompress(compressed.read_bytes()) == b"body { color: red; }\n"
    assert resolver.manifest.lookup("app.css").compressed_path == "app.css.gz"


def test_unchanged_assets_are_reused(site_root: Path) -> None:
    first = make_resolver(site_root, {"digest": True})
    first.resolve("img.png")
    first.finalize()

    emitter = RecordingEmitter()
    second = make_resolver(site_root, {"digest": True}, emitter=emitter)
    second.resolve("img.png")

    assert "asset_reuse" in emitter.names()
    assert "asset_write" not in emitter.names()


def test_changed_asset_replaces_stale_output(site_root: Path) -> None:
    first = make_resolver(site_root, {"digest": True})
    old = first.resolve("img.png")
    first.finalize()

    (site_root / "assets" / "img" / "img.png").write_bytes(PNG_BYTES + b"\x01")
    second = make_resolver(site_root, {"digest": True})
    new = second.resolve("img.png")
    manifest_path = second.finalize(clean=True)

    output_root = site_root / "_site" / "assets"
    assert not (output_root / old.digest_path).exists()
    assert (output_root / new.digest_path).is_file()
    assert manifest_path.is_file()
    assert Manifest.load(manifest_path).lookup("img.png").digest_path == new.digest_path


def test_clean_leaves_files_outside_the_pipeline(site_root: Path) -> None:
    site_output = site_root / "_site"
    (site_output / "fonts").mkdir(parents=True)
    (site_output / "index.html").write_text("<html></html>", encoding="utf-8")
    (site_output / "fonts" / "x.woff").write_bytes(b"font")

    first = make_resolver(site_root, {"destination": "/", "digest": True})
    old = first.resolve("app.css")
    first.finalize(clean=True)
    (site_root / "assets" / "css" / "app.css").write_text("a {}\n", encoding="utf-8")
    second = make_resolver(site_root, {"destination": "/", "digest": True})
    new = second.resolve("app.css")
    manifest_path = second.finalize(clean=True)

    assert manifest_path == site_output / ".assets-manifest.json"
    assert (site_output / "index.html").is_file()
    assert (site_output / "fonts" / "x.woff").is_file()
    assert (site_output / new.digest_path).is_file()
    assert not (site_output / old.digest_path).exists()
    assert Manifest.load(manifest_path).retired() == []


def test_content_type_change_reapplies_defaults(site_root: Path) -> None:
    (site_root / "assets" / "css" / "theme.scss").write_text("a { color: $red; }", encoding="utf-8")
    resolver = make_resolver(site_root, {"caching": {"enabled": False}}, compiler=ScssCompiler())
    args = TagArguments(reference="theme.scss")
    asset = resolver.resolve("theme.scss", args)

    assert asset.content_type == "text/css"
    assert asset.text() == "a { color: red; }"
    assert args.attributes["rel"] == "stylesheet"
    assert asset.logical_path == "theme.css"
    assert args.attributes["href"] == "/assets/theme.css"
    assert (site_root / "_site" / "assets" / "theme.css").is_file()
    assert "theme.css" in resolver.manifest
    assert "theme.scss" not in resolver.manifest


@pytest.mark.parametrize(
    ("logical_path", "content_type", "expected"),
    [
        ("css/theme.scss", "text/css", "css/theme.css"),
        ("theme.min.sass", "text/css", "theme.min.css"),
        ("bundle", "application/javascript", "bundle.js"),
        ("data.yaml", "application/x-unknown", "data.yaml"),
        ("app.css", "text/css", "app.css"),
    ],
)
def test_compiled_asset_takes_the_extension_of_its_type(
    logical_path: str, content_type: str, expected: str
) -> None:
    asset = Asset.from_source(logical_path, b"source", "text/scss")
    compiled = asset.with_content(b"compiled", content_type)

    assert compiled.logical_path == expected
    assert compiled.content_type == content_type
    assert compiled.digest != asset.digest


def test_compiler_output_is_cached_on_disk(site_root: Path) -> None:
    compiler = ScssCompiler()
    make_resolver(site_root, compiler=compiler).resolve("app.css")
    make_resolver(site_root, compiler=compiler).resolve("app.css")

    assert compiler.calls == 1
    assert list((site_root / ".assetsmith-cache" / "assets").rglob("*.bin"))


def test_caching_compiler_keys_on_content_type(tmp_path: Path) -> None:
    inner = ScssCompiler()
    cache = CachingCompiler(inner, tmp_path)

    assert cache.compile(b"x", "text/scss") == (b"x", "text/css")
    assert cache.compile(b"x", "text/scss") == (b"x", "text/css")
    assert cache.compile(b"x", "text/plain") == (b"x", "text/plain")
    assert inner.calls == 2


def test_callbacks_observe_resolved_assets(resolver_factory) -> None:
    seen: list[tuple[str, str]] = []
    callbacks = ResolutionCallbacks(
        on_asset=lambda asset, args: seen.append((asset.logical_path, args.reference))
    )
    resolver = resolver_factory(callbacks=callbacks)
    resolver.resolve("img.png")

    assert seen == [("img.png", "img.png")]


def test_resolve_many_preserves_order(resolver_factory) -> None:
    resolver = resolver_factory()
    assets = resolver.resolve_many(["app.js", "img.png", "app.css"], max_workers=3)

    assert [asset.logical_path for asset in assets] == ["app.js", "img.png", "app.css"]
    assert len(resolver.manifest) == 3


def test_precompile_and_finalize(resolver_factory, site_root: Path) -> None:
    resolver = resolver_factory({"precompile": ["app.css", "img.png"]})
    assets = resolver.precompile()
    path = resolver.finalize()

    assert [asset.logical_path for asset in assets] == ["app.css", "img.png"]
    assert path == site_root / "_site" / "assets" / ".assets-manifest.json"
    assert {entry.logical_path for entry in Manifest.load(path)} == {"app.css", "img.png"}


def test_production_cdn_urls(site_root: Path) -> None:
    resolver = make_resolver(
        site_root,
        {"cdn": {"url": "https://cdn.io"}},
        environment=Environment.PRODUCTION,
        baseurl="/blog",
    )
    asset = resolver.resolve("img.png")
    assert resolver.url_for(asset) == "https://cdn.io/img.png"
