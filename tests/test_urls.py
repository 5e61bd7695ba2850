from pathlib import Path

import pytest

from assetsmith.core.config import Environment, resolve_config
from assetsmith.core.urls import (
    build_url,
    in_cache_dir,
    in_destination_dir,
    make_https,
    strip_paths,
    strip_secondary_content_type,
    strip_slashes,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("/a/b/", "a/b"),
        ("a/b", "a/b"),
        ("/assets", "assets"),
        ("", None),
        (None, None),
        ("/", None),
    ],
)
def test_strip_slashes(value: str | None, expected: str | None) -> None:
    assert strip_slashes(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("//cdn.example.com/x", "https://cdn.example.com/x"),
        ("http://cdn.example.com/x", "https://cdn.example.com/x"),
        ("https://cdn.example.com/x", "https://cdn.example.com/x"),
        ("", None),
        (None, None),
    ],
)
def test_make_https(value: str | None, expected: str | None) -> None:
    assert make_https(value) == expected


def test_make_https_only_rewrites_the_scheme() -> None:
    assert make_https("http://cdn.io/a//b") == "https://cdn.io/a//b"


def test_production_without_cdn_uses_baseurl_and_destination() -> None:
    config = resolve_config("production", {"cdn": None, "destination": "/assets"})
    url = build_url(
        "img-abc123.png",
        config,
        environment=Environment.PRODUCTION,
        baseurl="/blog",
    )
    assert url == "/blog/assets/img-abc123.png"


def test_production_with_cdn_returns_absolute_url() -> None:
    config = resolve_config(
        "production",
        {"cdn": {"url": "https://cdn.io", "baseurl": False, "destination": False}},
    )
    url = build_url(
        "img-abc123.png",
        config,
        environment=Environment.PRODUCTION,
        baseurl="/blog",
    )
    assert url == "https://cdn.io/img-abc123.png"


def test_cdn_can_opt_segments_back_in() -> None:
    config = resolve_config(
        "production",
        {"cdn": {"url": "//cdn.io/", "baseurl": True, "destination": True}},
    )
    url = build_url("app.css", config, environment=Environment.PRODUCTION, baseurl="/blog/")
    assert url == "https://cdn.io/blog/assets/app.css"


def test_cdn_is_ignored_in_development() -> None:
    config = resolve_config("development", {"cdn": {"url": "https://cdn.io"}})
    url = build_url("app.css", config, environment=Environment.DEVELOPMENT, baseurl="/blog")
    assert url == "/blog/assets/app.css"


def test_empty_configuration_yields_root() -> None:
    config = resolve_config("production", {"destination": None})
    assert build_url(None, config, environment=Environment.PRODUCTION) == "/"
    assert build_url("", config, environment=Environment.PRODUCTION) == "/"


def test_destination_only() -> None:
    config = resolve_config("development")
    assert build_url(None, config) == "/assets"
    assert build_url("/img.png", config) == "/assets/img.png"


def test_in_destination_dir_stays_inside_site(tmp_path: Path) -> None:
    config = resolve_config("development")

    assert in_destination_dir(config, tmp_path, "img.png") == tmp_path / "assets" / "img.png"
    assert in_destination_dir(config, tmp_path, "../../etc/passwd") == (
        tmp_path / "assets" / "etc" / "passwd"
    )


def test_in_cache_dir(tmp_path: Path) -> None:
    config = resolve_config("development", {"caching": {"path": "/.cache/assets/"}})
    assert in_cache_dir(config, tmp_path, "ab", "key.bin") == (
        tmp_path / ".cache" / "assets" / "ab" / "key.bin"
    )


def test_strip_paths() -> None:
    sources = ("assets/css", "css")
    assert strip_paths("assets/css/app.css", sources) == "app.css"
    assert strip_paths("vendor/app.css", sources) == "vendor/app.css"


def test_strip_secondary_content_type() -> None:
    assert strip_secondary_content_type("image/svg+xml") == "image/xml"
    assert strip_secondary_content_type("text/css") == "text/css"
    with pytest.raises(ValueError):
        strip_secondary_content_type("a/b/c")
