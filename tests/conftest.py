from pathlib import Path

import pytest

from assetsmith.core import AssetResolver, AssetsConfig, SiteSettings, resolve_config
from assetsmith.core.config import ENVIRONMENT_VARIABLES, Environment
from assetsmith.ui.cli.state import get_cli_state


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture(autouse=True)
def _clear_build_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_cli_events() -> None:
    get_cli_state().events.clear()


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "assets" / "img").mkdir(parents=True)
    (root / "assets" / "css").mkdir(parents=True)
    (root / "_assets" / "js").mkdir(parents=True)
    (root / "assets" / "img" / "img.png").write_bytes(PNG_BYTES)
    (root / "assets" / "css" / "app.css").write_text("body { color: red; }\n", encoding="utf-8")
    (root / "_assets" / "js" / "app.js").write_text("console.log('hi');\n", encoding="utf-8")
    return root


def make_resolver(
    root: Path,
    user_config: dict | None = None,
    *,
    environment: Environment = Environment.DEVELOPMENT,
    baseurl: str | None = None,
    **kwargs,
) -> AssetResolver:
    config: AssetsConfig = resolve_config(environment, user_config or {})
    site = SiteSettings(
        root=root,
        destination=root / "_site",
        baseurl=baseurl,
        environment=environment,
    )
    return AssetResolver(config, site, **kwargs)


@pytest.fixture
def resolver_factory(site_root: Path):
    def factory(user_config: dict | None = None, **kwargs) -> AssetResolver:
        return make_resolver(site_root, user_config, **kwargs)

    return factory
