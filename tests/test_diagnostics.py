from __future__ import annotations

import logging

import pytest

from assetsmith.ui.cli.diagnostics import CliEmitter
from assetsmith.ui.cli.state import get_cli_state, set_cli_state
from assetsmith.core.diagnostics import LoggingEmitter, NullEmitter, format_event_message
from assetsmith.core.exceptions import (
    AssetNotFoundError,
    UnreadableSourceError,
    exception_hint,
    exception_messages,
)


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})


def test_logging_emitter_logs_messages(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(logging.getLogger("assetsmith.test"))
    with caplog.at_level(logging.DEBUG, logger="assetsmith"):
        emitter.error("boom")
        emitter.event("asset_reuse", {"logical_path": "img.png"})
        emitter.event("asset_resolve", {"reference": "img.png"})
    levels = {record.message: record.levelno for record in caplog.records}
    assert levels["boom"] == logging.ERROR
    assert levels["Reusing unchanged asset: img.png"] == logging.INFO
    assert levels["asset_resolve {'reference': 'img.png'}"] == logging.DEBUG


def test_cli_emitter_bridges_state(capsys: pytest.CaptureFixture[str]) -> None:
    set_cli_state(verbosity=1, debug=False)
    state = get_cli_state()
    emitter = CliEmitter(state=state)

    emitter.warning("Heads up", exc=None)
    emitter.error("Boom", exc=None)
    emitter.event("asset_compile", {"logical_path": "app.css", "content_type": "text/css"})

    captured = capsys.readouterr()
    combined_output = f"{captured.out}\n{captured.err}"
    assert "Heads up" in combined_output
    assert "Boom" in combined_output
    assert "Compiling: app.css (text/css)" in combined_output
    assert state.consume_events("asset_compile") == [
        {"logical_path": "app.css", "content_type": "text/css"}
    ]
    set_cli_state(verbosity=0)


@pytest.mark.parametrize(
    ("name", "payload", "expected"),
    [
        ("asset_write", {"target": "/site/a.css", "gzip": True}, "Writing: /site/a.css (gzip)"),
        ("asset_write", {"target": "/site/a.css"}, "Writing: /site/a.css"),
        (
            "manifest_save",
            {"path": "m.json", "entries": 3},
            "Saved manifest with 3 entries: m.json",
        ),
        ("manifest_clean", {"removed": 2}, "Removed 2 stale build outputs"),
        ("manifest_clean", {"removed": 1, "dry_run": True}, "Would remove 1 stale build outputs"),
        ("asset_resolve", {"reference": "a.css"}, None),
    ],
)
def test_format_event_message(name: str, payload: dict, expected: str | None) -> None:
    assert format_event_message(name, payload) == expected


def test_exception_hint_reports_root_cause() -> None:
    try:
        try:
            raise PermissionError("denied")
        except PermissionError as exc:
            raise UnreadableSourceError("Unable to read asset 'a.png'") from exc
    except UnreadableSourceError as exc:
        error = exc

    assert exception_messages(error) == ["Unable to read asset 'a.png'", "denied"]
    assert exception_hint(error) == "denied"


def test_not_found_message_mentions_parsed_reference() -> None:
    assert str(AssetNotFoundError("a.png")) == "Unable to find asset 'a.png'"
    assert str(AssetNotFoundError("{{ x }}", "a.png")) == (
        "Unable to find asset '{{ x }}' (parsed as 'a.png')"
    )
