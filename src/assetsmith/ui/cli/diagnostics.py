"""Route resolver diagnostics to the rich CLI output."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from assetsmith.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_info, emit_warning, get_cli_state


class CliEmitter:
    """Print warnings and errors on stderr and keep every event on the CLI state.

    Event summaries are only printed with ``--verbose``; commands read the
    recorded events back to report what a build did.
    """

    def __init__(self, state: CLIState | None = None) -> None:
        self.state = state or get_cli_state()

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.state.record_event(name, payload)
        summary = format_event_message(name, payload)
        if summary is not None:
            emit_info(summary)


__all__ = ["CliEmitter"]
