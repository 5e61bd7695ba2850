"""Warnings, errors and build events raised while resolving assets.

The resolver never prints. It hands messages and structured events to a
``DiagnosticEmitter``; the CLI renders them with rich, library callers get
plain logging or nothing at all.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Sink for resolver diagnostics."""

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Drop every diagnostic."""

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Send diagnostics to a ``logging.Logger``.

    Events with a summary are logged at INFO, the rest at DEBUG with their payload.
    """

    def __init__(self, logger_obj: logging.Logger | None = None) -> None:
        self._logger = logger_obj or logger

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.warning(message, exc_info=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.error(message, exc_info=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        summary = format_event_message(name, payload)
        if summary is None:
            self._logger.debug("%s %s", name, dict(payload))
        else:
            self._logger.info(summary)


def ensure_emitter(emitter: DiagnosticEmitter | None) -> DiagnosticEmitter:
    return emitter if emitter is not None else NullEmitter()


def record_event(
    emitter: DiagnosticEmitter | None, event: str, payload: Mapping[str, Any]
) -> None:
    """Send ``event`` to ``emitter``, or drop it when there is none."""
    ensure_emitter(emitter).event(event, payload)


def _compile_summary(data: Mapping[str, Any]) -> str:
    content_type = data.get("content_type")
    suffix = f" ({content_type})" if content_type else ""
    return f"Compiling: {data.get('logical_path') or '<unknown>'}{suffix}"


def _write_summary(data: Mapping[str, Any]) -> str:
    suffix = " (gzip)" if data.get("gzip") else ""
    return f"Writing: {data.get('target') or '<unknown>'}{suffix}"


_SUMMARIES: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "asset_compile": _compile_summary,
    "asset_write": _write_summary,
    "asset_reuse": lambda data: (
        f"Reusing unchanged asset: {data.get('logical_path') or '<unknown>'}"
    ),
    "manifest_save": lambda data: (
        f"Saved manifest with {data.get('entries', 0)} entries: {data.get('path') or '<unknown>'}"
    ),
    "manifest_clean": lambda data: (
        f"{'Would remove' if data.get('dry_run') else 'Removed'} "
        f"{data.get('removed', 0)} stale build outputs"
    ),
}


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a one-line summary for build events worth showing, ``None`` otherwise."""
    summary = _SUMMARIES.get(name)
    return summary(payload) if summary is not None else None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "ensure_emitter",
    "format_event_message",
    "record_event",
]
