"""Custom exception hierarchy for the asset pipeline."""

from __future__ import annotations

from collections.abc import Iterable


class AssetPipelineError(RuntimeError):
    """Base exception for asset pipeline failures."""


class ConfigurationError(AssetPipelineError):
    """Raised when the assets configuration holds values that cannot be coerced."""


class ManifestError(AssetPipelineError):
    """Raised when a persisted manifest cannot be parsed."""


class AssetNotFoundError(AssetPipelineError):
    """Raised when an internal reference matches no configured source directory."""

    def __init__(self, reference: str, parsed_reference: str | None = None) -> None:
        self.reference = reference
        self.parsed_reference = parsed_reference if parsed_reference is not None else reference
        if self.parsed_reference != reference:
            message = f"Unable to find asset '{reference}' (parsed as '{self.parsed_reference}')"
        else:
            message = f"Unable to find asset '{reference}'"
        super().__init__(message)


class UnreadableSourceError(AssetPipelineError):
    """Raised when the bytes of a located asset cannot be read."""


class InvalidCombinationError(AssetPipelineError):
    """Raised when tag arguments cannot be used together."""

    def __init__(self, message: str, arguments: Iterable[str] = ()) -> None:
        self.arguments = tuple(arguments)
        super().__init__(message)


class MixedArgumentError(InvalidCombinationError):
    """Raised when two mutually exclusive arguments are given together."""

    def __init__(self, argument: str, mixed: str) -> None:
        super().__init__(f"cannot use @{argument} with @{mixed}", (argument, mixed))


class InvalidExternalError(InvalidCombinationError):
    """Raised when an argument requires a local asset but the reference is external."""

    def __init__(self, argument: str) -> None:
        super().__init__(f"cannot use `@{argument}' with external urls", (argument, "external"))


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "AssetNotFoundError",
    "AssetPipelineError",
    "ConfigurationError",
    "InvalidCombinationError",
    "InvalidExternalError",
    "ManifestError",
    "MixedArgumentError",
    "UnreadableSourceError",
    "exception_hint",
    "exception_messages",
]
