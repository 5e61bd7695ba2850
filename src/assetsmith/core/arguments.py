"""Arguments attached to a single asset tag invocation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .config import coerce_flag
from .exceptions import MixedArgumentError


_DATA_URL_KEYS = frozenset({"data", "data_url", "data_uri", "data-url", "data-uri"})
_FLAG_KEYS = frozenset({"inline", "path", "external"})
_TYPE_KEYS = frozenset({"type", "content_type", "content-type"})

MUTUALLY_EXCLUSIVE: tuple[tuple[str, str], ...] = (
    ("path", "data_url"),
    ("path", "inline"),
    ("data_url", "inline"),
)

@dataclass(slots=True)
class TagArguments:
    """Parsed tag arguments.

    ``reference`` is the asset reference after parsing; ``original`` keeps the
    raw text so diagnostics can show both. Keys that are not tag flags are
    passed through as HTML ``attributes``.
    """

    reference: str
    original: str | None = None
    inline: bool = False
    path: bool = False
    data_url: bool = False
    external: bool | None = None
    content_type: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        reference: str,
        mapping: Mapping[str, Any] | None = None,
        *,
        original: str | None = None,
    ) -> TagArguments:
        """Split ``mapping`` into tag flags and passthrough attributes.

        Keys may carry the ``@`` prefix used by tag syntax (``@path``).
        """
        args = cls(reference=reference, original=original)
        for raw_key, value in (mapping or {}).items():
            key = str(raw_key).lstrip("@")
            lowered = key.lower()
            if lowered in _DATA_URL_KEYS:
                args.data_url = coerce_flag(value)
            elif lowered in _FLAG_KEYS:
                setattr(args, lowered, coerce_flag(value))
            elif lowered in _TYPE_KEYS:
                args.content_type = str(value) if value else None
            else:
                args.attributes[key] = value
        return args

    def validate(self) -> None:
        """Reject flag combinations that cannot be honoured together."""
        for first, second in MUTUALLY_EXCLUSIVE:
            if getattr(self, first) and getattr(self, second):
                raise MixedArgumentError(first, second)

    def set_default(self, name: str, value: Any) -> None:
        """Set an HTML attribute unless the caller already provided it."""
        self.attributes.setdefault(name, value)

    def as_dict(self) -> dict[str, Any]:
        """Return a flat mapping suitable for diagnostics."""
        payload: dict[str, Any] = {"reference": self.reference}
        if self.original is not None and self.original != self.reference:
            payload["original"] = self.original
        for name in ("inline", "path", "data_url"):
            if getattr(self, name):
                payload[name] = True
        if self.external is not None:
            payload["external"] = self.external
        if self.content_type:
            payload["type"] = self.content_type
        payload.update(self.attributes)
        return payload


__all__ = ["MUTUALLY_EXCLUSIVE", "TagArguments"]
