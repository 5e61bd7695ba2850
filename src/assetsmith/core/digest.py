"""Content digests used for cache busting and subresource integrity."""

from __future__ import annotations

import base64
import hashlib
from pathlib import PurePosixPath


DIGEST_ALGORITHM = "sha256"
DIGEST_TOKEN_LENGTH = 16


def digest_bytes(data: bytes) -> str:
    """Return the hex SHA-256 digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def digest_text(text: str) -> str:
    """Return the hex SHA-256 digest of ``text`` encoded as UTF-8."""
    return digest_bytes(text.encode("utf-8"))


def digest_token(digest: str) -> str:
    """Shorten a hex digest to the token injected into file names."""
    return digest[:DIGEST_TOKEN_LENGTH]


def digest_path(logical_path: str, digest: str) -> str:
    """Insert the digest token before the extension of ``logical_path``.

    ``css/app.css`` becomes ``css/app-<token>.css``; ``jquery.min.js``
    becomes ``jquery.min-<token>.js``.
    """
    path = PurePosixPath(logical_path)
    name = f"{path.stem}-{digest_token(digest)}{path.suffix}"
    parent = path.parent.as_posix()
    return name if parent in {".", ""} else f"{parent}/{name}"


def integrity(data: bytes) -> str:
    """Return the subresource-integrity value for ``data``."""
    payload = base64.b64encode(hashlib.sha256(data).digest()).decode("ascii")
    return f"{DIGEST_ALGORITHM}-{payload}"


__all__ = [
    "DIGEST_ALGORITHM",
    "DIGEST_TOKEN_LENGTH",
    "digest_bytes",
    "digest_path",
    "digest_text",
    "digest_token",
    "integrity",
]
