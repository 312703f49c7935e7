"""One-way hashing of plaintext passwords."""

from __future__ import annotations

import hashlib

from .errors import AlgorithmUnavailableError

DEFAULT_ALGORITHM = "sha256"


def hash_password(plaintext: str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the hex digest of ``plaintext`` under ``algorithm``.

    The digest is unsalted, so equal passwords always hash to equal strings.
    """

    try:
        digest = hashlib.new(algorithm)
    except (ValueError, TypeError) as exc:
        raise AlgorithmUnavailableError(f"Hash algorithm {algorithm!r} is not available.") from exc

    digest.update(plaintext.encode("utf-8"))
    return digest.hexdigest()
