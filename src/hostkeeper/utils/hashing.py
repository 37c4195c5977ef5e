"""Content fingerprints for managed files."""

import hashlib


def compute_hash(data: bytes, algorithm: str = "sha256") -> str:
    """Hex digest of ``data``."""
    hasher = hashlib.new(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


def hash_text(text: str, algorithm: str = "sha256") -> str:
    """Hex digest of a UTF-8 string.

    Used to stamp rendered configuration into its managed header, so a
    later probe can tell whether the desired content has changed.
    """
    return compute_hash(text.encode("utf-8"), algorithm)
