"""SHA-256 hashing for structural block identities"""

import hashlib


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def block_identity(path: str, line: int, length: int = 12) -> str:
    """Return a short stable identity for the fence opening at `line` of `path`."""
    return sha256(f"{path}:{line}")[:length]
