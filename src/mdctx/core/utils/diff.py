"""Unified diff rendering for block write-back previews"""

import difflib


def unified_diff(old: str, new: str, path: str, context: int = 3) -> str:
    """Return a unified diff of old -> new labelled a/<path> and b/<path>. Empty if identical."""
    return "".join(difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        n=context,
    ))
