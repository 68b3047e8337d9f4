"""Exception types raised by extraction, buffer edits, and edit sessions"""


class MdctxError(Exception):
    """Base class for mdctx errors."""


class BlockNotFoundError(MdctxError, LookupError):
    """No block matches the given identity, name, or index."""


class DirectoryMissingError(MdctxError, FileNotFoundError):
    """A tangle target's parent directory is absent and creation is not authorized."""

    def __init__(self, directory):
        self.directory = directory
        super().__init__(
            f"Directory {directory} does not exist; set ':mkdirp yes' on the block to create it"
        )


class ReadOnlyError(MdctxError):
    """An edit touched protected context text."""

    def __init__(self, start: int, end: int):
        self.start = start
        self.end = end
        super().__init__(f"Text is read-only: {start}..{end}")


class RegionError(MdctxError, IndexError):
    """A position lies outside the accessible (possibly narrowed) region."""


class SessionError(MdctxError, RuntimeError):
    """An edit session was driven out of order."""
