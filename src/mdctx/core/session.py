"""Edit session lifecycle: splice on enter, connect a language client, unsplice on exit"""

import logging
import os
from pathlib import Path
from typing import Optional

from mdctx.config import Settings
from mdctx.core.buffer import Buffer
from mdctx.core.lsp import LanguageClient, make_client
from mdctx.core.models import Block
from mdctx.core.resolve import usable_partition
from mdctx.core.splice import SpliceEngine, SpliceOptions
from mdctx.errors import DirectoryMissingError, SessionError

logger = logging.getLogger(__name__)


def target_abspath(target: str, base_dir: Path) -> Path:
    """Join base_dir with a relative target; absolute targets are kept."""
    return Path(os.path.abspath(Path(base_dir) / target))


def ensure_directory(directory: Path, mkdirp: Optional[str]) -> bool:
    """Make sure directory exists. Returns True if it was created.

    An existing directory always passes. A missing one is created only when
    mkdirp is 'yes' (any case); otherwise DirectoryMissingError is raised.
    """
    if directory.is_dir():
        return False
    if (mkdirp or "").strip().lower() != "yes":
        raise DirectoryMissingError(directory)
    directory.mkdir(parents=True, exist_ok=True)
    logger.info("Created directory %s", directory)
    return True


class SessionConnector:
    """Gives a spliced buffer its tangle target as file identity and attaches a language client."""

    def __init__(self, settings: Settings, client: Optional[LanguageClient] = None):
        self.settings = settings
        self.client = client or make_client(settings.lsp_strategy)

    def base_dir(self, doc_dir: Path) -> Path:
        return Path(self.settings.staging_dir) if self.settings.staging_dir else Path(doc_dir)

    def connect(self, buffer: Buffer, block: Block, doc_dir: Path) -> Optional[Path]:
        if not block.target_path:
            return None
        path = target_abspath(block.target_path, self.base_dir(doc_dir))
        ensure_directory(path.parent, block.mkdirp)
        buffer.file_path = path
        self.client.attach(path)
        return path


class EditSession:
    """One block opened for editing with the rest of its target file as context.

    Hosts call enter() when the edit buffer is created and exit() before its
    text is written back.
    """

    def __init__(
        self,
        block: Block,
        blocks: list[Block],
        settings: Settings = None,
        client: Optional[LanguageClient] = None,
        doc_dir: Optional[Path] = None,
        ):
        self.block = block
        self.blocks = blocks
        self.settings = settings or Settings()
        self.doc_dir = Path(doc_dir) if doc_dir else Path.cwd()
        self.connector = SessionConnector(self.settings, client)
        self.engine = SpliceEngine()
        self.buffer: Optional[Buffer] = None
        self.file_path: Optional[Path] = None

    @property
    def spliced(self) -> bool:
        return self.engine.spliced

    @property
    def editable_text(self) -> str:
        if self.buffer is None:
            return self.block.raw_text
        return self.engine.editable_text(self.buffer)

    def enter(self, connect: bool = True) -> Buffer:
        """Create the edit buffer and splice context into it.

        DirectoryMissingError from the connector propagates, but the buffer
        stays spliced and exit() still restores it.
        """
        if self.buffer is not None:
            raise SessionError(f"Session for block {self.block.identity} already entered")
        self.buffer = Buffer(self.block.raw_text)
        partition = usable_partition(self.blocks, self.block)
        spliced = self.engine.splice(self.buffer, partition, SpliceOptions.from_settings(self.settings))
        if spliced and connect:
            try:
                self.file_path = self.connector.connect(self.buffer, self.block, self.doc_dir)
            except DirectoryMissingError as e:
                logger.error("Cannot attach language client: %s", e)
                raise
        return self.buffer

    def replace_text(self, text: str) -> None:
        """Replace the whole editable region with text, as a user edit would."""
        if self.buffer is None:
            raise SessionError("Session not entered")
        if self.spliced:
            self.buffer.replace_region(self.engine.start, self.engine.end, text)
        else:
            self.buffer.replace_region(self.buffer.point_min, self.buffer.point_max, text)

    def exit(self) -> str:
        """Strip context and return the edited block text."""
        if self.buffer is None:
            return self.block.raw_text
        self.engine.unsplice(self.buffer)
        text = self.buffer.text
        self.buffer = None
        return text
