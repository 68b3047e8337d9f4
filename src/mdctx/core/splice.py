"""Splice protected context blocks around an editable block, and strip them again

The editable region lies between two markers. Preceding context is inserted
while the start marker advances; following context is inserted while the end
marker stays; both land outside the region. Afterwards the start marker stays
and the end marker advances, so text typed at either edge of the region stays
inside it. Unsplice deletes everything outside the markers, tail first.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mdctx.core.buffer import Buffer, Marker
from mdctx.core.models import Block, ContextPartition

logger = logging.getLogger(__name__)


CONTEXT_FACE = "mdctx-context"


class SpliceState(str, Enum):
    unspliced = "unspliced"
    spliced = "spliced"


@dataclass(frozen=True)
class SpliceOptions:
    narrow: bool = False

    @classmethod
    def from_settings(cls, settings) -> "SpliceOptions":
        return cls(narrow=settings.narrow)


def before_segment(block: Block) -> str:
    """Text injected for a block preceding the edited one."""
    return block.raw_text + "\n"


def after_segment(block: Block) -> str:
    """Text injected for a block following the edited one."""
    return "\n" + block.raw_text


class SpliceEngine:
    """Owns the editable-region markers of one edit session."""

    def __init__(self):
        self.state = SpliceState.unspliced
        self.start: Optional[Marker] = None
        self.end: Optional[Marker] = None

    @property
    def spliced(self) -> bool:
        return self.state is SpliceState.spliced

    def _boundaries_valid(self, buffer: Buffer) -> bool:
        if self.start is None or self.end is None:
            return False
        if not (self.start.valid and self.end.valid):
            return False
        return 0 <= self.start.position <= self.end.position <= len(buffer)

    def editable_text(self, buffer: Buffer) -> str:
        """Current text of the editable region, or the whole buffer when unspliced."""
        if self.spliced and self._boundaries_valid(buffer):
            return buffer.substring(self.start, self.end)
        return buffer.text

    def splice(
        self,
        buffer: Buffer,
        partition: Optional[ContextPartition],
        options: SpliceOptions = SpliceOptions(),
        ) -> bool:
        """Insert partition as protected context around the buffer text. Returns True if spliced."""
        if self.spliced:
            logger.warning("Buffer already spliced; ignoring splice request")
            return False
        if partition is None or partition.is_empty:
            logger.debug("No context to splice")
            return False

        with buffer.atomic_change(), buffer.inhibit_read_only():
            # End advances too while the start side fills, in case the region is empty
            start = buffer.make_marker(buffer.point_min, insertion_type=True)
            end = buffer.make_marker(buffer.point_max, insertion_type=True)

            for block in partition.before:
                buffer.insert(
                    start, before_segment(block),
                    read_only=True, rear_nonsticky=True, face=CONTEXT_FACE,
                )

            start.insertion_type = False
            end.insertion_type = False
            at = end.position
            for block in partition.after:
                text = after_segment(block)
                buffer.insert(at, text, read_only=True, rear_nonsticky=True, face=CONTEXT_FACE)
                at += len(text)

            end.insertion_type = True
            if options.narrow:
                buffer.narrow_to_region(start, end)
            buffer.goto_char(start)

        self.start, self.end = start, end
        self.state = SpliceState.spliced
        logger.debug(
            "Spliced %d block(s) before and %d after; editable region %d..%d",
            len(partition.before), len(partition.after), start.position, end.position,
        )
        return True

    def _discard(self, buffer: Buffer) -> None:
        for marker in (self.start, self.end):
            if marker is not None:
                buffer.delete_marker(marker)
        self.start = self.end = None
        self.state = SpliceState.unspliced

    def unsplice(self, buffer: Buffer) -> bool:
        """Remove injected context, leaving only the editable region. Returns True if removed."""
        if not self._boundaries_valid(buffer):
            if self.start is not None or self.end is not None:
                logger.warning("Stale splice boundaries; leaving buffer untouched")
            self._discard(buffer)
            return False

        with buffer.atomic_change(), buffer.inhibit_read_only():
            buffer.widen()
            buffer.delete(self.end, len(buffer))
            buffer.delete(0, self.start)
            buffer.goto_char(0)

        logger.debug("Unspliced; %d characters remain", len(buffer))
        self._discard(buffer)
        return True
