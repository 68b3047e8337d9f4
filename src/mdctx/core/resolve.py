"""Block context resolution: which blocks surround the one being edited"""

import logging
import posixpath
from typing import Optional

from mdctx.core.models import Block, ContextPartition
from mdctx.errors import BlockNotFoundError

logger = logging.getLogger(__name__)


def _norm_target(target: str) -> str:
    return posixpath.normpath(target.replace('\\', '/'))


def blocks_for_target(blocks: list[Block], target: Optional[str]) -> list[Block]:
    """Return the blocks tangled into target, in document order."""
    if not target:
        return []
    wanted = _norm_target(target)
    return [b for b in blocks if b.target_path and _norm_target(b.target_path) == wanted]


def resolve(blocks: list[Block], current_identity: str) -> ContextPartition:
    """Split blocks into those before and after the first block with current_identity.

    With no match every block lands in `after`; callers must treat that as
    no usable context. With several matches the first one wins.
    """
    before: list[Block] = []
    for i, block in enumerate(blocks):
        if block.identity != current_identity:
            before.append(block)
            continue
        after = list(blocks[i + 1:])
        dupes = sum(1 for b in after if b.identity == current_identity)
        if dupes:
            logger.warning(
                "Identity %s matches %d blocks; using the first", current_identity, dupes + 1
            )
        return ContextPartition(before=before, after=after)
    return ContextPartition(before=[], after=list(blocks))


def usable_partition(blocks: list[Block], current: Block) -> Optional[ContextPartition]:
    """Resolve context for current among blocks, or None when there is nothing to splice."""
    siblings = blocks_for_target(blocks, current.target_path)
    if not siblings:
        logger.debug("Block %s has no tangle target; no context", current.identity)
        return None
    if not any(b.identity == current.identity for b in siblings):
        logger.warning("Block %s not found among blocks for %s", current.identity, current.target_path)
        return None
    partition = resolve(siblings, current.identity)
    if partition.is_empty:
        logger.debug("Block %s is the only block for %s", current.identity, current.target_path)
        return None
    return partition


def find_block(blocks: list[Block], key: str) -> Block:
    """Locate a block by identity, then name, then 1-based index."""
    for block in blocks:
        if block.identity == key:
            return block
    named = [b for b in blocks if b.name == key]
    if named:
        if len(named) > 1:
            logger.warning("Name %r matches %d blocks; using the first", key, len(named))
        return named[0]
    if key.isdigit() and 1 <= int(key) <= len(blocks):
        return blocks[int(key) - 1]
    raise BlockNotFoundError(f"No block matches {key!r}")
