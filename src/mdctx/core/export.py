"""Tangle blocks into their target files and write edited blocks back"""

import logging
import re
from pathlib import Path

from mdctx.core.models import Block, ParsedDoc
from mdctx.core.resolve import blocks_for_target
from mdctx.core.session import ensure_directory, target_abspath

logger = logging.getLogger(__name__)


CLOSING_FENCE_RE = re.compile(r'^\s*(`{3,}|~{3,})\s*$')


def tangle_text(blocks: list[Block]) -> str:
    """Target file content for blocks, joined the same way the splice engine lays them out."""
    return "\n".join(b.raw_text for b in blocks)


def tangle_doc(blocks: list[Block], base_dir: Path) -> list[tuple[str, Path]]:
    """Write every tangle target under base_dir. Returns (target, path) pairs in document order."""
    targets = list(dict.fromkeys(b.target_path for b in blocks if b.target_path))
    results = []
    for target in targets:
        group = blocks_for_target(blocks, target)
        path = target_abspath(target, base_dir)
        mkdirp = next((b.mkdirp for b in group if b.mkdirp), None)
        ensure_directory(path.parent, mkdirp)
        path.write_text(tangle_text(group), encoding='utf-8')
        logger.info("Tangled %d block(s) into %s", len(group), path)
        results.append((target, path))
    return results


def replace_block(parsed: ParsedDoc, block: Block, text: str) -> str:
    """Return the raw document with block's fence body replaced by text; frontmatter is kept."""
    lines = parsed.markdown.splitlines(keepends=True)
    start, end = block.line_start, block.line_end
    if not 0 <= start < end <= len(lines):
        raise ValueError(f"Block {block.identity} lines {start}..{end} outside document")

    opening = lines[start]
    indent = opening[:len(opening) - len(opening.lstrip(' '))]
    close = end - 1 if end - 1 > start and CLOSING_FENCE_RE.match(lines[end - 1]) else end
    if text and not text.endswith("\n"):
        text += "\n"
    if text and not opening.endswith("\n"):
        lines[start] = opening + "\n"
    body_lines = [indent + line if line.strip() else line for line in text.splitlines(keepends=True)]

    body = "".join(lines[:start + 1] + body_lines + lines[close:])
    prefix = parsed.raw_markdown[:len(parsed.raw_markdown) - len(parsed.markdown)]
    return prefix + body
