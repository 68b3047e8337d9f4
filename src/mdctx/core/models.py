"""Data models for extracted blocks, context partitions, and parsed documents"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class Block(BaseModel):
    """A fenced source block of a literate document."""
    model_config = ConfigDict(frozen=True)

    identity:    str                        # source-position hash; unique per document
    language:    Optional[str] = None
    target_path: Optional[str] = None       # tangle target, relative to the base dir or absolute
    header_args: dict[str, str] = {}
    raw_text:    str                        # fence body, trailing newline included
    name:        Optional[str] = None
    line_start:  int = 0                    # fence span in body lines, half-open
    line_end:    int = 0

    @property
    def mkdirp(self) -> Optional[str]:
        return self.header_args.get("mkdirp")


@dataclass
class ContextPartition:
    """Blocks of one target split around the block being edited."""
    before: list[Block] = field(default_factory=list)
    after:  list[Block] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.before and not self.after


@dataclass
class ParsedDoc:
    """Internal parse result carrying markdown-it tokens; not persisted."""
    path:         Path
    raw_markdown: str          # full file content (includes frontmatter)
    markdown:     str          # body only (frontmatter stripped)
    frontmatter:  dict[str, Any]
    tokens:       list         # markdown-it Token objects
