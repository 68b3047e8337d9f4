"""Convert a ParsedDoc into its ordered list of source Blocks"""

from mdctx.core.extract.blocks import default_header_args, tokens_to_blocks
from mdctx.core.models import Block, ParsedDoc


def extract_blocks(parsed: ParsedDoc) -> list[Block]:
    """Extract every fenced block, applying frontmatter header-args as defaults."""
    return tokens_to_blocks(parsed.tokens, parsed.path, default_header_args(parsed.frontmatter))
