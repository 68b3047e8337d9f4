"""Fence-token-to-Block conversion and header argument parsing"""

import logging
import shlex
from pathlib import Path
from typing import Any, Optional

from mdctx.core.models import Block
from mdctx.core.utils.hashing import block_identity

logger = logging.getLogger(__name__)


# Extensions used for ':tangle yes' targets
LANG_EXTENSIONS: dict[str, str] = {
    'python':     'py',
    'py':         'py',
    'javascript': 'js',
    'js':         'js',
    'typescript': 'ts',
    'ts':         'ts',
    'shell':      'sh',
    'sh':         'sh',
    'bash':       'sh',
    'rust':       'rs',
    'go':         'go',
    'ruby':       'rb',
    'c':          'c',
    'cpp':        'cpp',
    'java':       'java',
    'elisp':      'el',
    'emacs-lisp': 'el',
    'yaml':       'yaml',
    'toml':       'toml',
}


def _normalize_value(value: Any) -> str:
    """Stringify a header arg value; YAML booleans become yes/no."""
    if isinstance(value, bool):
        return 'yes' if value else 'no'
    return str(value)


def _split_info(info: str) -> list[str]:
    """Split an info string shell-style; unbalanced quotes fall back to whitespace."""
    try:
        return shlex.split(info)
    except ValueError:
        logger.warning("Unbalanced quotes in fence info %r; splitting on whitespace", info)
        return info.split()


def parse_info(info: str) -> tuple[Optional[str], dict[str, str]]:
    """Split a fence info string into (language, header_args).

    `python :tangle "src/my app.py" :mkdirp yes` gives
    ('python', {'tangle': 'src/my app.py', 'mkdirp': 'yes'}). A key with
    no value maps to ''.
    """
    words = _split_info(info)
    language = None
    if words and not words[0].startswith(':'):
        language = words.pop(0)

    args: dict[str, str] = {}
    key = None
    values: list[str] = []
    for word in words:
        if word.startswith(':') and len(word) > 1:
            if key is not None:
                args[key] = ' '.join(values)
            key, values = word[1:].lower(), []
        elif key is not None:
            values.append(word)
        else:
            logger.debug("Ignoring stray fence info word %r", word)
    if key is not None:
        args[key] = ' '.join(values)
    return language, args


def default_header_args(frontmatter: dict[str, Any]) -> dict[str, str]:
    """Read document-wide header args from the 'header-args' frontmatter mapping."""
    raw = frontmatter.get('header-args') or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid header-args: expected a mapping, got {type(raw).__name__}")
    return {str(k).lower(): _normalize_value(v) for k, v in raw.items()}


def tangle_target(args: dict[str, str], language: Optional[str], doc_path: Path) -> Optional[str]:
    """Resolve the ':tangle' header arg to a target path, or None if not tangled."""
    tangle = args.get('tangle', '').strip()
    if not tangle or tangle.lower() == 'no':
        return None
    if tangle.lower() == 'yes':
        ext = LANG_EXTENSIONS.get((language or '').lower(), language or 'txt')
        return f"{doc_path.stem}.{ext}"
    return tangle


def tokens_to_blocks(
    tokens: list,
    doc_path: Path,
    defaults: dict[str, str] = None,
    ) -> list[Block]:
    """Convert the fence tokens of a document to Blocks, in document order."""
    blocks: list[Block] = []
    for tok in tokens:
        if tok.type != 'fence':
            continue
        language, args = parse_info(tok.info or '')
        merged = {**(defaults or {}), **args}
        start, end = tok.map if tok.map else (0, 0)
        blocks.append(Block(
            identity=block_identity(str(doc_path), start),
            language=language,
            target_path=tangle_target(merged, language, doc_path),
            header_args=merged,
            raw_text=tok.content,
            name=merged.get('name') or None,
            line_start=start,
            line_end=end,
        ))
    return blocks
