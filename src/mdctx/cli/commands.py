"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdctx.config import Settings, load_config
from mdctx.core.export import replace_block, tangle_doc
from mdctx.core.extract.extract import extract_blocks
from mdctx.core.lsp import LspStrategy
from mdctx.core.models import Block, ParsedDoc
from mdctx.core.parse import parse_file
from mdctx.core.resolve import find_block
from mdctx.core.session import EditSession
from mdctx.core.splice import CONTEXT_FACE
from mdctx.core.utils.diff import unified_diff
from mdctx.errors import BlockNotFoundError, DirectoryMissingError


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling; configure logging once."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    if not logging.root.handlers:
        logging.basicConfig(
            level=settings.log_level,
            format="%(levelname)s  %(name)s  %(message)s",
        )
    return settings


def _load(path: str, settings: Settings) -> tuple[ParsedDoc, list[Block]]:
    """Parse a document and extract its blocks, failing cleanly on bad input."""
    try:
        parsed = parse_file(Path(path), settings.parser_config)
        return parsed, extract_blocks(parsed)
    except (OSError, ValueError) as e:
        _fail(f"Cannot read {path}", e)


def _select(blocks: list[Block], key: str) -> Block:
    try:
        return find_block(blocks, key)
    except BlockNotFoundError as e:
        _fail(str(e))


def blocks_cmd(
    path: Annotated[str, typer.Argument(help="Markdown document")],
    ):
    """List source blocks with their identity, language, and tangle target."""
    settings = _settings()
    _, blocks = _load(path, settings)
    if not blocks:
        typer.echo("No source blocks found.")
        raise typer.Exit(1)
    for i, b in enumerate(blocks, start=1):
        line = f"{i:>3}  {b.identity}  {b.language or '-':<10}  {b.target_path or '-':<24}  {b.name or ''}"
        typer.echo(line.rstrip())


def context_cmd(
    path: Annotated[str, typer.Argument(help="Markdown document")],
    block: Annotated[str, typer.Argument(help="Block identity, name, or 1-based index")],
    narrow: Annotated[Optional[bool], typer.Option("--narrow/--no-narrow", help="Show only the editable block")] = None,
    ):
    """Print a block spliced into the other blocks of its tangle target."""
    settings = _settings(overrides={"narrow": narrow})
    parsed, blocks = _load(path, settings)
    current = _select(blocks, block)

    session = EditSession(current, blocks, settings, doc_dir=parsed.path.parent)
    buffer = session.enter(connect=False)
    if not session.spliced:
        typer.echo("(no context for this block)", err=True)
    for text, face in buffer.segments():
        typer.echo(typer.style(text, bg=settings.context_bg) if face == CONTEXT_FACE else text, nl=False)
    session.exit()


def edit_cmd(
    path: Annotated[str, typer.Argument(help="Markdown document")],
    block: Annotated[str, typer.Argument(help="Block identity, name, or 1-based index")],
    text_file: Annotated[Path, typer.Option("--text-file", exists=True, readable=True, help="New block content")],
    diff: Annotated[bool, typer.Option("--diff", help="Print a unified diff instead of writing")] = False,
    connect: Annotated[bool, typer.Option("--connect", help="Attach a language client to the tangle target")] = False,
    strategy: Annotated[Optional[LspStrategy], typer.Option("--lsp-strategy", help="Language client strategy")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Base dir for tangle targets")] = None,
    ):
    """Run an edit session on a block and write the edited text back into the document."""
    settings = _settings(overrides={"lsp_strategy": strategy, "staging_dir": staging})
    parsed, blocks = _load(path, settings)
    current = _select(blocks, block)

    session = EditSession(current, blocks, settings, doc_dir=parsed.path.parent)
    try:
        session.enter(connect=connect)
    except DirectoryMissingError as e:
        session.exit()
        _fail("Cannot attach language client", e)
    if session.file_path:
        typer.echo(f"Attached {session.file_path} ({settings.lsp_strategy.value})")

    session.replace_text(text_file.read_text(encoding="utf-8"))
    updated = replace_block(parsed, current, session.exit())

    if diff:
        typer.echo(unified_diff(parsed.raw_markdown, updated, path), nl=False)
        return
    if updated == parsed.raw_markdown:
        typer.echo("unchanged")
        return
    parsed.path.write_text(updated, encoding="utf-8")
    typer.echo(f"updated: block {current.identity}")


def tangle_cmd(
    path: Annotated[str, typer.Argument(help="Markdown document")],
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Base dir for tangle targets")] = None,
    ):
    """Write every tangle target of a document."""
    settings = _settings(overrides={"staging_dir": staging})
    parsed, blocks = _load(path, settings)
    base_dir = Path(settings.staging_dir) if settings.staging_dir else parsed.path.parent
    try:
        results = tangle_doc(blocks, base_dir)
    except DirectoryMissingError as e:
        _fail("Tangle failed", e)
    if not results:
        typer.echo("Nothing to tangle.")
        return
    for target, out_file in results:
        typer.echo(f"  {target} -> {out_file}")
    typer.echo(f"Tangled {len(results)} file(s)")
