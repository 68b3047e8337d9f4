"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdctx.cli.commands import blocks_cmd, context_cmd, edit_cmd, tangle_cmd


app = typer.Typer(name="mdctx", no_args_is_help=True, help="Edit literate Markdown blocks with their tangle context")

app.command(name="blocks")(blocks_cmd)
app.command(name="context")(context_cmd)
app.command(name="edit")(edit_cmd)
app.command(name="tangle")(tangle_cmd)
