"""vocab-srs CLI main entry point."""

from __future__ import annotations

from typing import Annotated

import typer

from vocab_srs.cli._helpers import setup_logging
from vocab_srs.cli.commands.cards import decks, history, stats, sync
from vocab_srs.cli.commands.config_cmd import config_app
from vocab_srs.cli.commands.data import export_cmd, import_cmd
from vocab_srs.cli.commands.review import review
from vocab_srs.cli.commands.server import serve

# Main app
app = typer.Typer(
    name="vsrs",
    help="vocab-srs - FSRS spaced repetition for vocabulary cards",
    no_args_is_help=True,
)

# Settings subcommand
app.add_typer(config_app, name="config")


@app.callback()
def _root(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")
    ] = False,
) -> None:
    setup_logging(verbose)


app.command()(sync)
app.command()(decks)
app.command()(stats)
app.command()(review)
app.command()(history)
app.command("export")(export_cmd)
app.command("import")(import_cmd)
app.command()(serve)


@app.command()
def version() -> None:
    """Show version information."""
    from vocab_srs import __version__

    typer.echo(f"vocab-srs v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
