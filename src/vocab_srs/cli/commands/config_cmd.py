"""CLI commands for scheduler settings."""

from __future__ import annotations

from typing import Annotated, Any

import typer

from vocab_srs.cli._helpers import fail, open_context, output_result, run_async
from vocab_srs.engine.scheduler_settings import MAX_INTERVAL_RANGE, RETENTION_RANGE

config_app = typer.Typer(help="Scheduler settings")


def _describe(config: dict[str, Any]) -> None:
    typer.echo(f"Target retention: {config['request_retention']:.0%}")
    typer.echo(f"Max interval: {config['max_interval_days']} days")
    typer.secho(
        f"Weights: {', '.join(f'{w:.4f}' for w in config['weights'])}",
        fg=typer.colors.BRIGHT_BLACK,
    )


@config_app.command("show")
def show_cmd(
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show the current scheduler settings.

    Examples:
        vsrs config show
    """

    async def _show() -> dict[str, Any]:
        ctx = await open_context()
        return ctx.settings.config.to_dict()

    result = run_async(_show())
    if json_output:
        output_result(result, True)
    else:
        _describe(result)


@config_app.command("set")
def set_cmd(
    retention: Annotated[
        float | None,
        typer.Option(
            "--retention",
            "-r",
            help=f"Target retention, {RETENTION_RANGE[0]:.2f}-{RETENTION_RANGE[1]:.2f}",
        ),
    ] = None,
    max_interval: Annotated[
        int | None,
        typer.Option(
            "--max-interval",
            "-m",
            help=f"Longest interval in days, {MAX_INTERVAL_RANGE[0]}-{MAX_INTERVAL_RANGE[1]}",
        ),
    ] = None,
) -> None:
    """Change the target retention and/or the interval cap.

    Examples:
        vsrs config set --retention 0.85
        vsrs config set --max-interval 365
    """
    if retention is None and max_interval is None:
        typer.echo("Nothing to change. Pass --retention and/or --max-interval.")
        raise typer.Exit(1)

    async def _set() -> dict[str, Any]:
        ctx = await open_context()
        config = await ctx.settings.save(
            request_retention=retention,
            max_interval_days=max_interval,
        )
        return config.to_dict()

    try:
        result = run_async(_set())
    except ValueError as e:
        fail(e)

    typer.secho("Settings saved.", fg=typer.colors.GREEN)
    _describe(result)
