"""Snapshot commands: export, import."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from vocab_srs.cli._helpers import fail, open_context, output_result, run_async
from vocab_srs.errors import ImportFormatError


def export_cmd(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to file instead of stdout")
    ] = None,
) -> None:
    """Export all cards, settings and review history as JSON.

    Examples:
        vsrs export -o backup.json
        vsrs export > backup.json
    """

    async def _export() -> dict[str, Any]:
        ctx = await open_context()
        return await ctx.storage.export_all()

    snapshot = run_async(_export())
    text = json.dumps(snapshot, indent=2, ensure_ascii=False)

    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    typer.secho(
        f"Exported {len(snapshot['cards'])} cards and {len(snapshot['reviews'])} reviews "
        f"to {output}",
        fg=typer.colors.GREEN,
    )


def import_cmd(
    file: Annotated[Path, typer.Argument(help="Snapshot JSON written by 'vsrs export'")],
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Import a snapshot, overwriting records with the same keys.

    The file is validated first; if anything is malformed nothing is
    written.

    Examples:
        vsrs import backup.json
    """
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        fail(ImportFormatError(f"Cannot read snapshot {file}: {e}"))

    async def _import() -> dict[str, int]:
        ctx = await open_context()
        counts = await ctx.storage.import_all(data)
        await ctx.settings.reload()
        return counts

    try:
        counts = run_async(_import())
    except ImportFormatError as e:
        fail(e)

    if json_output:
        output_result(dict(counts), True)
        return
    typer.secho(
        f"Imported {counts['cards']} cards, {counts['meta']} settings, "
        f"{counts['reviews']} reviews",
        fg=typer.colors.GREEN,
    )
