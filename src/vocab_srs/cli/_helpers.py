"""Shared CLI helpers for configuration, storage, and output formatting."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import typer

from vocab_srs.context import SRSContext
from vocab_srs.errors import StorageUnavailableError
from vocab_srs.integration.catalog import JsonCatalogSource
from vocab_srs.utils.config import Config, get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Contexts opened during a CLI command, closed before the event loop shuts
# down (aiosqlite's worker thread must not outlive the loop).
_active_contexts: list[SRSContext] = []


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr; WARNING by default, DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async CLI command with proper storage cleanup.

    Replaces bare ``asyncio.run()`` to ensure aiosqlite connections are
    closed *before* the event loop is torn down.
    """

    async def _with_cleanup() -> T:
        try:
            return await coro
        finally:
            for ctx in _active_contexts:
                try:
                    await ctx.close()
                except Exception:
                    logger.debug("Failed to close storage during cleanup", exc_info=True)
            _active_contexts.clear()
            await asyncio.sleep(0)

    return asyncio.run(_with_cleanup())


async def open_context(config: Config | None = None) -> SRSContext:
    """Open storage and settings for the current command.

    Exits with status 1 if the store cannot be opened.
    """
    config = config or get_config()
    try:
        ctx = await SRSContext.open(config)
    except StorageUnavailableError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    _active_contexts.append(ctx)
    return ctx


def resolve_catalog(path: Path | None, config: Config | None = None) -> JsonCatalogSource:
    """Catalog given on the command line, else ``VOCAB_SRS_CATALOG``.

    Exits with status 1 if neither is set.
    """
    config = config or get_config()
    chosen = path or (Path(config.catalog_path) if config.catalog_path else None)
    if chosen is None:
        typer.secho(
            "Error: no catalog given. Pass a path or set VOCAB_SRS_CATALOG.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1)
    return JsonCatalogSource(chosen)


def fail(error: Exception) -> NoReturn:
    """Report a user-facing error and exit with status 1."""
    typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1) from error


def output_result(data: dict[str, Any], as_json: bool = False) -> None:
    """Output result in appropriate format."""
    if as_json:
        typer.echo(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif "error" in data:
        typer.secho(f"Error: {data['error']}", fg=typer.colors.RED)
    elif "message" in data:
        typer.secho(data["message"], fg=typer.colors.GREEN)
    else:
        for key, value in data.items():
            typer.echo(f"{key}: {value}")

