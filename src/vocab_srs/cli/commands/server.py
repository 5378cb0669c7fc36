"""Server command."""

from __future__ import annotations

from typing import Annotated

import typer

from vocab_srs.utils.config import get_config


def serve(
    host: Annotated[
        str | None, typer.Option("--host", "-h", help="Host to bind to (default: $VOCAB_SRS_HOST)")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="Port to bind to (default: $VOCAB_SRS_PORT)")
    ] = None,
    reload: Annotated[
        bool, typer.Option("--reload", "-r", help="Enable auto-reload for development")
    ] = False,
) -> None:
    """Run the vocab-srs API server.

    Examples:
        vsrs serve                    # Run on localhost:8000
        vsrs serve -p 9000            # Run on port 9000
        vsrs serve --reload           # Development mode
    """
    try:
        import uvicorn
    except ImportError:
        typer.echo("Error: uvicorn not installed. Run: pip install vocab-srs[server]", err=True)
        raise typer.Exit(1)

    config = get_config()
    bind_host = host or config.host
    bind_port = port or config.port

    typer.echo(f"Starting vocab-srs API server on http://{bind_host}:{bind_port}")
    typer.echo(f"  Docs: http://{bind_host}:{bind_port}/docs")

    uvicorn.run(
        "vocab_srs.server.app:create_app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        factory=True,
    )
