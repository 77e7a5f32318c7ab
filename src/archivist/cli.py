"""Command-line entry point for Archivist.

Every flag defaults to its ARCHIVIST_* environment variable, so the service
can be configured entirely from the environment or overridden per run.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import typer
import uvicorn

from archivist.core.config import settings
from archivist.main import create_app

logger = logging.getLogger(__name__)

app = typer.Typer(help="Archivist - store uploaded files in Backblaze B2")


@app.callback()
def app_callback() -> None:
    """Archivist - store uploaded files in Backblaze B2."""


@app.command()
def serve(
    bind: Annotated[
        Optional[str],
        typer.Option("--bind", help="host:port to listen on"),
    ] = None,
    b2_key_id: Annotated[
        Optional[str],
        typer.Option("--b2-key-id", help="B2 application key id"),
    ] = None,
    b2_key_token: Annotated[
        Optional[str],
        typer.Option("--b2-key-token", help="B2 application key"),
    ] = None,
    b2_bucket_id: Annotated[
        Optional[str],
        typer.Option("--b2-bucket-id", help="B2 bucket id to upload into"),
    ] = None,
) -> None:
    """Run the upload server."""
    overrides = {
        "BIND": bind,
        "B2_KEY_ID": b2_key_id,
        "B2_KEY_TOKEN": b2_key_token,
        "B2_BUCKET_ID": b2_bucket_id,
    }
    app_settings = settings.model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )

    try:
        port = app_settings.bind_port
    except ValueError:
        typer.echo(f"Invalid --bind value {app_settings.BIND!r}, expected host:port", err=True)
        raise typer.Exit(code=2)

    web_app = create_app(app_settings)

    logger.info(
        "I'm listening",
        extra={
            "bind": app_settings.BIND,
            "b2_key_id": app_settings.B2_KEY_ID,
            "b2_bucket_id": app_settings.B2_BUCKET_ID,
        },
    )
    uvicorn.run(web_app, host=app_settings.bind_host, port=port, log_config=None)


if __name__ == "__main__":
    app()
