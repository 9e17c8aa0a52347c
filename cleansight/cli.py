"""
Command-line interface for CleanSight.

Uses Typer to provide two commands: `serve` runs the HTTP service under
uvicorn, `fetch` runs a single request through the pipeline and prints the
payload. Supports loading .env files for environment overrides.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
import uvicorn
from dotenv import load_dotenv
from rich.console import Console

from .config import load_config
from .errors import RequestError
from .logging_utils import setup_logging
from .pipeline import Pipeline
from .types import DEFAULT_FORMAT

app = typer.Typer(add_completion=False)
console = Console()
err_console = Console(stderr=True)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, help="YAML config file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Run the HTTP service.

    Args:
        host: Interface to bind (overrides config)
        port: Port to listen on (overrides config and PORT)
        config: Optional path to YAML config file
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Enable/disable file logging
    """
    from .server import create_app

    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if host:
        cfg.server.host = host
    if port is not None:
        cfg.server.port = port
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file

    logger = setup_logging(cfg.logging)
    logger.info("CleanSight server running at http://%s:%d", cfg.server.host, cfg.server.port)
    uvicorn.run(
        create_app(cfg),
        host=cfg.server.host,
        port=cfg.server.port,
        log_level=cfg.logging.level.lower(),
    )


@app.command()
def fetch(
    url: str = typer.Argument(..., help="Page to process."),
    format: str = typer.Option(DEFAULT_FORMAT, "--format", "-f", help="text, markdown, html or json."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, help="YAML config file."),
    timeout: float | None = typer.Option(None, "--timeout", help="Fetch timeout in seconds."),
    log_level: str | None = typer.Option("WARNING", "--log-level", help="Logging level."),
):
    """Fetch one URL and print it in the requested format."""
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if timeout is not None:
        cfg.fetch.timeout_seconds = timeout
    if log_level:
        cfg.logging.level = log_level
    cfg.logging.file = False
    cfg.cache.enabled = False

    logger = setup_logging(cfg.logging)
    pipeline = Pipeline.from_config(cfg, logger=logger)
    try:
        payload = asyncio.run(pipeline.handle(url, format))
    except RequestError as exc:
        err_console.print(f"[red]Error ({exc.status_code}, {exc.kind}):[/red] {exc.message}")
        raise typer.Exit(code=1) from exc

    if isinstance(payload, dict):
        console.print_json(data=payload)
    else:
        typer.echo(payload)


if __name__ == "__main__":
    app()
