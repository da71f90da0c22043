"""Command-line interface for MongoMCP.

This module provides the CLI commands for running the MCP server over stdio
or HTTP and for checking the MongoDB connection.
"""

import asyncio
import sys
from typing import NoReturn

import click

from mongomcp import __version__
from mongomcp.core.config import get_settings
from mongomcp.core.exceptions import StoreConnectionError
from mongomcp.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="mongomcp")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides config)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """MongoMCP - MongoDB tools over the Model Context Protocol.

    Configuration is read from MONGOMCP_* environment variables and the
    first config file found at $MCP_CONFIG_PATH, ./config.json or
    ~/.mongodb-mcp-config.json.
    """
    settings = get_settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)
    ctx.obj = settings


@cli.command()
@click.pass_obj
def serve(settings) -> None:
    """Start the MCP server on stdin/stdout."""
    from mongomcp.infrastructure.mcp.stdio_server import run_stdio_server

    logger = get_logger(__name__)
    try:
        asyncio.run(run_stdio_server(settings))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Interrupted, exiting")


@cli.command("serve-http")
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.pass_obj
def serve_http(settings, host: str | None, port: int | None) -> None:
    """Start the MCP JSON-RPC endpoint over HTTP."""
    import uvicorn

    from mongomcp.infrastructure.api.app import create_app

    bind_host = host or settings.http_host
    bind_port = port or settings.http_port

    logger = get_logger(__name__)
    logger.info("Starting HTTP server", host=bind_host, port=bind_port)

    uvicorn.run(
        create_app(settings),
        host=bind_host,
        port=bind_port,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.pass_obj
def check(settings) -> None:
    """Connect to MongoDB, ping it, and exit with status 0 on success."""
    from mongomcp.infrastructure.persistence.connector import StoreConnector

    async def _check() -> str:
        connector = StoreConnector(settings.mongodb)
        try:
            await connector.ensure_connected()
            return connector.store.name
        finally:
            await connector.disconnect()

    try:
        database = asyncio.run(_check())
    except StoreConnectionError as exc:
        click.echo(f"ERROR: {exc.message}", err=True)
        sys.exit(1)

    click.echo(f"OK: connected to database '{database}'")


@cli.command()
def tools() -> None:
    """List the available tool names."""
    from mongomcp.infrastructure.mcp.tool_definitions import TOOL_DEFINITIONS

    for tool in TOOL_DEFINITIONS:
        click.echo(f"{tool['name']}: {tool['description']}")


def main() -> NoReturn:
    """Main entry point for the CLI."""
    cli()
    sys.exit(0)
