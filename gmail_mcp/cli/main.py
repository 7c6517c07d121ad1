"""CLI entry point for the Gmail MCP server."""

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from gmail_mcp.config import ServerConfig

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"


@click.group()
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Load environment variables from this file instead of ./.env.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append logs to this file instead of stderr.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, env_file: Path | None, log_file: Path | None, verbose: bool) -> None:
    """Read-only Gmail tools for AI agents over MCP."""
    load_dotenv(env_file)
    # Logs go to stderr (or a file) so they never mix with stdio MCP traffic.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        filename=str(log_file) if log_file else None,
    )
    ctx.obj = ServerConfig.from_env()


# Import and register commands after cli is defined to avoid circular imports.
from gmail_mcp.cli.commands import search, serve  # noqa: E402

cli.add_command(serve)
cli.add_command(search)
