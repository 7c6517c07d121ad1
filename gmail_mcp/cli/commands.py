"""CLI command implementations."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.table import Table

from gmail_mcp.auth.credentials import CredentialsError, load_credentials
from gmail_mcp.config import ServerConfig
from gmail_mcp.gmail.service import GmailService, GmailServiceError
from gmail_mcp.tools.search_messages import SearchMessages
from gmail_mcp.tools.server import build_server
from gmail_mcp.tools.types import EmailAddress, SearchResult

logger = logging.getLogger(__name__)
console = Console(width=200)


def _gmail_service(config: ServerConfig) -> GmailService:
    try:
        creds = load_credentials(config.client_id, config.client_secret, config.token_file)
    except CredentialsError as exc:
        raise click.ClickException(str(exc)) from exc
    return GmailService(creds)


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default="stdio",
    show_default=True,
    help="stdio for local agent clients, http for streamable HTTP.",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="HTTP listen host.")
@click.option("--port", default=8000, show_default=True, help="HTTP listen port.")
@click.option(
    "--oauth-token-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to cache the OAuth token (default: $GMAIL_TOKEN_FILE).",
)
@click.pass_obj
def serve(
    config: ServerConfig,
    transport: str,
    host: str,
    port: int,
    oauth_token_file: Path | None,
) -> None:
    """Run the MCP server."""
    if oauth_token_file is not None:
        config.token_file = oauth_token_file

    server = build_server(_gmail_service(config), config.converter(), host=host, port=port)
    logger.info("Starting %s transport", transport)
    try:
        server.run(transport="stdio" if transport == "stdio" else "streamable-http")
    except KeyboardInterrupt:
        logger.info("Interrupted — goodbye")
    logger.info("Server stopped")


@click.command()
@click.argument("query")
@click.option("--limit", default=10, show_default=True, help="Number of results (max 50).")
@click.option("--page-token", default="", help="Continue from a previous page.")
@click.pass_obj
def search(config: ServerConfig, query: str, limit: int, page_token: str) -> None:
    """Run a Gmail search and print the matching message summaries."""
    tool = SearchMessages(_gmail_service(config))
    try:
        result = asyncio.run(tool.search_messages(query, limit, page_token))
    except GmailServiceError as exc:
        raise click.ClickException(str(exc)) from exc

    if not result.messages:
        console.print(f"[yellow]No messages match {query!r}.[/yellow]")
        return

    console.print(_results_table(result))
    if result.next_page_token:
        console.print(f"[dim]Next page: --page-token {result.next_page_token}[/dim]")


def _format_address(addr: EmailAddress) -> str:
    return f"{addr.name} <{addr.email}>" if addr.name else addr.email


def _results_table(result: SearchResult) -> Table:
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=3)
    table.add_column("ID", style="dim", width=18)
    table.add_column("Date", width=32)
    table.add_column("From", max_width=36)
    table.add_column("Subject", max_width=50)

    for i, summary in enumerate(result.messages, start=1):
        table.add_row(
            str(i),
            summary.id,
            summary.timestamp,
            _format_address(summary.sender),
            summary.subject,
        )
    return table
