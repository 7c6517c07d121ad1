"""Runtime configuration, read from the environment (and .env via python-dotenv)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from gmail_mcp.format.converter import (
    DEFAULT_MARKDOWN_FORMAT,
    DEFAULT_PANDOC,
    DEFAULT_PDFTOTEXT,
    DEFAULT_TIMEOUT_SECONDS,
    Converter,
)


@dataclass
class ServerConfig:
    """Everything the server needs besides CLI transport flags."""

    client_id: str = ""
    client_secret: str = ""
    token_file: Path = field(default_factory=lambda: Path("data/gmail-mcp-token.json"))
    pandoc_cmd: str = DEFAULT_PANDOC
    pdftotext_cmd: str = DEFAULT_PDFTOTEXT
    markdown_format: str = DEFAULT_MARKDOWN_FORMAT
    converter_timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build a ServerConfig from environment variables."""
        token_file = os.environ.get("GMAIL_TOKEN_FILE")
        return cls(
            client_id=os.environ.get("GOOGLE_OAUTH_CLIENT_ID", ""),
            client_secret=os.environ.get("GOOGLE_OAUTH_CLIENT_SECRET", ""),
            token_file=Path(token_file) if token_file else Path("data/gmail-mcp-token.json"),
            pandoc_cmd=os.environ.get("PANDOC_PATH", DEFAULT_PANDOC),
            pdftotext_cmd=os.environ.get("PDFTOTEXT_PATH", DEFAULT_PDFTOTEXT),
            markdown_format=os.environ.get("MARKDOWN_FORMAT", DEFAULT_MARKDOWN_FORMAT),
            converter_timeout=float(
                os.environ.get("CONVERTER_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
            ),
        )

    def converter(self) -> Converter:
        return Converter(
            pandoc_cmd=self.pandoc_cmd,
            pdftotext_cmd=self.pdftotext_cmd,
            markdown_format=self.markdown_format,
            timeout=self.converter_timeout,
        )
