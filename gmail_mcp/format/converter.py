"""Document format conversion via external tools (pandoc, pdftotext)."""

import logging
import os
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from gmail_mcp.format.html_simplifier import unwrap_table_layout

logger = logging.getLogger(__name__)

DEFAULT_PANDOC = "pandoc"
DEFAULT_PDFTOTEXT = "pdftotext"
# GitHub-flavoured Markdown without raw HTML passthrough: keeps links,
# emphasis, lists and real tables; drops leftover layout markup.
DEFAULT_MARKDOWN_FORMAT = "gfm-raw_html"
DEFAULT_TIMEOUT_SECONDS = 60


class ConversionError(Exception):
    """Raised when an external conversion tool fails or cannot be run."""


class Converter:
    """Converts email HTML to Markdown and PDF attachments to plain text.

    Both tools only accept file input, so every call writes its payload to a
    private temp file that is removed again before the call returns.

    Usage::

        conv = Converter()
        markdown = conv.html_to_markdown(html_bytes)
    """

    def __init__(
        self,
        pandoc_cmd: str = DEFAULT_PANDOC,
        pdftotext_cmd: str = DEFAULT_PDFTOTEXT,
        markdown_format: str = DEFAULT_MARKDOWN_FORMAT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._pandoc = pandoc_cmd
        self._pdftotext = pdftotext_cmd
        self._markdown_format = markdown_format
        self._timeout = timeout

    def html_to_markdown(self, raw: bytes) -> str:
        """Unwrap layout tables, then render the HTML as Markdown with pandoc.

        Raises:
            ConversionError: if pandoc is missing, times out or exits non-zero.
        """
        simplified = unwrap_table_layout(raw)
        with _scoped_temp_file(simplified, suffix=".html") as path:
            return self._run(
                [self._pandoc, "-f", "html", "-t", self._markdown_format, "--wrap=none", str(path)],
                tool="pandoc",
            )

    def pdf_to_text(self, raw: bytes) -> str:
        """Extract text from a PDF, keeping its physical layout.

        Raises:
            ConversionError: if pdftotext is missing, times out or exits non-zero.
        """
        with _scoped_temp_file(raw, suffix=".pdf") as path:
            return self._run(
                [self._pdftotext, "-layout", "-enc", "UTF-8", str(path), "-"],
                tool="pdftotext",
            )

    def _run(self, args: list[str], tool: str) -> str:
        logger.debug("Running %s", " ".join(args))
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                check=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise ConversionError(f"{tool} not found: {args[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise ConversionError(f"{tool} timed out after {self._timeout}s") from exc
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode("utf-8", errors="replace").strip() if exc.stderr else ""
            raise ConversionError(
                f"{tool} failed with exit code {exc.returncode}: {stderr}"
            ) from exc
        return result.stdout.decode("utf-8", errors="replace")


@contextmanager
def _scoped_temp_file(data: bytes, suffix: str) -> Iterator[Path]:
    """Write ``data`` to a uniquely named temp file and remove it on exit.

    Cleanup failures are logged, never raised.
    """
    fd, name = tempfile.mkstemp(prefix="gmail-mcp-", suffix=suffix)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove temp file %s: %s", path, exc)
