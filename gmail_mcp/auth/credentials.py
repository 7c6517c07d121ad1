"""OAuth2 credentials for the Gmail API: load, refresh, or run first-time consent."""

import logging
import sys
from contextlib import redirect_stdout
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

logger = logging.getLogger(__name__)

# Read-only: the server never sends, modifies or deletes mail.
GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]


class CredentialsError(Exception):
    """Raised when no usable OAuth credentials can be obtained."""


def _client_config(client_id: str, client_secret: str) -> dict[str, dict[str, object]]:
    return {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }


def load_credentials(
    client_id: str,
    client_secret: str,
    token_file: Path,
    *,
    interactive: bool = True,
) -> Credentials:
    """Return valid Gmail credentials, persisting any new or refreshed token.

    Order of attempts: cached token file, refresh of an expired token, then
    (if ``interactive``) the browser consent flow on a local redirect port.

    Raises:
        CredentialsError: if the client ID/secret are missing, or no valid
            token is available and the consent flow is disabled or fails.
    """
    if not client_id or not client_secret:
        raise CredentialsError(
            "GOOGLE_OAUTH_CLIENT_ID and GOOGLE_OAUTH_CLIENT_SECRET must be set"
        )

    creds: Credentials | None = None
    if token_file.exists():
        try:
            creds = Credentials.from_authorized_user_file(str(token_file), GMAIL_SCOPES)
        except ValueError as exc:
            logger.warning("Ignoring unreadable token file %s: %s", token_file, exc)

    if creds is not None and creds.valid:
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
            _persist(creds, token_file)
            logger.info("Refreshed Gmail OAuth token")
            return creds
        except RefreshError as exc:
            logger.warning("Token refresh failed, re-authorising: %s", exc)

    if not interactive:
        raise CredentialsError(
            f"No valid OAuth token in {token_file}; run `gmail-mcp serve` once to authorise"
        )

    try:
        flow = InstalledAppFlow.from_client_config(
            _client_config(client_id, client_secret), GMAIL_SCOPES
        )
        logger.info("Opening browser for Gmail consent; the URL is also printed to stderr")
        # stdout is reserved for the stdio transport.
        with redirect_stdout(sys.stderr):
            creds = flow.run_local_server(port=0)
    except Exception as exc:  # noqa: BLE001
        raise CredentialsError(f"OAuth consent flow failed: {exc}") from exc

    _persist(creds, token_file)
    logger.info("Stored new Gmail OAuth token in %s", token_file)
    return creds


def _persist(creds: Credentials, token_file: Path) -> None:
    """Write the token to disk.  A failed write is logged, not raised."""
    try:
        token_file.parent.mkdir(parents=True, exist_ok=True)
        token_file.write_text(creds.to_json())
    except OSError as exc:
        logger.warning("Could not save OAuth token to %s: %s", token_file, exc)
