from __future__ import annotations

import base64
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from bestworkers.config import settings

LOGGER = logging.getLogger(__name__)

GMAIL_SEND_ENDPOINT = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


class EmailSendError(RuntimeError):
    pass


class Mailer(Protocol):
    def send(self, to_address: str, subject: str, body: str) -> None: ...


def build_otp_body(code: str, ttl_seconds: int, resend: bool = False) -> str:
    minutes = max(1, ttl_seconds // 60)
    label = "new OTP" if resend else "OTP"
    return (
        f"Your {label} for BestWorkers verification is {code}.\n\n"
        f"It will expire in {minutes} minute(s).\n\n"
        "If you did not request this code, you can ignore this email."
    )


class GmailMailer:
    """Sends plain-text mail through the Gmail REST API.

    Credentials come from an OAuth token file holding a refresh token; the
    cached access token is rewritten to that file after each refresh.
    """

    def __init__(
        self,
        sender: str,
        token_file: str = "",
        credentials_file: str = "",
        timeout: float = 10,
    ) -> None:
        self._sender = sender
        self._token_file = token_file
        self._credentials_file = credentials_file
        self._timeout = timeout

    def send(self, to_address: str, subject: str, body: str) -> None:
        if not self._sender:
            raise EmailSendError("Email sender is not configured")

        raw_message = _build_raw_message(self._sender, to_address, subject, body)
        token = self._get_access_token()
        payload = json.dumps({"raw": raw_message}).encode("utf-8")
        request = Request(
            GMAIL_SEND_ENDPOINT,
            data=payload,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            method="POST",
        )
        try:
            with urlopen(request, timeout=self._timeout) as response:
                response.read()
        except HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            LOGGER.error("Gmail API error: %s", error_body)
            raise EmailSendError("Failed to send email") from exc
        except URLError as exc:
            raise EmailSendError("Failed to reach Gmail API") from exc

    def _token_path(self) -> Path:
        if self._token_file:
            return Path(self._token_file)
        return _project_root() / "credentials" / "token.json"

    def _credentials_path(self) -> Path:
        if self._credentials_file:
            return Path(self._credentials_file)
        return _project_root() / "credentials" / "credentials.json"

    def _get_access_token(self) -> str:
        token_path = self._token_path()
        token_data = _load_json(token_path)

        token = token_data.get("token")
        expiry = _parse_expiry(token_data.get("expiry"))
        if token and expiry and expiry > datetime.now(timezone.utc) + timedelta(minutes=1):
            return token

        refresh_token = token_data.get("refresh_token")
        if not refresh_token:
            raise EmailSendError("Gmail refresh token is missing")

        client_id, client_secret = self._resolve_client_details(token_data)
        payload = urlencode(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        ).encode("utf-8")
        request = Request(
            token_data.get("token_uri") or DEFAULT_TOKEN_URI,
            data=payload,
            method="POST",
        )
        try:
            with urlopen(request, timeout=self._timeout) as response:
                data = json.loads(response.read().decode("utf-8"))
        except HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            LOGGER.error("Gmail token refresh error: %s", error_body)
            raise EmailSendError("Failed to refresh Gmail token") from exc
        except URLError as exc:
            raise EmailSendError("Failed to reach Gmail token endpoint") from exc

        access_token = data.get("access_token")
        if not access_token:
            raise EmailSendError("Gmail token refresh did not return an access token")
        expires_in = int(data.get("expires_in", 3600))
        token_data["token"] = access_token
        token_data["expiry"] = (
            datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        ).isoformat()
        token_path.write_text(json.dumps(token_data), encoding="utf-8")
        return access_token

    def _resolve_client_details(self, token_data: dict[str, Any]) -> tuple[str, str]:
        client_id = token_data.get("client_id")
        client_secret = token_data.get("client_secret")
        if client_id and client_secret:
            return client_id, client_secret

        credentials = _load_json(self._credentials_path())
        installed = credentials.get("installed", {})
        client_id = installed.get("client_id") or credentials.get("client_id")
        client_secret = installed.get("client_secret") or credentials.get("client_secret")
        if not client_id or not client_secret:
            raise EmailSendError("Gmail client credentials are missing")
        return client_id, client_secret


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _build_raw_message(sender: str, recipient: str, subject: str, body: str) -> str:
    message = "\r\n".join(
        [
            f"From: {sender}",
            f"To: {recipient}",
            f"Subject: {subject}",
            "MIME-Version: 1.0",
            "Content-Type: text/plain; charset=utf-8",
            "",
            body,
        ]
    )
    # base64url-encoded RFC 2822 message
    return base64.urlsafe_b64encode(message.encode("utf-8")).decode("ascii")


def _parse_expiry(raw_value: Optional[str]) -> Optional[datetime]:
    if not raw_value:
        return None
    try:
        return datetime.fromisoformat(raw_value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _load_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise EmailSendError(f"Missing Gmail file: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


mailer = GmailMailer(
    settings.otp_email_sender,
    token_file=settings.gmail_token_file,
    credentials_file=settings.gmail_credentials_file,
)
