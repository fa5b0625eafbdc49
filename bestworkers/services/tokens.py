from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging

import jwt

from bestworkers.config import settings
from bestworkers.errors import AuthError

LOGGER = logging.getLogger(__name__)


class TokenError(ValueError):
    pass


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_in_seconds: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """Stateless signed session tokens carrying the account id."""

    def __init__(
        self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    @property
    def expires_in_seconds(self) -> int:
        return self._expire_minutes * 60

    def issue(self, account_id: int) -> IssuedToken:
        if not self._secret:
            raise TokenError("JWT secret is not configured")
        now = _utcnow()
        expires_at = now + timedelta(minutes=self._expire_minutes)
        payload = {
            "sub": str(account_id),
            "type": "access",
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_in_seconds=self.expires_in_seconds)

    def verify(self, token: str | None) -> int:
        try:
            return self._decode(token)
        except TokenError as exc:
            LOGGER.info("Rejected session token: %s", exc)
            raise AuthError() from exc

    def _decode(self, token: str | None) -> int:
        if not token:
            raise TokenError("Token is missing")
        if not self._secret:
            raise TokenError("JWT secret is not configured")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise TokenError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenError("Invalid token") from exc
        if payload.get("type") != "access":
            raise TokenError("Invalid token type")
        subject = payload.get("sub")
        if not subject:
            raise TokenError("Token subject is missing")
        try:
            return int(subject)
        except (TypeError, ValueError) as exc:
            raise TokenError("Invalid token subject") from exc


session_issuer = SessionIssuer(
    settings.jwt_secret, settings.jwt_algorithm, settings.access_token_expire_minutes
)
