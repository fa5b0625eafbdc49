import secrets

from passlib.context import CryptContext

from bestworkers.config import settings


class PinHasher:
    """One-way salted bcrypt hashing for numeric PINs."""

    def __init__(self, rounds: int) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )
        # checked when no account matches the login email
        self.dummy_digest = self._context.hash(secrets.token_hex(16))

    def hash(self, pin: str) -> str:
        return self._context.hash(str(pin))

    def verify(self, pin: str, digest: str | None) -> bool:
        if not digest:
            return False
        try:
            return self._context.verify(str(pin), digest)
        except ValueError:
            return False


pin_hasher = PinHasher(settings.pin_hash_rounds)
