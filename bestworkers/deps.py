from fastapi import Header

from bestworkers.errors import AuthError
from bestworkers.services.registration import registration_service


def get_current_account_id(authorization: str | None = Header(default=None)) -> int:
    if not authorization:
        raise AuthError()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthError()
    return registration_service.authenticate(token.strip())
