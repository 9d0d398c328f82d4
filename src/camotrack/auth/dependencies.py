"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from camotrack.auth.jwt import verify_token

_bearer = HTTPBearer()
_optional_bearer = HTTPBearer(auto_error=False)


def _user_id_from(credentials: HTTPAuthorizationCredentials) -> str:
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    return str(payload["sub"])


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
) -> str:
    """Verify the bearer token and return the user id. Raises 401/403 on failure."""
    return _user_id_from(credentials)


async def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Security(_optional_bearer),
) -> str | None:
    """
    Same as get_current_user_id, but an absent session yields None.

    A present but invalid token is still rejected with 401.
    """
    if credentials is None:
        return None
    return _user_id_from(credentials)
