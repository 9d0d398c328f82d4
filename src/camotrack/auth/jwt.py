"""
Verification of access tokens issued by the hosted auth provider.

Sessions are owned by the provider; the API only checks the bearer token's
signature, audience and expiry and reads the user id from ``sub``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from camotrack.config import get_settings


def create_access_token(user_id: str, email: str | None = None) -> str:
    """
    Mint a token in the provider's format, signed with the shared secret.

    Used for local development and tests; production tokens come from the
    auth provider.

    Args:
        user_id: The user's UUID.
        email: Optional email claim.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    if email:
        payload["email"] = email
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Returns:
        Decoded payload dictionary.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or has no subject.
    """
    settings = get_settings()
    options: dict[str, Any] = {"require": ["exp", "sub"]}
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if not payload.get("sub"):
        msg = "Token has no subject"
        raise jwt.InvalidTokenError(msg)
    return payload
