# app/core/security.py
#
# Access tokens are minted by the identity provider. This service only
# verifies them; it never issues or refreshes tokens.

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from fastapi import status

from app.constants.error_codes import ErrorCode
from app.core.config import (
    AUTH_JWT_SECRET,
    AUTH_JWT_ALGORITHM,
    AUTH_JWT_AUDIENCE,
)
from app.core.exceptions import AppException


# =====================================================
# DECODE + VALIDATE TOKEN
# =====================================================
def decode_access_token(token: str) -> dict:
    options = {"verify_aud": AUTH_JWT_AUDIENCE is not None}

    try:
        payload = jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[AUTH_JWT_ALGORITHM],
            audience=AUTH_JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        raise AppException(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid or expired token",
            ErrorCode.UNAUTHORIZED,
        )

    if not payload.get("sub"):
        raise AppException(
            status.HTTP_401_UNAUTHORIZED,
            "Token has no subject",
            ErrorCode.UNAUTHORIZED,
        )

    return payload


# =====================================================
# TEST / SEED HELPER
# =====================================================
def create_access_token(
    subject: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Mint a token shaped like the provider's. Used by seed scripts and tests."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=60))

    payload = {
        "sub": subject,
        "email": email,
        "role": "authenticated",
        "iat": now,
        "exp": expire,
    }
    if AUTH_JWT_AUDIENCE:
        payload["aud"] = AUTH_JWT_AUDIENCE

    return jwt.encode(payload, AUTH_JWT_SECRET, algorithm=AUTH_JWT_ALGORITHM)
