"""
Bearer token utilities.

The gallery core does not own users or passwords: the host application
authenticates people and mints a short-lived token for them. The token carries
who the caller is and what they may do:

    {"sub": "7", "caps": ["manage_options", "upload_files"], "exp": ...}

- sub:  principal id (the asset store's author id for uploads)
- caps: capability names checked by the API layer before every core call

Tokens are signed with HS256 (python-jose) using settings.SECRET_KEY.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from jose import JWTError, jwt

from reelit.core.config import settings


# Capability names understood by the API layer
CAP_MANAGE_OPTIONS = "manage_options"
CAP_UPLOAD_FILES = "upload_files"


def create_access_token(
    subject: str | int,
    capabilities: Iterable[str] = (),
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed access token for a principal.

    Args:
        subject: Principal identifier
        capabilities: Capability names granted to the principal
        expires_delta: Lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "caps": sorted(set(capabilities)),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and verify an access token.

    Returns:
        Claims dictionary if the signature and expiry are valid, None otherwise
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        # Expired, tampered or malformed
        return None
