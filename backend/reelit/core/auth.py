"""
Capability checks for FastAPI routes.

The core services trust their caller. Every admin or editor route therefore
declares the capability it needs, and this module enforces it before the
route body (and the core call) runs:

    @router.post("/feeds")
    async def create_feed(principal: Principal = Depends(require_capability(CAP_MANAGE_OPTIONS))):
        ...

The public tracking endpoint is the only route without a capability.
"""

from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from reelit.core.logging import get_logger
from reelit.core.security import CAP_MANAGE_OPTIONS, decode_access_token

logger = get_logger(__name__)

# auto_error=False so we can return our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as described by its token."""

    user_id: int
    capabilities: FrozenSet[str] = field(default_factory=frozenset)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities

    @property
    def is_admin(self) -> bool:
        return self.can(CAP_MANAGE_OPTIONS)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Resolve the bearer token into a Principal.

    Raises:
        HTTPException 401: Token missing, expired, or malformed
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    caps = payload.get("caps") or []
    return Principal(user_id=user_id, capabilities=frozenset(str(c) for c in caps))


def require_capability(capability: str) -> Callable:
    """
    Build a dependency that only lets principals holding `capability` through.

    Raises:
        HTTPException 403: Authenticated but lacking the capability
    """

    async def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.can(capability):
            logger.warning(
                "capability_denied",
                user_id=principal.user_id,
                capability=capability,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied",
            )
        return principal

    return _dependency
