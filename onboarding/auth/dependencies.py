"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current learner extraction from the bearer token
- Admin-only endpoints
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from onboarding.core.context import set_learner

from .schemas import LearnerIdentity
from .security import decode_access_token


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_learner(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> LearnerIdentity:
    """Get the authenticated staff member from the access token.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        identity = decode_access_token(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    set_learner(identity.learner_id, identity.role.value)
    return identity


async def require_admin(
    identity: Annotated[LearnerIdentity, Depends(get_current_learner)],
) -> LearnerIdentity:
    """Require an account with an admin scope."""
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return identity


CurrentLearner = Annotated[LearnerIdentity, Depends(get_current_learner)]
AdminUser = Annotated[LearnerIdentity, Depends(require_admin)]
