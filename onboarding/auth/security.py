"""Access token handling.

Credentials are verified by the external login service, which issues a signed
JWT describing the staff member. This service only issues tokens for tooling
and tests, and decodes the ones it receives.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from onboarding.config.settings import get_settings

from .schemas import LearnerIdentity


def create_access_token(
    identity: LearnerIdentity,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token for a staff identity.

    Token payload includes:
        - sub: learner id
        - role, account_type, admin_scope, name, school_id
        - exp / iat timestamps
        - type: "access"
    """
    settings = get_settings()

    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)
    )
    to_encode: dict[str, Any] = {
        "sub": identity.learner_id,
        "role": identity.role.value,
        "account_type": identity.account_type.value,
        "admin_scope": identity.admin_scope.value if identity.admin_scope else None,
        "name": identity.name,
        "school_id": identity.school_id,
        "exp": expire,
        "iat": now,
        "type": "access",
    }

    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> LearnerIdentity:
    """Decode and validate an access token.

    Raises:
        JWTError: If token is invalid, expired, of the wrong type, or carries
            claims that do not describe a staff identity.
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type"
        raise JWTError(msg)

    try:
        return LearnerIdentity(
            learner_id=payload["sub"],
            role=payload["role"],
            account_type=payload.get("account_type") or "NEW",
            admin_scope=payload.get("admin_scope"),
            name=payload.get("name") or "",
            school_id=payload.get("school_id"),
        )
    except (KeyError, ValueError) as e:
        msg = "Token claims do not describe a staff identity"
        raise JWTError(msg) from e
