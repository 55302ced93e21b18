"""
JWT handling for caller identity.

Tokens are issued by the case-management backend; this service only needs to
verify them. create_access_token exists for tooling and tests.

Claims:
    sub: caller id
    role: helper | jugendamt | admin (anything else is treated as helper)
    helper_id: the helper a helper-role caller acts as
    exp: expiry
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from src.infrastructure.config.settings import get_settings


def create_access_token(
    subject: str,
    role: str,
    helper_id: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a caller token with the configured secret"""
    settings = get_settings()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "exp": datetime.now(UTC) + lifetime,
    }
    if helper_id is not None:
        claims["helper_id"] = helper_id

    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a caller token.

    Raises:
        ValueError: expired, badly signed or malformed token
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as e:
        raise ValueError("Token has expired") from e
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}") from e

    if not isinstance(claims, dict) or not claims.get("sub"):
        raise ValueError("Invalid token: missing subject")
    return claims
