"""JWT utilities for authentication."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from pydantic import BaseModel

from app.config import get_settings


class TokenPayload(BaseModel):
    """JWT token payload."""

    sub: str  # Subject - user_id
    company_id: UUID | None = None  # Company the user is working in
    exp: datetime
    iat: datetime
    type: str = "access"


def create_access_token(user_id: str, company_id: UUID | None = None) -> str:
    """Create a JWT access token for a user, optionally bound to a company."""
    settings = get_settings()

    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    payload = {
        "sub": user_id,
        "exp": expires,
        "iat": now,
        "type": "access",
    }
    if company_id is not None:
        payload["company_id"] = str(company_id)

    return jwt.encode(
        payload,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> TokenPayload | None:
    """Decode and validate a JWT access token.

    Returns TokenPayload if valid, None if invalid, expired or not an access token.
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    if payload.get("type", "access") != "access" or not payload.get("sub"):
        return None

    try:
        company_id = UUID(payload["company_id"]) if payload.get("company_id") else None
    except ValueError:
        return None

    return TokenPayload(
        sub=payload["sub"],
        company_id=company_id,
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        type=payload.get("type", "access"),
    )
