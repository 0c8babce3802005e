"""
Request Identity

Turns an optional bearer token into an AuthContext for the preference
engine. The preference endpoints are public: a missing, expired or invalid
token yields an anonymous context instead of a 401.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from preference_api.config import settings
from preference_api.constants import ALGORITHM
from preference_api.database import get_db
from preference_api.exceptions import AuthenticationError, DatabaseError
from preference_api.models.user import User

logger = logging.getLogger(__name__)

optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


@dataclass(frozen=True)
class AuthUser:
    id: int


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller for one request."""

    is_authenticated: bool
    user: AuthUser | None = None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls(is_authenticated=False)

    @classmethod
    def authenticated(cls, user_id: int) -> AuthContext:
        return cls(is_authenticated=True, user=AuthUser(id=user_id))


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (email) in token data.")

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the token's subject (user email).

    Raises:
        AuthenticationError: if the token is expired, invalid or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except JWTError as e:
        raise AuthenticationError("Invalid token") from e

    email = payload.get("sub")
    if not email:
        raise AuthenticationError("Token does not contain 'sub' field.")
    return email


async def get_auth_context(
    request: Request,
    token: str | None = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Resolve the caller's identity and attach it to ``request.state.auth``."""
    auth = AuthContext.anonymous()

    if token:
        try:
            email = decode_access_token(token)
        except AuthenticationError as e:
            logger.info(f"Treating request as anonymous: {e.message}")
        else:
            try:
                result = await db.execute(select(User).where(User.email == email))
                user = result.scalars().first()
            except SQLAlchemyError as e:
                logger.error(f"User lookup failed: {e}")
                raise DatabaseError("Failed to fetch user data.", operation="get_user") from e

            if user is not None and user.is_active:
                auth = AuthContext.authenticated(user.id)
            else:
                logger.warning(f"No active user for token subject '{email}'")

    request.state.auth = auth
    request.state.user = auth.user
    return auth
