"""Authentication service: DB-backed bearer sessions, bcrypt passwords."""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.db import crud
from concerndesk.errors import Unauthenticated
from concerndesk.models import User, UserSession

logger = logging.getLogger(__name__)

SESSION_MAX_AGE_DAYS = 7


@dataclass(frozen=True)
class AuthSession:
    """Caller identity threaded explicitly into every ticket service call."""

    user_id: str
    is_admin: bool
    token: str
    display_name: str = ""


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def _hash_token(token: str) -> str:
    """SHA-256 hash of a bearer token for DB storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def create_session(
    user: User, db: AsyncSession, ip_address: str = "",
    max_age_days: int = SESSION_MAX_AGE_DAYS,
) -> str:
    """Create a DB-backed session. Returns the raw token (not the hash)."""
    token = secrets.token_urlsafe(48)
    expires_at = datetime.now(timezone.utc) + timedelta(days=max_age_days)

    session = UserSession(
        user_id=user.id,
        token_hash=_hash_token(token),
        expires_at=expires_at,
        ip_address=ip_address,
    )
    db.add(session)
    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()
    return token


async def validate_session(token: str, db: AsyncSession) -> User | None:
    """Look up session by token hash, return User if valid."""
    session = await crud.get_user_session_by_hash(db, _hash_token(token))
    if not session:
        return None

    user = await crud.get_user(db, session.user_id)
    if not user or not user.is_active:
        return None
    return user


async def remove_session(token: str, db: AsyncSession) -> None:
    """Log out: drop the session row for this bearer token, if any."""
    if await crud.delete_user_session_by_hash(db, _hash_token(token)):
        logger.info("Session closed")


async def authenticate(email: str, password: str, db: AsyncSession) -> User:
    user = await crud.get_user_by_email(db, email)
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise Unauthenticated("Invalid credentials")
    return user


async def resolve_bearer(authorization: str | None, db: AsyncSession) -> AuthSession:
    """Turn an ``Authorization: Bearer ...`` header into an AuthSession or raise."""
    if not authorization:
        raise Unauthenticated("Not authenticated")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated("Not authenticated")

    user = await validate_session(token, db)
    if not user:
        raise Unauthenticated("Session expired")

    return AuthSession(
        user_id=user.id,
        is_admin=user.is_admin,
        token=token,
        display_name=user.display_name,
    )


def require_session(session: AuthSession | None) -> AuthSession:
    """Reject a missing session or empty token before any store access."""
    if session is None or not session.token:
        raise Unauthenticated("Please log in again")
    return session
