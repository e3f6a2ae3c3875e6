"""FastAPI dependency providers for auth and role enforcement."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.config import Settings, get_settings
from concerndesk.db.engine import get_db
from concerndesk.errors import Forbidden
from concerndesk.services.auth import AuthSession, resolve_bearer


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


async def require_auth(
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> AuthSession:
    """Require a valid bearer token. Returns the caller's AuthSession."""
    return await resolve_bearer(authorization, db)


async def require_admin(auth: AuthSession = Depends(require_auth)) -> AuthSession:
    if not auth.is_admin:
        raise Forbidden("Insufficient permissions")
    return auth
