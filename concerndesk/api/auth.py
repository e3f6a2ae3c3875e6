"""Auth API: bearer-token login and logout."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.config import Settings
from concerndesk.db.engine import get_db
from concerndesk.dependencies import require_auth, get_settings_dep
from concerndesk.schemas import LoginRequest, LoginResponse
from concerndesk.services.auth import AuthSession, authenticate, create_session, remove_session

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    user = await authenticate(body.email, body.password, db)
    ip = request.client.host if request.client else ""
    token = await create_session(user, db, ip_address=ip, max_age_days=settings.session_max_age_days)
    return LoginResponse(token=token, user_id=user.id, display_name=user.display_name, role=user.role)


@router.post("/logout", status_code=204)
async def logout(
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await remove_session(auth.token, db)
