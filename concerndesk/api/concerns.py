"""Concern API: owner filing and listing, admin triage."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.db.engine import get_db
from concerndesk.dependencies import require_auth, require_admin
from concerndesk.schemas import ConcernCreate, ConcernUpdate, ConcernRead
from concerndesk.services import tickets
from concerndesk.services.auth import AuthSession
from concerndesk.services.listing import filter_and_sort

router = APIRouter(tags=["concerns"])


# ── Owner endpoints ──────────────────────────────────────

@router.get("/api/concerns", response_model=list[ConcernRead])
async def list_my_concerns(
    status: str = Query("all"),
    q: str = Query(""),
    sort: str = Query("date"),
    order: str = Query("desc"),
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    concerns = await tickets.list_for_owner(db, auth)
    return filter_and_sort(concerns, status=status, query=q, sort_by=sort, order=order)


@router.post("/api/concerns", status_code=201, response_model=ConcernRead)
async def create_concern(
    body: ConcernCreate,
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await tickets.create_concern(db, auth, body.title, body.message, body.category)


@router.get("/api/concerns/{concern_id}", response_model=ConcernRead)
async def get_concern(
    concern_id: str,
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await tickets.get_concern(db, auth, concern_id)


@router.patch("/api/concerns/{concern_id}/read")
async def mark_concern_read(
    concern_id: str,
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    concern = await tickets.mark_read(db, auth, concern_id)
    return {"updated": concern is not None, "is_read": bool(concern and concern.is_read)}


# ── Admin endpoints ──────────────────────────────────────

@router.get("/api/admin/concerns", response_model=list[ConcernRead])
async def list_all_concerns(
    status: str = Query("all"),
    q: str = Query(""),
    sort: str = Query("date"),
    order: str = Query("desc"),
    auth: AuthSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    concerns = await tickets.list_all(db, auth)
    return filter_and_sort(concerns, status=status, query=q, sort_by=sort, order=order)


@router.put("/api/concerns/{concern_id}", response_model=ConcernRead)
async def update_concern(
    concern_id: str,
    body: ConcernUpdate,
    auth: AuthSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await tickets.update_concern(
        db, auth, concern_id, status=body.status, admin_response=body.admin_response,
    )
