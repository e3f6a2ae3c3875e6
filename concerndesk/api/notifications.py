"""Notification API: feed, unread badge count, read-marking."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.db.engine import get_db
from concerndesk.dependencies import require_auth, require_admin
from concerndesk.schemas import NotificationCreate, NotificationRead, UnreadCount
from concerndesk.services import notifications
from concerndesk.services.auth import AuthSession

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("", status_code=201, response_model=NotificationRead)
async def create_notification(
    body: NotificationCreate,
    auth: AuthSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await notifications.enqueue(
        db, auth, body.user_id, body.title, body.message, body.type, body.reference_id,
    )


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    reference_id: str | None = Query(None),
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await notifications.list_for(db, auth, reference_id=reference_id)


@router.get("/unread/count", response_model=UnreadCount)
async def unread_count(
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return UnreadCount(count=await notifications.count_unread(db, auth))


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: str,
    auth: AuthSession = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await notifications.mark_read(db, auth, notification_id)
