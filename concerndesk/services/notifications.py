"""Notification sink operations exposed to callers."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.db import crud
from concerndesk.errors import ValidationError, Forbidden
from concerndesk.models import Notification, NOTIFICATION_TYPES
from concerndesk.services.auth import AuthSession, require_session

logger = logging.getLogger(__name__)


async def enqueue(
    db: AsyncSession, session: AuthSession, user_id: str, title: str, message: str,
    type: str = "info", reference_id: str | None = None,
) -> Notification:
    session = require_session(session)
    if not session.is_admin:
        raise Forbidden("Only admins can send notifications")
    for field, value in (("user_id", user_id), ("title", title), ("message", message)):
        if not value or not value.strip():
            raise ValidationError(field, "must not be empty")
    if type not in NOTIFICATION_TYPES:
        raise ValidationError("type", f"must be one of {', '.join(NOTIFICATION_TYPES)}")
    if await crud.get_user(db, user_id) is None:
        raise ValidationError("user_id", "unknown user")

    notification = await crud.enqueue_notification(db, user_id, title, message, type, reference_id)
    logger.info("Notification %s sent to %s by %s", notification.id, user_id, session.user_id)
    return notification


async def list_for(
    db: AsyncSession, session: AuthSession, reference_id: str | None = None,
) -> list[Notification]:
    """The caller's own notifications, optionally only those about one concern."""
    session = require_session(session)
    if reference_id:
        return await crud.list_notifications_for_reference(db, reference_id, user_id=session.user_id)
    return await crud.list_notifications_for(db, session.user_id)


async def count_unread(db: AsyncSession, session: AuthSession) -> int:
    session = require_session(session)
    return await crud.count_unread_notifications(db, session.user_id)


async def mark_read(db: AsyncSession, session: AuthSession, notification_id: str) -> Notification:
    session = require_session(session)
    return await crud.mark_notification_read(db, notification_id, session.user_id)
