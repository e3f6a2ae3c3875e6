"""Ticket service: business rules for concerns.

Every call takes an explicit ``AuthSession``. Status may move freely
between pending, in_progress and resolved; the service enforces roles and
input shape, not a transition graph.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.db import crud
from concerndesk.errors import ValidationError, Forbidden, NotFound
from concerndesk.models import Concern, CONCERN_CATEGORIES, CONCERN_STATUSES
from concerndesk.services.auth import AuthSession, require_session

logger = logging.getLogger(__name__)

RESPONSE_NOTIFICATION_TITLE = "Response to Your Concern"
RESPONSE_NOTIFICATION_TEMPLATE = 'An admin has responded to your concern: "{title}"'


def _require_admin(session: AuthSession | None) -> AuthSession:
    session = require_session(session)
    if not session.is_admin:
        raise Forbidden("Not authorized to update concerns")
    return session


def _require_text(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError(field, "must not be empty")
    return value


def _require_status(status: str) -> str:
    if status not in CONCERN_STATUSES:
        raise ValidationError("status", f"must be one of {', '.join(CONCERN_STATUSES)}")
    return status


async def _get_or_404(db: AsyncSession, concern_id: str) -> Concern:
    concern = await crud.get_concern(db, concern_id)
    if concern is None:
        raise NotFound("Concern not found")
    return concern


async def create_concern(
    db: AsyncSession, session: AuthSession, title: str, message: str, category: str,
) -> Concern:
    session = require_session(session)
    _require_text("title", title)
    _require_text("message", message)
    if category not in CONCERN_CATEGORIES:
        raise ValidationError("category", f"must be one of {', '.join(CONCERN_CATEGORIES)}")

    concern = await crud.insert_concern(db, session.user_id, title, message, category)
    logger.info("Concern %s created by %s (%s)", concern.id, session.user_id, category)
    return concern


async def list_for_owner(db: AsyncSession, session: AuthSession) -> list[Concern]:
    session = require_session(session)
    return await crud.list_concerns_by_owner(db, session.user_id)


async def list_all(db: AsyncSession, session: AuthSession) -> list[Concern]:
    _require_admin(session)
    return await crud.list_all_concerns(db)


async def get_concern(db: AsyncSession, session: AuthSession, concern_id: str) -> Concern:
    session = require_session(session)
    concern = await _get_or_404(db, concern_id)
    if not session.is_admin and concern.owner_id != session.user_id:
        # Do not reveal other owners' tickets
        raise NotFound("Concern not found")
    return concern


async def set_status(
    db: AsyncSession, session: AuthSession, concern_id: str,
    new_status: str, admin_response: str | None = None,
) -> Concern:
    """Change status; touches the response only when one is supplied."""
    _require_admin(session)
    _require_status(new_status)

    mutation: dict = {"status": new_status}
    if admin_response is not None:
        current = await _get_or_404(db, concern_id)
        mutation["admin_response"] = admin_response
        if admin_response.strip() and admin_response != current.admin_response:
            mutation["is_read"] = False

    concern = await crud.update_concern(db, concern_id, **mutation)
    logger.info("Concern %s status -> %s", concern_id, new_status)
    return concern


async def respond(
    db: AsyncSession, session: AuthSession, concern_id: str, formatted_text: str,
) -> Concern:
    """Resolve a concern with an admin response and notify its owner.

    The response text is stored verbatim, decoration markers included.
    Notification delivery is best-effort: a failure is logged and the
    response stays committed.
    """
    _require_admin(session)
    _require_text("admin_response", formatted_text)

    concern = await crud.update_concern(
        db, concern_id,
        status="resolved", admin_response=formatted_text, is_read=False,
    )
    logger.info("Concern %s resolved with admin response", concern_id)

    owner_id = concern.owner_id
    try:
        await crud.enqueue_notification(
            db,
            user_id=owner_id,
            title=RESPONSE_NOTIFICATION_TITLE,
            message=RESPONSE_NOTIFICATION_TEMPLATE.format(title=concern.title),
            type="info",
            reference_id=concern_id,
        )
    except Exception:
        logger.exception("Failed to notify owner %s about concern %s", owner_id, concern_id)
        await db.rollback()
        # rollback expires loaded rows; reload the committed state
        concern = await crud.get_concern(db, concern_id)
    return concern


async def update_concern(
    db: AsyncSession, session: AuthSession, concern_id: str,
    status: str | None = None, admin_response: str | None = None,
) -> Concern:
    """Combined status/response update used by ``PUT /api/concerns/{id}``.

    A new non-empty response with status ``resolved`` (or no status) is a
    response. Anything else, including a resend of the stored response
    text, is a status change and notifies nobody.
    """
    _require_admin(session)
    if status is None and admin_response is None:
        raise ValidationError("status", "status or admin_response is required")

    current = await _get_or_404(db, concern_id)
    new_response = (
        admin_response is not None
        and admin_response.strip() != ""
        and admin_response != current.admin_response
    )
    if new_response and status in (None, "resolved"):
        return await respond(db, session, concern_id, admin_response)
    return await set_status(db, session, concern_id, status or current.status, admin_response)


async def mark_read(db: AsyncSession, session: AuthSession, concern_id: str) -> Concern | None:
    """Owner opened a concern: flip ``is_read`` if there is an unread response.

    Best-effort. Apart from a missing session, failures are logged and
    ``None`` is returned.
    """
    session = require_session(session)
    try:
        concern = await crud.get_concern(db, concern_id)
        if concern is None:
            logger.warning("mark_read: concern %s not found", concern_id)
            return None
        if concern.owner_id != session.user_id:
            logger.warning("mark_read: %s does not own concern %s", session.user_id, concern_id)
            return None
        if concern.admin_response and not concern.is_read:
            concern = await crud.update_concern(db, concern_id, is_read=True)
        return concern
    except Exception:
        logger.exception("mark_read failed for concern %s", concern_id)
        await db.rollback()
        return None
