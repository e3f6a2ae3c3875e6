"""CRUD operations: the concern store and the notification sink.

These functions are the only code that writes ``concerns`` and
``notifications`` rows; the ticket service is their sole caller for
mutations.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from concerndesk.errors import NotFound, Forbidden
from concerndesk.models import Concern, Notification, User, UserSession

# Fields of a concern that may change after creation.
_MUTABLE_CONCERN_FIELDS = {"status", "admin_response", "is_read"}


# ── Users ────────────────────────────────────────────────

async def create_user(
    db: AsyncSession, email: str, password_hash: str,
    display_name: str = "", role: str = "user",
) -> User:
    user = User(email=email, password_hash=password_hash, display_name=display_name, role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def get_user_session_by_hash(db: AsyncSession, token_hash: str) -> UserSession | None:
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == token_hash,
            UserSession.expires_at > datetime.now(timezone.utc),
        )
    )
    return result.scalars().first()


async def delete_user_session_by_hash(db: AsyncSession, token_hash: str) -> bool:
    result = await db.execute(select(UserSession).where(UserSession.token_hash == token_hash))
    session = result.scalars().first()
    if session is None:
        return False
    await db.delete(session)
    await db.commit()
    return True


# ── Concerns ─────────────────────────────────────────────

async def insert_concern(
    db: AsyncSession, owner_id: str, title: str, message: str, category: str,
) -> Concern:
    concern = Concern(
        owner_id=owner_id, title=title, message=message, category=category,
        status="pending", admin_response="", is_read=True,
    )
    db.add(concern)
    await db.commit()
    return await get_concern(db, concern.id)


async def get_concern(db: AsyncSession, concern_id: str) -> Concern | None:
    result = await db.execute(
        select(Concern)
        .where(Concern.id == concern_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def list_concerns_by_owner(db: AsyncSession, owner_id: str) -> list[Concern]:
    result = await db.execute(
        select(Concern)
        .where(Concern.owner_id == owner_id)
        .order_by(Concern.created_at.desc(), Concern.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def list_all_concerns(db: AsyncSession) -> list[Concern]:
    result = await db.execute(
        select(Concern)
        .order_by(Concern.created_at.desc(), Concern.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def update_concern(db: AsyncSession, concern_id: str, **mutation) -> Concern:
    """Apply ``mutation`` to a concern.

    ``updated_at`` is bumped when status or response change; read-marking
    alone leaves it untouched.

    Raises NotFound if the concern does not exist. Immutable fields are
    rejected with a ``ValueError``; that is a programming error, not a
    user-facing one.
    """
    unknown = set(mutation) - _MUTABLE_CONCERN_FIELDS
    if unknown:
        raise ValueError(f"Immutable concern fields: {sorted(unknown)}")

    concern = await db.get(Concern, concern_id)
    if concern is None:
        raise NotFound("Concern not found")

    for k, v in mutation.items():
        setattr(concern, k, v)
    if mutation.keys() & {"status", "admin_response"}:
        concern.updated_at = datetime.now(timezone.utc)
    await db.commit()
    return await get_concern(db, concern_id)


# ── Notifications ────────────────────────────────────────

async def enqueue_notification(
    db: AsyncSession, user_id: str, title: str, message: str,
    type: str = "info", reference_id: str | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id, title=title, message=message,
        type=type, reference_id=reference_id, is_read=False,
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    return notification


async def count_unread_notifications(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read == False,
        )
    )
    return int(result.scalar_one())


async def list_notifications_for(db: AsyncSession, user_id: str) -> list[Notification]:
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().all())


async def list_notifications_for_reference(
    db: AsyncSession, reference_id: str, user_id: str | None = None,
) -> list[Notification]:
    """Notifications about one concern, newest first; scoped to ``user_id`` if given."""
    stmt = select(Notification).where(Notification.reference_id == reference_id)
    if user_id is not None:
        stmt = stmt.where(Notification.user_id == user_id)
    result = await db.execute(
        stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().all())


async def mark_notification_read(db: AsyncSession, notification_id: str, user_id: str) -> Notification:
    notification = await db.get(Notification, notification_id)
    if notification is None:
        raise NotFound("Notification not found")
    if notification.user_id != user_id:
        raise Forbidden("Not authorized to update this notification")
    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification
