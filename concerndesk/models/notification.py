"""Notification model: per-user notice with read/unread state."""

from __future__ import annotations

from sqlalchemy import String, Text, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from concerndesk.models.base import Base, ULIDMixin

NOTIFICATION_TYPES = ("info", "success", "error")


class Notification(Base, ULIDMixin):
    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(10), default="info")  # info | success | error
    reference_id: Mapped[str | None] = mapped_column(String(26), nullable=True, default=None)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
