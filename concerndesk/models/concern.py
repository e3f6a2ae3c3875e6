"""Concern model: a user-submitted support ticket."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from concerndesk.models.base import Base, ULIDMixin, utcnow

CONCERN_CATEGORIES = ("scholarship", "application", "technical", "other")
CONCERN_STATUSES = ("pending", "in_progress", "resolved")


class Concern(Base, ULIDMixin):
    __tablename__ = "concerns"

    owner_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(20))  # scholarship | application | technical | other
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending | in_progress | resolved
    admin_response: Mapped[str] = mapped_column(Text, default="")
    is_read: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    owner = relationship("User", lazy="selectin")

    @property
    def owner_name(self) -> str:
        return self.owner.display_name if self.owner is not None else ""
