from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class NotificationCreate(BaseModel):
    user_id: str
    title: str
    message: str
    type: str = "info"  # info | success | error
    reference_id: str | None = None


class NotificationRead(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    reference_id: str | None = None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UnreadCount(BaseModel):
    count: int
