from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class ConcernCreate(BaseModel):
    title: str
    message: str
    category: str  # scholarship | application | technical | other


class ConcernUpdate(BaseModel):
    status: str | None = None  # pending | in_progress | resolved
    admin_response: str | None = None


class ConcernRead(BaseModel):
    id: str
    owner_id: str
    owner_name: str = ""
    title: str
    message: str
    category: str
    status: str
    admin_response: str = ""
    is_read: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
