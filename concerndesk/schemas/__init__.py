"""Pydantic request/response schemas."""

from concerndesk.schemas.concern import ConcernCreate, ConcernUpdate, ConcernRead
from concerndesk.schemas.notification import NotificationCreate, NotificationRead, UnreadCount
from concerndesk.schemas.auth import LoginRequest, LoginResponse

__all__ = [
    "ConcernCreate", "ConcernUpdate", "ConcernRead",
    "NotificationCreate", "NotificationRead", "UnreadCount",
    "LoginRequest", "LoginResponse",
]
