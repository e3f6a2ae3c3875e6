"""SQLAlchemy ORM models."""

from concerndesk.models.base import Base
from concerndesk.models.user import User, UserSession
from concerndesk.models.concern import Concern, CONCERN_CATEGORIES, CONCERN_STATUSES
from concerndesk.models.notification import Notification, NOTIFICATION_TYPES

__all__ = [
    "Base", "User", "UserSession", "Concern", "Notification",
    "CONCERN_CATEGORIES", "CONCERN_STATUSES", "NOTIFICATION_TYPES",
]
