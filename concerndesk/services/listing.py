"""Filtering, free-text search and sorting over concern lists.

Works on anything exposing the concern attributes (ORM rows or the
``ConcernRead`` records the client receives), so the API and the client
share one implementation.
"""

from __future__ import annotations

from typing import Iterable, Sequence, TypeVar

from concerndesk.errors import ValidationError
from concerndesk.models.concern import CONCERN_STATUSES

T = TypeVar("T")

CATEGORY_LABELS = {
    "scholarship": "Scholarship Information",
    "application": "Application Process",
    "technical": "Technical Issues",
    "other": "Other Concerns",
}

SORT_KEYS = ("date", "status", "category")
SORT_ORDERS = ("asc", "desc")


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def matches_query(item, query: str) -> bool:
    """Case-insensitive substring match over title, message, category and owner name."""
    needle = query.strip().lower()
    if not needle:
        return True
    haystacks = (
        item.title,
        item.message,
        item.category,
        category_label(item.category),
        getattr(item, "owner_name", "") or "",
    )
    return any(needle in h.lower() for h in haystacks)


def filter_concerns(items: Iterable[T], status: str = "all", query: str = "") -> list[T]:
    if status != "all" and status not in CONCERN_STATUSES:
        raise ValidationError("status", f"must be 'all' or one of {', '.join(CONCERN_STATUSES)}")
    return [
        item for item in items
        if (status == "all" or item.status == status) and matches_query(item, query)
    ]


def sort_concerns(items: Sequence[T], sort_by: str = "date", order: str = "desc") -> list[T]:
    """Sort a concern list.

    ``date`` runs newest-first, ``status`` and ``category`` run A to Z.
    ``order="desc"`` keeps that direction; ``order="asc"`` reverses it.
    """
    if sort_by not in SORT_KEYS:
        raise ValidationError("sort", f"must be one of {', '.join(SORT_KEYS)}")
    if order not in SORT_ORDERS:
        raise ValidationError("order", "must be 'asc' or 'desc'")

    if sort_by == "date":
        ordered = sorted(items, key=lambda c: (c.created_at, c.id), reverse=True)
    else:
        # stable: ties keep their incoming (newest-first) order
        ordered = sorted(items, key=lambda c: getattr(c, sort_by))

    if order == "asc":
        ordered.reverse()
    return ordered


def filter_and_sort(
    items: Iterable[T],
    status: str = "all",
    query: str = "",
    sort_by: str = "date",
    order: str = "desc",
) -> list[T]:
    return sort_concerns(filter_concerns(items, status, query), sort_by, order)
