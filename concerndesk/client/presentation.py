"""Display helpers for concern lists: labels, colours, icons, response markers."""

from __future__ import annotations

from datetime import datetime

from concerndesk.services.listing import CATEGORY_LABELS, category_label

STATUS_COLORS = {
    "resolved": "#4CAF50",
    "in_progress": "#FFC107",
    "pending": "#2196F3",
}
DEFAULT_STATUS_COLOR = "#9E9E9E"

STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In Progress",
    "resolved": "Resolved",
}

CATEGORY_ICONS = {
    "scholarship": "school",
    "application": "description",
    "technical": "build",
    "other": "help-outline",
}

# Wrap order is fixed: bold innermost, underline outermost.
BOLD_MARKER = "**"
ITALIC_MARKER = "*"
UNDERLINE_MARKER = "__"

__all__ = [
    "CATEGORY_LABELS", "category_label", "status_color", "status_label",
    "category_icon", "format_response", "format_date", "summarize",
]


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status.replace("_", " ").title())


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, CATEGORY_ICONS["other"])


def format_response(text: str, bold: bool = False, italic: bool = False, underline: bool = False) -> str:
    """Decorate an admin response with the lightweight markers.

    Each enabled marker wraps the whole string once, applied bold, then
    italic, then underline. The result is stored and redisplayed verbatim.
    """
    formatted = text
    if bold:
        formatted = f"{BOLD_MARKER}{formatted}{BOLD_MARKER}"
    if italic:
        formatted = f"{ITALIC_MARKER}{formatted}{ITALIC_MARKER}"
    if underline:
        formatted = f"{UNDERLINE_MARKER}{formatted}{UNDERLINE_MARKER}"
    return formatted


def format_date(value: datetime) -> str:
    """Long US-style date, e.g. ``April 10, 2025``."""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def summarize(concern) -> str:
    """One-line rendering of a concern for terminal output."""
    line = (
        f"[{status_label(concern.status):<11}] {concern.title} "
        f"({category_label(concern.category)}) {format_date(concern.created_at)}"
    )
    owner = getattr(concern, "owner_name", "")
    if owner:
        line += f" from {owner}"
    if concern.admin_response:
        marker = "" if concern.is_read else " *new*"
        line += f"\n    Admin response{marker}: {concern.admin_response}"
    return line
