from datetime import datetime
from types import SimpleNamespace

from concerndesk.client.presentation import (
    format_response, status_color, status_label, category_icon, format_date, summarize,
)


def test_format_response_marker_order():
    assert format_response("Hi") == "Hi"
    assert format_response("Hi", bold=True) == "**Hi**"
    assert format_response("Hi", italic=True) == "*Hi*"
    assert format_response("Hi", underline=True) == "__Hi__"
    assert format_response("Hi", bold=True, italic=True, underline=True) == "__***Hi***__"


def test_status_styles():
    assert status_color("resolved") == "#4CAF50"
    assert status_color("mystery") == "#9E9E9E"
    assert status_label("in_progress") == "In Progress"
    assert status_label("on_hold") == "On Hold"


def test_category_icon_falls_back_to_other():
    assert category_icon("technical") == "build"
    assert category_icon("nope") == category_icon("other")


def test_format_date():
    assert format_date(datetime(2025, 4, 5, 13, 0)) == "April 5, 2025"


def test_summarize_flags_unread_response():
    concern = SimpleNamespace(
        status="resolved", title="Can't upload file", category="technical",
        created_at=datetime(2025, 4, 10), owner_name="Alice Reyes",
        admin_response="**We are investigating.**", is_read=False,
    )
    text = summarize(concern)
    assert "Resolved" in text
    assert "Technical Issues" in text
    assert "from Alice Reyes" in text
    assert "*new*" in text
