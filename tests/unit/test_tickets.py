"""Ticket service rules: validation, roles, status closure, responses, read-marking."""

import itertools

import pytest

from concerndesk.db import crud
from concerndesk.errors import ValidationError, Unauthenticated, Forbidden, NotFound
from concerndesk.services import notifications, tickets
from concerndesk.services.auth import AuthSession

STATUSES = ["pending", "in_progress", "resolved"]


async def _new(db, session, title="Can't upload file", message="Error 500", category="technical"):
    return await tickets.create_concern(db, session, title, message, category)


# ── create ───────────────────────────────────────────────

async def test_create_starts_pending_and_read(db, people):
    concern = await _new(db, people.as_alice)
    assert concern.status == "pending"
    assert concern.is_read is True
    assert concern.admin_response == ""
    assert concern.owner_id == people.alice.id


@pytest.mark.parametrize("field,kwargs", [
    ("title", {"title": "   "}),
    ("message", {"message": ""}),
    ("category", {"category": "billing"}),
])
async def test_create_validation_names_the_field(db, people, field, kwargs):
    with pytest.raises(ValidationError) as exc:
        await _new(db, people.as_alice, **kwargs)
    assert exc.value.field == field
    assert await crud.list_all_concerns(db) == []


async def test_missing_credential_fails_before_store(db, people):
    with pytest.raises(Unauthenticated):
        await _new(db, None)
    with pytest.raises(Unauthenticated):
        await _new(db, AuthSession(user_id=people.alice.id, is_admin=False, token=""))
    assert await crud.list_all_concerns(db) == []


# ── listing ──────────────────────────────────────────────

async def test_owner_listing_is_scoped(db, people):
    await _new(db, people.as_alice, title="Alice 1")
    await _new(db, people.as_alice, title="Alice 2")
    await _new(db, people.as_bob, title="Bob 1")

    alice = await tickets.list_for_owner(db, people.as_alice)
    assert {c.title for c in alice} == {"Alice 1", "Alice 2"}
    assert all(c.owner_id == people.alice.id for c in alice)

    everything = await tickets.list_all(db, people.as_admin)
    assert {c.owner_id for c in everything} == {people.alice.id, people.bob.id}


async def test_list_all_requires_admin(db, people):
    with pytest.raises(Forbidden):
        await tickets.list_all(db, people.as_alice)


async def test_get_hides_other_owners_concerns(db, people):
    concern = await _new(db, people.as_alice)
    with pytest.raises(NotFound):
        await tickets.get_concern(db, people.as_bob, concern.id)
    assert (await tickets.get_concern(db, people.as_admin, concern.id)).id == concern.id


# ── status ───────────────────────────────────────────────

@pytest.mark.parametrize("start,target", list(itertools.permutations(STATUSES, 2)))
async def test_every_status_transition_is_allowed(db, people, start, target):
    concern = await _new(db, people.as_alice)
    if start != "pending":
        await tickets.set_status(db, people.as_admin, concern.id, start)

    updated = await tickets.set_status(db, people.as_admin, concern.id, target)
    assert updated.status == target
    assert (await crud.get_concern(db, concern.id)).status == target


async def test_set_status_rejects_unknown_value(db, people):
    concern = await _new(db, people.as_alice)
    with pytest.raises(ValidationError) as exc:
        await tickets.set_status(db, people.as_admin, concern.id, "closed")
    assert exc.value.field == "status"


async def test_set_status_is_admin_only(db, people):
    concern = await _new(db, people.as_alice)
    with pytest.raises(Forbidden):
        await tickets.set_status(db, people.as_alice, concern.id, "resolved")


async def test_set_status_missing_concern(db, people):
    with pytest.raises(NotFound):
        await tickets.set_status(db, people.as_admin, "01MISSING", "resolved")


async def test_in_progress_without_response_keeps_response_empty(db, people):
    concern = await _new(db, people.as_alice)
    updated = await tickets.set_status(db, people.as_admin, concern.id, "in_progress")
    assert updated.status == "in_progress"
    assert updated.admin_response == ""


async def test_resolved_without_response_is_not_enforced(db, people):
    # resolved normally pairs with a response, but nothing requires it
    concern = await _new(db, people.as_alice)
    updated = await tickets.set_status(db, people.as_admin, concern.id, "resolved")
    assert updated.status == "resolved"
    assert updated.admin_response == ""


async def test_set_status_keeps_existing_response(db, people):
    concern = await _new(db, people.as_alice)
    await tickets.respond(db, people.as_admin, concern.id, "Fixed")
    updated = await tickets.set_status(db, people.as_admin, concern.id, "in_progress")
    assert updated.admin_response == "Fixed"


# ── respond ──────────────────────────────────────────────

async def test_respond_resolves_and_notifies_once(db, people):
    concern = await _new(db, people.as_alice)
    text = "**We are investigating.**"

    updated = await tickets.respond(db, people.as_admin, concern.id, text)
    assert updated.status == "resolved"
    assert updated.admin_response == text
    assert updated.is_read is False

    notes = await crud.list_notifications_for_reference(db, concern.id)
    assert len(notes) == 1
    assert notes[0].user_id == people.alice.id
    assert notes[0].type == "info"
    assert notes[0].message == 'An admin has responded to your concern: "Can\'t upload file"'


async def test_respond_rejects_empty_text(db, people):
    concern = await _new(db, people.as_alice)
    with pytest.raises(ValidationError) as exc:
        await tickets.respond(db, people.as_admin, concern.id, "  ")
    assert exc.value.field == "admin_response"


async def test_respond_is_admin_only(db, people):
    concern = await _new(db, people.as_alice)
    with pytest.raises(Forbidden):
        await tickets.respond(db, people.as_alice, concern.id, "I fixed it myself")


async def test_notification_failure_does_not_undo_response(db, people, monkeypatch, caplog):
    concern = await _new(db, people.as_alice)

    async def broken_enqueue(*args, **kwargs):
        raise RuntimeError("notification store down")

    monkeypatch.setattr(crud, "enqueue_notification", broken_enqueue)

    updated = await tickets.respond(db, people.as_admin, concern.id, "Done")
    assert updated.status == "resolved"
    assert (await crud.get_concern(db, concern.id)).admin_response == "Done"
    assert "Failed to notify owner" in caplog.text


async def test_revert_after_response_sends_no_notification(db, people):
    concern = await _new(db, people.as_alice)
    await tickets.respond(db, people.as_admin, concern.id, "Done")
    await tickets.set_status(db, people.as_admin, concern.id, "pending")

    assert len(await crud.list_notifications_for_reference(db, concern.id)) == 1
    assert (await crud.get_concern(db, concern.id)).status == "pending"


# ── combined update (PUT semantics) ──────────────────────

async def test_update_with_response_and_resolved_is_a_response(db, people):
    concern = await _new(db, people.as_alice)
    updated = await tickets.update_concern(db, people.as_admin, concern.id, "resolved", "Answer")
    assert updated.status == "resolved"
    assert len(await crud.list_notifications_for_reference(db, concern.id)) == 1


async def test_re_resolving_with_stored_response_does_not_notify_again(db, people):
    concern = await _new(db, people.as_alice)
    await tickets.respond(db, people.as_admin, concern.id, "Done")
    await tickets.mark_read(db, people.as_alice, concern.id)
    await tickets.set_status(db, people.as_admin, concern.id, "in_progress", "Done")

    updated = await tickets.update_concern(db, people.as_admin, concern.id, "resolved", "Done")

    assert updated.status == "resolved"
    assert updated.admin_response == "Done"
    assert updated.is_read is True
    assert len(await crud.list_notifications_for_reference(db, concern.id)) == 1


async def test_edited_response_notifies_again(db, people):
    concern = await _new(db, people.as_alice)
    await tickets.respond(db, people.as_admin, concern.id, "Done")
    updated = await tickets.update_concern(db, people.as_admin, concern.id, admin_response="Done, see email")
    assert updated.is_read is False
    assert len(await crud.list_notifications_for_reference(db, concern.id)) == 2


async def test_owner_sees_notifications_for_one_concern(db, people):
    first = await _new(db, people.as_alice)
    second = await _new(db, people.as_alice, title="Second")
    await tickets.respond(db, people.as_admin, first.id, "One")
    await tickets.respond(db, people.as_admin, second.id, "Two")

    notes = await notifications.list_for(db, people.as_alice, reference_id=first.id)
    assert [n.reference_id for n in notes] == [first.id]
    assert await notifications.list_for(db, people.as_bob, reference_id=first.id) == []
    assert len(await notifications.list_for(db, people.as_alice)) == 2


async def test_update_status_only(db, people):
    concern = await _new(db, people.as_alice)
    updated = await tickets.update_concern(db, people.as_admin, concern.id, status="in_progress")
    assert updated.status == "in_progress"
    assert await crud.list_notifications_for_reference(db, concern.id) == []


async def test_update_requires_status_or_response(db, people):
    concern = await _new(db, people.as_alice)
    with pytest.raises(ValidationError):
        await tickets.update_concern(db, people.as_admin, concern.id)


# ── mark_read ────────────────────────────────────────────

async def test_mark_read_flips_unread_response(db, people):
    concern = await _new(db, people.as_alice)
    await tickets.respond(db, people.as_admin, concern.id, "Done")

    updated = await tickets.mark_read(db, people.as_alice, concern.id)
    assert updated.is_read is True


async def test_mark_read_is_idempotent(db, people):
    concern = await _new(db, people.as_alice)
    await tickets.respond(db, people.as_admin, concern.id, "Done")

    once = await tickets.mark_read(db, people.as_alice, concern.id)
    state_once = (once.is_read, once.status, once.admin_response, once.updated_at)
    twice = await tickets.mark_read(db, people.as_alice, concern.id)
    assert (twice.is_read, twice.status, twice.admin_response, twice.updated_at) == state_once
    assert twice.is_read is True


async def test_mark_read_without_response_is_noop(db, people):
    concern = await _new(db, people.as_alice)
    updated = await tickets.mark_read(db, people.as_alice, concern.id)
    assert updated.is_read is True


async def test_mark_read_failures_are_swallowed(db, people):
    concern = await _new(db, people.as_alice)
    await tickets.respond(db, people.as_admin, concern.id, "Done")

    assert await tickets.mark_read(db, people.as_bob, concern.id) is None
    assert await tickets.mark_read(db, people.as_alice, "01MISSING") is None
    assert (await crud.get_concern(db, concern.id)).is_read is False
