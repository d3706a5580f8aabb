from datetime import datetime, timezone

from tenantnotes.schemas.common import ErrorKind
from tenantnotes.schemas.tenant import FREE_PLAN_NOTE_LIMIT
from tenantnotes.services.tenant_store import TenantStore


def test_create_note_trims_and_stamps(store, team):
    result = store.create_note(team.id, "A@x.com", " Hi ", " body ")

    assert result.success is True
    note = store.list_notes(team.id)[0]
    assert note == result.note
    assert note.title == "Hi"
    assert note.content == "body"
    assert note.author_email == "a@x.com"
    assert note.tenant_id == team.id
    assert note.created_at == note.updated_at


def test_create_note_unknown_tenant(store):
    result = store.create_note("missing", "a@x.com", "t", "c")
    assert result.success is False
    assert result.error == ErrorKind.tenant_not_found


def test_free_plan_quota(store, team):
    for i in range(FREE_PLAN_NOTE_LIMIT):
        assert store.create_note(team.id, "a@x.com", f"note {i}", "").success is True

    result = store.create_note(team.id, "a@x.com", "one too many", "")

    assert result.success is False
    assert result.error == ErrorKind.quota_exceeded
    assert result.message == "Free plan limit reached (3 notes). Upgrade to Pro."
    assert store.count_notes(team.id) == 3


def test_upgrade_lifts_quota(store, team):
    for i in range(3):
        store.create_note(team.id, "a@x.com", f"note {i}", "")
    store.upgrade_tenant_to_pro(team.id)

    for i in range(5):
        assert store.create_note(team.id, "a@x.com", f"pro {i}", "").success is True
    assert store.count_notes(team.id) == 8


def test_quota_is_per_tenant(store, team):
    other = store.create_team("Other", "b@x.com").tenant
    for i in range(3):
        store.create_note(team.id, "a@x.com", f"note {i}", "")

    assert store.create_note(other.id, "b@x.com", "fine", "").success is True


def test_delete_frees_quota(store, team):
    ids = [store.create_note(team.id, "a@x.com", f"n{i}", "").note.id for i in range(3)]
    store.delete_note(team.id, ids[0])
    assert store.create_note(team.id, "a@x.com", "again", "").success is True


def test_list_notes_most_recently_updated_first(store, team):
    first = store.create_note(team.id, "a@x.com", "t1", "").note
    second = store.create_note(team.id, "a@x.com", "t2", "").note
    third = store.create_note(team.id, "a@x.com", "t3", "").note

    assert [n.id for n in store.list_notes(team.id)] == [third.id, second.id, first.id]

    store.update_note(team.id, first.id, "t1 edited", "")
    assert [n.id for n in store.list_notes(team.id)] == [first.id, third.id, second.id]


def test_list_notes_equal_timestamps_keep_stored_order(storage):
    fixed = datetime(2026, 3, 1, tzinfo=timezone.utc)
    store = TenantStore(storage, clock=lambda: fixed)
    store.upgrade_tenant_to_pro(store.create_team("Same", "a@x.com").tenant.id)
    tenant_id = store.list_user_teams("a@x.com")[0].id

    ids = [store.create_note(tenant_id, "a@x.com", f"n{i}", "").note.id for i in range(3)]

    assert [n.id for n in store.list_notes(tenant_id)] == ids


def test_list_and_count_are_tenant_scoped(store, team):
    other = store.create_team("Other", "b@x.com").tenant
    store.create_note(team.id, "a@x.com", "mine", "")
    store.create_note(other.id, "b@x.com", "theirs", "")

    assert [n.title for n in store.list_notes(team.id)] == ["mine"]
    assert store.count_notes(team.id) == 1
    assert store.count_notes("missing") == 0
    assert store.list_notes("missing") == []


def test_update_note(store, team):
    created = store.create_note(team.id, "a@x.com", "old", "old body").note

    result = store.update_note(team.id, created.id, "  new ", " new body ")

    assert result.success is True
    updated = result.note
    assert updated.title == "new"
    assert updated.content == "new body"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at
    assert updated.author_email == created.author_email


def test_update_note_enforces_tenant_isolation(store, team):
    other = store.create_team("Other", "b@x.com").tenant
    note = store.create_note(team.id, "a@x.com", "secret", "body").note

    result = store.update_note(other.id, note.id, "hacked", "hacked")

    assert result.success is False
    assert result.error == ErrorKind.note_not_found
    assert result.message == "Note not found"
    assert store.list_notes(team.id)[0] == note


def test_delete_note(store, team):
    note = store.create_note(team.id, "a@x.com", "bye", "").note
    assert store.delete_note(team.id, note.id).success is True
    assert store.list_notes(team.id) == []


def test_delete_note_is_idempotent(store, team):
    note = store.create_note(team.id, "a@x.com", "keep", "").note
    before = store.read_collection("saas_notes", [])

    result = store.delete_note(team.id, "missing")

    assert result.success is True
    assert result.error is None
    assert store.read_collection("saas_notes", []) == before
    assert store.list_notes(team.id) == [note]


def test_delete_note_from_other_tenant_is_ignored(store, team):
    other = store.create_team("Other", "b@x.com").tenant
    note = store.create_note(team.id, "a@x.com", "keep", "").note

    assert store.delete_note(other.id, note.id).success is True
    assert store.list_notes(team.id) == [note]
