import json

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tenantnotes.crud.base import (
    COLLECTION_KEYS,
    MEMBERSHIPS_KEY,
    NOTES_KEY,
    TENANTS_KEY,
    ensure_init,
    read_collection,
    write_collection,
)
from tenantnotes.services.tenant_store import TenantStore
from tenantnotes.storage import CorruptCollectionError, KeyValueStorage, MemoryStorage


def test_memory_storage_get_set_remove():
    storage = MemoryStorage()
    assert storage.get_item("k") is None
    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"
    storage.remove_item("k")
    assert storage.get_item("k") is None
    storage.remove_item("missing")


def test_storages_satisfy_protocol(storage, sql_storage):
    assert isinstance(storage, KeyValueStorage)
    assert isinstance(sql_storage, KeyValueStorage)


def test_sql_storage_overwrites_value(sql_storage):
    sql_storage.set_item("k", "first")
    sql_storage.set_item("k", "second")
    assert sql_storage.get_item("k") == "second"
    sql_storage.remove_item("k")
    assert sql_storage.get_item("k") is None


def test_ensure_init_creates_empty_collections(storage):
    ensure_init(storage)
    for key in COLLECTION_KEYS:
        assert json.loads(storage.get_item(key)) == []


def test_ensure_init_is_idempotent(storage):
    write_collection(storage, TENANTS_KEY, [{"id": "t1"}])
    ensure_init(storage)
    ensure_init(storage)
    assert read_collection(storage, TENANTS_KEY, []) == [{"id": "t1"}]
    assert read_collection(storage, NOTES_KEY) == []


def test_read_collection_returns_fallback_when_absent(storage):
    assert read_collection(storage, MEMBERSHIPS_KEY, "fallback") == "fallback"


def test_read_collection_propagates_decode_errors(storage):
    storage.set_item(NOTES_KEY, "{not json")
    with pytest.raises(CorruptCollectionError) as exc_info:
        read_collection(storage, NOTES_KEY, [])
    assert exc_info.value.key == NOTES_KEY
    assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


def test_invalid_records_propagate_from_operations(store, storage):
    storage.set_item(TENANTS_KEY, json.dumps([{"name": "no id"}]))
    with pytest.raises(CorruptCollectionError):
        store.get_tenant_by_id("anything")


def test_non_list_collection_is_corrupt(store, storage):
    storage.set_item(NOTES_KEY, json.dumps({"id": "n1"}))
    with pytest.raises(CorruptCollectionError):
        store.list_notes("t1")


def test_persisted_layout_uses_camel_case_fields(store, storage, team):
    store.create_note(team.id, "a@x.com", "Title", "Body")

    tenants = json.loads(storage.get_item(TENANTS_KEY))
    assert set(tenants[0]) == {"id", "name", "plan", "createdAt", "inviteCode", "ownerEmail"}
    memberships = json.loads(storage.get_item(MEMBERSHIPS_KEY))
    assert memberships == [{"userEmail": "owner@acme.com", "tenantId": team.id, "role": "admin"}]
    notes = json.loads(storage.get_item(NOTES_KEY))
    assert set(notes[0]) == {"id", "tenantId", "authorEmail", "title", "content", "createdAt", "updatedAt"}


def test_store_reads_data_written_by_another_store(sql_storage, clock):
    first = TenantStore(sql_storage, clock=clock)
    tenant = first.create_team("Shared", "a@x.com").tenant

    second = TenantStore(sql_storage, clock=clock)
    assert second.get_tenant_by_id(tenant.id) == tenant
    assert second.get_membership_for_tenant("a@x.com", tenant.id).role.value == "admin"


def test_concurrent_writers_last_write_wins(storage, clock):
    # Known race: whole-collection writes from a stale snapshot discard
    # records added in between.
    writer = TenantStore(storage, clock=clock)
    team = writer.create_team("Race", "a@x.com").tenant
    stale_snapshot = writer.read_collection(NOTES_KEY, [])

    writer.create_note(team.id, "a@x.com", "kept?", "")
    writer.write_collection(NOTES_KEY, stale_snapshot)

    assert writer.count_notes(team.id) == 0


def test_unrelated_writes_keep_other_records_verbatim(store, storage, team):
    legacy_tenant = {
        "id": "legacy",
        "name": "Legacy",
        "plan": "enterprise",
        "createdAt": "2025-01-01T00:00:00.000Z",
        "seats": 10,
    }
    legacy_member = {"userEmail": "old@x.com", "tenantId": "legacy", "role": "owner", "since": 2019}
    tenants = json.loads(storage.get_item(TENANTS_KEY)) + [legacy_tenant]
    members = json.loads(storage.get_item(MEMBERSHIPS_KEY)) + [legacy_member]
    storage.set_item(TENANTS_KEY, json.dumps(tenants))
    storage.set_item(MEMBERSHIPS_KEY, json.dumps(members))

    store.rotate_invite_code(team.id)
    store.upgrade_tenant_to_pro(team.id)
    store.get_or_create_tenant_by_name("Fresh")
    store.add_membership("new@x.com", team.id, "member")
    store.update_member_role("owner@acme.com", team.id, "member")

    stored_tenants = json.loads(storage.get_item(TENANTS_KEY))
    stored_members = json.loads(storage.get_item(MEMBERSHIPS_KEY))
    assert stored_tenants[1] == legacy_tenant
    assert stored_members[1] == legacy_member
    # Reads still coerce the legacy values
    assert store.get_tenant_by_id("legacy").is_free is True
    assert store.get_membership_for_tenant("old@x.com", "legacy").role.value == "member"


def test_update_keeps_unknown_keys_on_target_record(store, storage, team):
    tenants = json.loads(storage.get_item(TENANTS_KEY))
    tenants[0]["color"] = "blue"
    storage.set_item(TENANTS_KEY, json.dumps(tenants))

    store.upgrade_tenant_to_pro(team.id)

    stored = json.loads(storage.get_item(TENANTS_KEY))[0]
    assert stored["color"] == "blue"
    assert stored["plan"] == "pro"
    assert stored["inviteCode"] == team.invite_code


def test_delete_keeps_remaining_records_verbatim(store, storage, team):
    keep = {
        "id": "n-legacy",
        "tenantId": team.id,
        "authorEmail": "a@x.com",
        "title": "old",
        "content": "",
        "createdAt": "2025-01-01T00:00:00.000Z",
        "updatedAt": "2025-01-01T00:00:00.000Z",
        "pinned": True,
    }
    note = store.create_note(team.id, "a@x.com", "gone", "").note
    notes = json.loads(storage.get_item(NOTES_KEY)) + [keep]
    storage.set_item(NOTES_KEY, json.dumps(notes))

    store.delete_note(team.id, note.id)

    assert json.loads(storage.get_item(NOTES_KEY)) == [keep]


def test_malformed_updated_at_is_corrupt(store, storage, team):
    store.create_note(team.id, "a@x.com", "ok", "")
    notes = json.loads(storage.get_item(NOTES_KEY))
    notes[0]["updatedAt"] = "yesterday"
    storage.set_item(NOTES_KEY, json.dumps(notes))

    with pytest.raises(CorruptCollectionError) as exc_info:
        store.list_notes(team.id)
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_sql_storage_remove_rolls_back_and_reraises(sql_storage, monkeypatch):
    sql_storage.set_item("k", "v")

    def failing_commit(self):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(Session, "commit", failing_commit)
    with pytest.raises(SQLAlchemyError):
        sql_storage.remove_item("k")
    monkeypatch.undo()

    assert sql_storage.get_item("k") == "v"
