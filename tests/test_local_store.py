from __future__ import annotations

from src.leave_portal.leave_portal.local_store.fallback import FallbackStore, admin_key, owner_key
from src.leave_portal.leave_portal.local_store.store import LocalStore


def test_keys_are_namespaced():
    assert owner_key("leave_requests", "emp-1") == "leave_requests_emp-1"
    assert admin_key("leave_requests") == "all_leave_requests"


def test_values_survive_a_new_store_on_the_same_file(tmp_path):
    path = tmp_path / "store.json"
    first = FallbackStore(LocalStore(path))
    first.prepend("things", {"id": "a"})
    first.prepend("things", {"id": "b"})

    second = FallbackStore(LocalStore(path))
    assert second.read_list("things") == [{"id": "b"}, {"id": "a"}]


def test_prepend_replaces_and_limits():
    store = FallbackStore(LocalStore())
    store.prepend("k", {"id": 1, "v": "old"})
    store.prepend("k", {"id": 2})
    items = store.prepend("k", {"id": 1, "v": "new"}, replace=lambda i: i["id"] == 1, limit=2)

    assert items == [{"id": 1, "v": "new"}, {"id": 2}]


def test_update_on_missing_key_returns_none():
    store = FallbackStore(LocalStore())
    assert store.update("missing", lambda i: True, lambda i: i) is None


def test_corrupt_values_read_as_missing():
    raw = LocalStore()
    raw.set_item("broken", "{not json")
    raw.set_item("scalar", "42")
    store = FallbackStore(raw)

    assert store.read_json("broken") is None
    assert store.read_list("scalar") is None


def test_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("garbage", encoding="utf-8")
    assert LocalStore(path).keys() == []


def test_current_user_round_trip():
    store = FallbackStore(LocalStore())
    store.set_current_user({"id": "u1", "role": "admin"})
    assert store.get_current_user() == {"id": "u1", "role": "admin"}

    store.clear_current_user()
    assert store.get_current_user() is None


def test_upsert_replaces_a_match_or_prepends():
    store = FallbackStore(LocalStore())
    store.prepend("k", {"id": 1, "v": "old"})

    assert store.upsert("k", {"id": 1, "v": "new"}, lambda i: i["id"] == 1) == [{"id": 1, "v": "new"}]
    assert store.upsert("k", {"id": 2}, lambda i: i["id"] == 2) == [{"id": 2}, {"id": 1, "v": "new"}]
    assert store.upsert("fresh", {"id": 3}, lambda i: i["id"] == 3) == [{"id": 3}]
