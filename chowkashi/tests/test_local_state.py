from __future__ import annotations

import json

from chowkashi.storage.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from chowkashi.storage.local_state import LocalState, build_local_state
from chowkashi.storage.config import StorageConfig


def test_custom_categories_round_trip_and_dedupe():
    state = LocalState(InMemoryKeyValueStore())
    assert state.custom_categories() == []
    saved = state.set_custom_categories(["Pet Care", " pet care ", "Pet Care", "", "Tutors"])
    assert saved == ["Pet Care", "pet care", "Tutors"]
    assert json.loads(state.store.get("customCategories")) == saved


def test_reviews_and_notes_are_keyed_per_business():
    state = LocalState(InMemoryKeyValueStore())
    state.add_review("b1", {"rating": 5})
    state.add_review("b1", {"rating": 3})
    state.add_note("b2", {"text": "call before visiting"})

    assert [r["rating"] for r in state.reviews("b1")] == [5, 3]
    assert state.reviews("b2") == []
    assert state.notes("b2") == [{"text": "call before visiting"}]
    assert state.store.get("reviews_b1") is not None
    assert state.store.get("notes_b2") is not None


def test_corrupt_values_are_treated_as_absent():
    store = InMemoryKeyValueStore({
        "customCategories": "{not json",
        "reviews_b1": '{"rating": 5}',
    })
    state = LocalState(store)
    assert state.custom_categories() == []
    assert state.reviews("b1") == []


def test_notification_prompt_flag():
    state = LocalState(InMemoryKeyValueStore())
    assert state.notification_prompt_dismissed() is False
    state.set_notification_prompt_dismissed()
    assert state.store.get("notification-prompt-dismissed") == "true"
    assert state.notification_prompt_dismissed() is True
    state.set_notification_prompt_dismissed(False)
    assert state.store.get("notification-prompt-dismissed") is None


def test_json_file_store_persists(tmp_path):
    path = tmp_path / "state.json"
    LocalState(JsonFileKeyValueStore(path)).set_custom_categories(["Tailors"])

    reopened = LocalState(JsonFileKeyValueStore(path))
    assert reopened.custom_categories() == ["Tailors"]

    reopened.store.clear()
    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("[1, 2", encoding="utf-8")
    store = JsonFileKeyValueStore(path)
    assert store.get("customCategories") is None
    store.set("a", "b")
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "b"}


def test_build_local_state_selects_backend(tmp_path):
    assert isinstance(build_local_state(StorageConfig(local_state_path="")).store, InMemoryKeyValueStore)
    file_state = build_local_state(StorageConfig(local_state_path=str(tmp_path / "s.json")))
    assert isinstance(file_state.store, JsonFileKeyValueStore)
