from __future__ import annotations

import json
import logging
from typing import Any

from .config import DEFAULT_STORAGE_CONFIG, StorageConfig
from .kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)

CUSTOM_CATEGORIES_KEY = "customCategories"
NOTIFICATION_PROMPT_KEY = "notification-prompt-dismissed"


def reviews_key(business_id: str) -> str:
    return f"reviews_{business_id}"


def notes_key(business_id: str) -> str:
    return f"notes_{business_id}"


class LocalState:
    """Typed view over the keys the directory keeps between visits.

    Values are JSON-encoded strings; anything that fails to decode is logged
    and treated as absent.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _read_list(self, key: str) -> list[Any]:
        raw = self.store.get(key)
        if raw is None:
            return []
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt value for %s", key)
            return []
        if not isinstance(value, list):
            logger.warning("Discarding non-list value for %s", key)
            return []
        return value

    def _write_list(self, key: str, values: list[Any]) -> None:
        self.store.set(key, json.dumps(values, ensure_ascii=False))

    # Custom categories

    def custom_categories(self) -> list[str]:
        return [str(c) for c in self._read_list(CUSTOM_CATEGORIES_KEY) if isinstance(c, str)]

    def set_custom_categories(self, categories: list[str]) -> list[str]:
        cleaned: list[str] = []
        for category in categories:
            category = category.strip()
            if category and category not in cleaned:
                cleaned.append(category)
        self._write_list(CUSTOM_CATEGORIES_KEY, cleaned)
        return cleaned

    # Reviews and notes

    def reviews(self, business_id: str) -> list[dict[str, Any]]:
        return [r for r in self._read_list(reviews_key(business_id)) if isinstance(r, dict)]

    def add_review(self, business_id: str, review: dict[str, Any]) -> list[dict[str, Any]]:
        reviews = self.reviews(business_id)
        reviews.append(review)
        self._write_list(reviews_key(business_id), reviews)
        return reviews

    def notes(self, business_id: str) -> list[dict[str, Any]]:
        return [n for n in self._read_list(notes_key(business_id)) if isinstance(n, dict)]

    def add_note(self, business_id: str, note: dict[str, Any]) -> list[dict[str, Any]]:
        notes = self.notes(business_id)
        notes.append(note)
        self._write_list(notes_key(business_id), notes)
        return notes

    # Notification prompt

    def notification_prompt_dismissed(self) -> bool:
        return self.store.get(NOTIFICATION_PROMPT_KEY) == "true"

    def set_notification_prompt_dismissed(self, dismissed: bool = True) -> None:
        if dismissed:
            self.store.set(NOTIFICATION_PROMPT_KEY, "true")
        else:
            self.store.remove(NOTIFICATION_PROMPT_KEY)


def build_local_state(config: StorageConfig = DEFAULT_STORAGE_CONFIG) -> LocalState:
    if config.local_state_path:
        return LocalState(JsonFileKeyValueStore(config.local_state_path))
    return LocalState(InMemoryKeyValueStore())
