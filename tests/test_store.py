"""Key-value store over the storeentry table."""

import pytest

from quiz_engine.exceptions import CorruptStoreError, StoreUnavailableError
from quiz_engine.schemas import quiz_list_adapter
from quiz_engine.store import QUIZZES_KEY


def test_missing_key_is_none(store):
    assert store.get_item("nothing") is None
    assert store.load_json("nothing", default=[]) == []


def test_set_then_get(store):
    store.set_item("k", "v1")
    assert store.get_item("k") == "v1"


def test_set_replaces_existing_value(store):
    store.set_item("k", "v1")
    store.set_item("k", "v2")
    assert store.get_item("k") == "v2"


def test_remove_item(store):
    store.set_item("k", "v")
    store.remove_item("k")
    assert store.get_item("k") is None
    # Removing again is harmless
    store.remove_item("k")


def test_json_documents(store):
    store.save_json("doc", [{"a": 1}, {"b": [True, None]}])
    assert store.load_json("doc") == [{"a": 1}, {"b": [True, None]}]


def test_invalid_json_raises_corrupt(store):
    store.set_item("doc", "[1, 2")
    with pytest.raises(CorruptStoreError) as exc_info:
        store.load_json("doc")
    assert exc_info.value.key == "doc"
    assert "invalid JSON" in exc_info.value.reason


def test_missing_collection_is_empty(store):
    assert store.load_collection(QUIZZES_KEY, quiz_list_adapter) == []


def test_collection_with_wrong_shape_raises_corrupt(store):
    store.save_json(QUIZZES_KEY, {"not": "a list"})
    with pytest.raises(CorruptStoreError):
        store.load_collection(QUIZZES_KEY, quiz_list_adapter)


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.get_item("k"),
        lambda s: s.set_item("k", "v"),
        lambda s: s.remove_item("k"),
    ],
)
def test_unusable_database_raises_unavailable(broken_store, call):
    with pytest.raises(StoreUnavailableError):
        call(broken_store)
