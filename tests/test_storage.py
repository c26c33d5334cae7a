"""
Tests for the storage backends
"""

import json

import pytest

from mediflex.services.storage import JsonFileStorage, MemoryStorage


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStorage()
    return JsonFileStorage(str(tmp_path / "store.json"))


def test_get_default(store):
    assert store.get("missing") is None
    assert store.get("missing", []) == []


def test_set_get_remove(store):
    store.set("distributors", [{"id": 1, "name": "Acme"}])
    assert store.get("distributors") == [{"id": 1, "name": "Acme"}]

    store.remove("distributors")
    assert store.get("distributors") is None

    store.remove("distributors")


def test_clear(store):
    store.set("a", 1)
    store.set("b", 2)
    store.clear()
    assert store.get("a") is None
    assert store.get("b") is None


def test_values_are_copies(store):
    value = [{"id": 1}]
    store.set("k", value)
    value.append({"id": 2})
    store.get("k").append({"id": 3})
    assert store.get("k") == [{"id": 1}]


def test_memory_rejects_unserializable():
    with pytest.raises(TypeError):
        MemoryStorage().set("k", object())


def test_file_storage_persists(tmp_path):
    path = tmp_path / "nested" / "store.json"
    JsonFileStorage(str(path)).set("ocrScansCount", 3)

    assert json.loads(path.read_text(encoding="utf-8")) == {"ocrScansCount": 3}
    assert JsonFileStorage(str(path)).get("ocrScansCount") == 3


def test_file_storage_corrupt_file_is_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileStorage(str(path))
    assert store.get("mediflex_inventory") is None

    store.set("mediflex_inventory", [])
    assert json.loads(path.read_text(encoding="utf-8")) == {"mediflex_inventory": []}


def test_file_storage_non_object_is_ignored(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert JsonFileStorage(str(path)).get("anything", "default") == "default"
