"""Tests for snapshot key-value stores."""

import pytest

from rationale_tracker.storage.state_store import JsonFileStore, MemoryStore, create_store
from rationale_tracker.utils.errors import ErrorType, PersistenceError

KEY = "art-loan-cockpit-state"


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return JsonFileStore(str(tmp_path / "state"))


def test_get_missing_key(store):
    assert store.get(KEY) is None


def test_set_get_remove(store):
    store.set(KEY, '{"loan": null}')
    assert store.get(KEY) == '{"loan": null}'

    store.set(KEY, '{"loan": "replaced"}')
    assert store.get(KEY) == '{"loan": "replaced"}'

    store.remove(KEY)
    assert store.get(KEY) is None


def test_remove_missing_key_is_noop(store):
    store.remove(KEY)


def test_file_store_writes_one_file_per_key(tmp_path):
    store = JsonFileStore(str(tmp_path / "state"))

    store.set(KEY, "{}")

    assert (tmp_path / "state" / f"{KEY}.json").read_text(encoding="utf-8") == "{}"
    assert not (tmp_path / "state" / f"{KEY}.json.tmp").exists()


def test_file_store_write_failure_raises_persistence_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = JsonFileStore(str(blocker / "state"))

    with pytest.raises(PersistenceError) as excinfo:
        store.set(KEY, "{}")

    assert excinfo.value.error_type == ErrorType.STORE_WRITE_FAILED


def test_create_store(tmp_path):
    assert isinstance(create_store("memory"), MemoryStore)
    assert isinstance(create_store("file", str(tmp_path)), JsonFileStore)
    with pytest.raises(ValueError):
        create_store("redis")
