import pytest

from qapplet import Storage, StorageQuotaError


@pytest.fixture
def store(tmp_path):
    return Storage(tmp_path / "local-storage")


def test_typed_values_round_trip(store):
    store.put("n", 42)
    store.put("f", 1.5)
    store.put("s", "hello")
    store.put("obj", {"seen": ["a", "b"]})
    store.put("flag", True)
    store.put("nothing", None)

    assert store.get("n") == 42
    assert store.get("f") == 1.5
    assert store.get("s") == "hello"
    assert store.get("obj") == {"seen": ["a", "b"]}
    assert store.get("flag") is True
    assert store.get("nothing") is None


def test_values_are_tagged_on_disk(store):
    store.put("n", 7)
    store.put("obj", [1])
    store.put("nothing", None)
    assert store.get_item("n") == "~#~7"
    assert store.get_item("obj") == "~{~[1]"
    assert store.get_item("nothing") == "~N~"


def test_missing_key_is_none(store):
    assert store.get("missing") is None
    assert store.get_item("missing") is None


def test_corrupt_json_returns_raw_string(store):
    store.set_item("broken", "~{~{not json")
    assert store.get("broken") == "~{~{not json"


def test_keys_survive_reopen(tmp_path):
    Storage(tmp_path / "s").put("a/b c", "x")
    reopened = Storage(tmp_path / "s")
    assert reopened.keys() == ["a/b c"]
    assert reopened.get("a/b c") == "x"


def test_remove_and_clear(store):
    store.put("a", 1)
    store.put("b", 2)
    store.remove_item("a")
    store.remove_item("a")
    assert store.keys() == ["b"]
    store.clear()
    assert store.length == 0


def test_non_string_key_rejected(store):
    with pytest.raises(TypeError):
        store.put(5, "x")


def test_quota_enforced(tmp_path):
    store = Storage(tmp_path / "small", quota=10)
    store.set_item("a", "12345")
    with pytest.raises(StorageQuotaError):
        store.set_item("b", "123456")
    # Overwriting an existing key only counts the new value
    store.set_item("a", "1234567890")
