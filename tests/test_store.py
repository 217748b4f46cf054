import json
from pathlib import Path

from contentgate.workflows.store import JsonFileStore, MemoryStore


def test_memory_store_defaults() -> None:
    store = MemoryStore()
    assert store.get_string("missing") is None
    assert store.get_bool("missing") is False
    store.set_bool("flag", True)
    store.set_string("name", "value")
    assert store.get_bool("flag") is True
    assert store.get_string("name") == "value"


def test_memory_store_types_do_not_leak() -> None:
    store = MemoryStore({"flag": "yes", "name": True})
    assert store.get_bool("flag") is False
    assert store.get_string("name") is None


def test_json_file_store_survives_restart(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(path)
    store.set_bool("hasShownExternal_k", True)
    store.set_string("savedUrl_k", "https://dest.example/")

    reopened = JsonFileStore(path)
    assert reopened.get_bool("hasShownExternal_k") is True
    assert reopened.get_string("savedUrl_k") == "https://dest.example/"
    assert json.loads(path.read_text(encoding="utf-8"))["savedUrl_k"] == "https://dest.example/"
    assert not path.with_suffix(".json.tmp").exists()


def test_json_file_store_corrupt_file_reads_empty(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get_bool("anything") is False
    store.set_string("k", "v")
    assert JsonFileStore(path).get_string("k") == "v"


def test_json_file_store_non_object_reads_empty(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileStore(path).snapshot() == {}
