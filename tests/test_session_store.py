from pathlib import Path

from blinda.client.session_store import FileSessionStore, MemorySessionStore


def test_file_store_round_trips_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "session_id"
    FileSessionStore(path).set("sess-123")

    assert FileSessionStore(path).get() == "sess-123"
    assert not path.with_suffix(".tmp").exists()


def test_file_store_missing_or_blank_file_is_none(tmp_path: Path) -> None:
    path = tmp_path / "session_id"
    store = FileSessionStore(path)
    assert store.get() is None

    path.write_text("  \n", encoding="utf-8")
    assert store.get() is None


def test_file_store_clear(tmp_path: Path) -> None:
    store = FileSessionStore(tmp_path / "session_id")
    store.set("sess-1")

    store.clear()
    store.clear()

    assert store.get() is None


def test_setting_empty_id_clears(tmp_path: Path) -> None:
    store = FileSessionStore(tmp_path / "session_id")
    store.set("sess-1")

    store.set("")

    assert store.get() is None
    assert not store.path.exists()


def test_memory_store() -> None:
    store = MemorySessionStore("")
    assert store.get() is None

    store.set("sess-2")
    assert store.get() == "sess-2"

    store.clear()
    assert store.get() is None
