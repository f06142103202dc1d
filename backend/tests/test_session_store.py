"""Session store tests."""

import json

from ventas.client.session_store import SESSION_TOKEN_KEY, FileSessionStore, MemorySessionStore


def test_file_store_persists_token_under_fixed_key(tmp_path):
    path = tmp_path / "session.json"
    store = FileSessionStore(path)

    store.set_token("abc123")

    assert json.loads(path.read_text(encoding="utf-8")) == {SESSION_TOKEN_KEY: "abc123"}
    assert FileSessionStore(path).get_token() == "abc123"


def test_file_store_missing_file_is_signed_out(tmp_path):
    assert FileSessionStore(tmp_path / "missing.json").get_token() is None


def test_file_store_corrupt_file_is_signed_out(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    assert FileSessionStore(path).get_token() is None


def test_file_store_ignores_unexpected_shapes(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({SESSION_TOKEN_KEY: 42}), encoding="utf-8")
    assert FileSessionStore(path).get_token() is None

    path.write_text(json.dumps(["abc"]), encoding="utf-8")
    assert FileSessionStore(path).get_token() is None


def test_file_store_clear(tmp_path):
    path = tmp_path / "nested" / "session.json"
    store = FileSessionStore(path)
    store.set_token("abc123")

    store.clear()
    store.clear()

    assert not path.exists()
    assert store.get_token() is None


def test_memory_store():
    store = MemorySessionStore()
    assert store.get_token() is None
    store.set_token("t")
    assert store.get_token() == "t"
    store.clear()
    assert store.get_token() is None
