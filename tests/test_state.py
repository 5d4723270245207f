import json

from core.state import SessionStore


def test_token_and_user_persist(tmp_path):
    path = str(tmp_path / "session.json")
    store = SessionStore(path)
    assert not store.has_stored_auth()
    store.set_token("tok")
    store.set_user({"id": "U1", "email": "asesor@example.com"})
    reopened = SessionStore(path)
    assert reopened.get_token() == "tok"
    assert reopened.get_user()["id"] == "U1"
    assert reopened.has_stored_auth()


def test_only_auth_keys_are_loaded(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"token": "t", "wizard": {"step": 3}}))
    store = SessionStore(str(path))
    store.remove_user()
    assert json.loads(path.read_text()) == {"token": "t"}


def test_clear_auth_data(tmp_path):
    path = str(tmp_path / "session.json")
    store = SessionStore(path)
    store.set_token("tok")
    store.clear_auth_data()
    assert store.get_token() is None
    assert SessionStore(path).get_user() is None


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")
    store = SessionStore(str(path))
    assert store.get_token() is None
