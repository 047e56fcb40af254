"""
Tests for auth_service: bcrypt hashing and the in-memory session store.
"""
from backend.app.services.auth_service import SessionStore, hash_password, verify_password


def test_hash_and_verify():
    hashed = hash_password("s3cret-pass")

    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_malformed_hash_is_a_mismatch():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_session_roundtrip():
    store = SessionStore(expire_hours=1)

    token = store.create(42)

    assert store.user_id_for(token) == 42
    assert store.user_id_for("unknown") is None
    assert store.user_id_for(None) is None
    assert store.delete(token)
    assert store.user_id_for(token) is None


def test_expired_session_is_dropped():
    store = SessionStore(expire_hours=0)

    token = store.create(7)

    assert store.user_id_for(token) is None
    assert len(store) == 0


def test_purge_keeps_live_sessions():
    live = SessionStore(expire_hours=1)
    kept = live.create(2)
    stale = SessionStore(expire_hours=0)
    stale.create(1)
    stale.create(1)

    assert live.purge_expired() == 0
    assert live.user_id_for(kept) == 2
    assert stale.purge_expired() == 2
