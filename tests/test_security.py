"""Tests for password hashing and bearer session bookkeeping."""

from datetime import datetime, timedelta

from securevault.core.security import (
    close_session,
    hash_password,
    open_session,
    purge_expired_sessions,
    verify_password,
)
from securevault.db.models.auth_session import AuthSession


def _expired_row(db, user, token_hash):
    past = datetime.utcnow() - timedelta(days=2)
    db.add(AuthSession(
        user_id=user.id,
        token_hash=token_hash,
        created_at=past,
        expires_at=past + timedelta(hours=1),
    ))
    db.commit()


class TestPasswords:

    def test_hash_verifies(self):
        hashed = hash_password("correct horse battery")
        assert hashed.startswith("$argon2id$")
        assert verify_password(hashed, "correct horse battery")

    def test_wrong_password(self):
        assert not verify_password(hash_password("correct horse battery"), "wrong")

    def test_malformed_hash(self):
        assert not verify_password("not-a-hash", "anything")


class TestSessions:

    def test_open_session_purges_expired_rows(self, db, alice, bob):
        _expired_row(db, alice, "a" * 64)
        _expired_row(db, bob, "b" * 64)

        open_session(db, alice, ttl_sec=3600)

        rows = db.query(AuthSession).all()
        assert len(rows) == 1
        assert rows[0].user_id == alice.id
        assert rows[0].expires_at > datetime.utcnow()

    def test_live_sessions_survive_purge(self, db, alice):
        open_session(db, alice, ttl_sec=3600)
        assert purge_expired_sessions(db) == 0
        db.commit()
        assert db.query(AuthSession).count() == 1

    def test_token_is_not_stored(self, db, alice):
        token = open_session(db, alice, ttl_sec=3600)
        assert db.query(AuthSession).filter(AuthSession.token_hash == token).count() == 0

    def test_close_session(self, db, alice):
        token = open_session(db, alice, ttl_sec=3600)
        close_session(db, token)
        assert db.query(AuthSession).count() == 0
