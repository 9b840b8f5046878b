"""Tests for the reset-token flow"""
import pytest

from authcore.errors import (AccountLocked, InvalidCredentials, InvalidOrExpiredToken,
                             PasswordRejected, StorageUnavailable)
from authcore.extensions import db
from authcore.utils.security import hash_token

from conftest import STRONG_PASSWORD


def issue_token(resets, outbox, email='a@x.com'):
    assert resets.issue(email) is None
    return outbox.last_token_for(email)


def test_issue_for_unknown_email_is_silent(resets, outbox):
    assert resets.issue('nobody@x.com') is None
    assert outbox.drain() == []


def test_issue_stores_only_token_hash(resets, outbox, store, alice, clock):
    token = issue_token(resets, outbox)
    assert token

    account = store.find_by_email('a@x.com')
    assert account.reset_token_hash == hash_token(token)
    assert account.reset_token_hash != token
    assert account.reset_token_expires_at == clock.now + resets.policy_provider().reset_token_ttl


def test_reset_scenario(resets, outbox, auth, alice):
    token = issue_token(resets, outbox)
    assert resets.verify(token) is True

    resets.consume(token, 'NewStr0ng!1')
    auth.login('alice', 'NewStr0ng!1')

    with pytest.raises(InvalidOrExpiredToken):
        resets.consume(token, 'Another!Pass9')
    assert resets.verify(token) is False


def test_verify_does_not_consume(resets, outbox, alice):
    token = issue_token(resets, outbox)
    assert resets.verify(token)
    assert resets.verify(token)
    resets.consume(token, 'NewStr0ng!1')


def test_unknown_token_rejected(resets, alice):
    assert resets.verify('not-a-token') is False
    assert resets.verify('') is False
    with pytest.raises(InvalidOrExpiredToken):
        resets.consume('not-a-token', 'NewStr0ng!1')


def test_expired_token_rejected(resets, outbox, alice, clock):
    token = issue_token(resets, outbox)
    clock.advance(minutes=59)
    assert resets.verify(token)

    clock.advance(minutes=1)
    assert resets.verify(token) is False
    with pytest.raises(InvalidOrExpiredToken):
        resets.consume(token, 'NewStr0ng!1')


def test_new_token_invalidates_previous(resets, outbox, alice):
    first = issue_token(resets, outbox)
    second = issue_token(resets, outbox)
    assert first != second
    assert resets.verify(first) is False
    assert resets.verify(second) is True


def test_consume_rejects_recent_password(resets, outbox, alice, store):
    token = issue_token(resets, outbox)
    with pytest.raises(PasswordRejected) as exc:
        resets.consume(token, STRONG_PASSWORD)
    assert [v.code for v in exc.value.violations] == ['history']

    # Rejection leaves the token usable
    assert resets.verify(token)


def test_consume_rejects_historical_password(resets, outbox, auth, alice):
    auth.change_password('alice', STRONG_PASSWORD, 'Second!Pass2')
    token = issue_token(resets, outbox)
    with pytest.raises(PasswordRejected):
        resets.consume(token, STRONG_PASSWORD)


def test_consume_enforces_policy(resets, outbox, alice):
    token = issue_token(resets, outbox)
    with pytest.raises(PasswordRejected) as exc:
        resets.consume(token, 'short')
    codes = [v.code for v in exc.value.violations]
    assert 'min_length' in codes
    assert 'history' not in codes


def test_consume_rotates_and_clears_state(resets, outbox, auth, alice, store):
    for _ in range(3):
        with pytest.raises((InvalidCredentials, AccountLocked)):
            auth.login('alice', 'wrong')
    before = store.find_by_username('alice')
    old_hash, old_salt = before.password_hash, before.salt
    assert before.locked_until is not None

    token = issue_token(resets, outbox)
    resets.consume(token, 'NewStr0ng!1')

    account = store.find_by_username('alice')
    assert account.salt != old_salt
    assert account.credential_history[0].password_hash == old_hash
    assert account.reset_token_hash is None
    assert account.reset_token_expires_at is None
    assert account.locked_until is None
    assert account.failed_login_attempts == 0

    # Unlocked by the reset, so the new password works right away
    auth.login('alice', 'NewStr0ng!1')


def test_history_load_fault_during_reset_is_typed(resets, outbox, alice, failing_sql):
    token = issue_token(resets, outbox)
    db.session.expire_all()
    failing_sql.append(lambda sql: 'FROM credential_history' in sql)
    with pytest.raises(StorageUnavailable):
        resets.consume(token, 'NewStr0ng!1')


def test_unencodable_token_is_rejected(resets, outbox, alice):
    issue_token(resets, outbox)
    assert resets.verify('\ud800') is False
    with pytest.raises(InvalidOrExpiredToken):
        resets.consume('\ud800', 'NewStr0ng!1')
