"""Tests for the credential hasher"""
import hashlib

import pytest

from authcore.utils.security import (BCRYPT_KDF_SCHEME, PBKDF2_SCHEME, generate_salt,
                                     generate_secure_token, hash_password, hash_token,
                                     needs_rehash, parse_digest, tokens_match,
                                     verify_password)


def test_hash_is_deterministic():
    salt = generate_salt()
    assert hash_password('Str0ng!Pass', salt, cost=1000) == hash_password('Str0ng!Pass', salt, cost=1000)


def test_different_salts_give_different_digests():
    first, second = generate_salt(), generate_salt()
    assert first != second
    assert hash_password('Str0ng!Pass', first, cost=1000) != hash_password('Str0ng!Pass', second, cost=1000)


def test_salt_is_32_random_bytes():
    salt = generate_salt()
    assert len(bytes.fromhex(salt)) == 32


def test_digest_encodes_scheme_and_cost():
    digest = hash_password('Str0ng!Pass', generate_salt(), PBKDF2_SCHEME, 1000)
    scheme, cost, hexdigest = parse_digest(digest)
    assert scheme == PBKDF2_SCHEME
    assert cost == 1000
    assert len(bytes.fromhex(hexdigest)) == 64


def test_default_cost_is_slow():
    salt = generate_salt()
    _, cost, _ = parse_digest(hash_password('x', salt))
    assert cost == 600000


def test_verify_password():
    salt = generate_salt()
    digest = hash_password('Str0ng!Pass', salt, cost=1000)
    assert verify_password('Str0ng!Pass', salt, digest)
    assert not verify_password('str0ng!Pass', salt, digest)
    assert not verify_password('Str0ng!Pass', generate_salt(), digest)


def test_bcrypt_kdf_scheme():
    salt = generate_salt()
    digest = hash_password('Str0ng!Pass', salt, BCRYPT_KDF_SCHEME, 4)
    assert digest.startswith('bcrypt_kdf$4$')
    assert digest != hash_password('Str0ng!Pass', salt, PBKDF2_SCHEME, 4)
    assert verify_password('Str0ng!Pass', salt, digest)
    assert not verify_password('wrong', salt, digest)


def test_unknown_scheme_rejected():
    with pytest.raises(ValueError):
        hash_password('Str0ng!Pass', generate_salt(), 'md5', 1)


def test_needs_rehash():
    digest = hash_password('Str0ng!Pass', generate_salt(), PBKDF2_SCHEME, 1000)
    assert not needs_rehash(digest, PBKDF2_SCHEME, 1000)
    assert needs_rehash(digest, PBKDF2_SCHEME, 2000)
    assert needs_rehash(digest, BCRYPT_KDF_SCHEME, 1000)


def test_reset_token_helpers():
    token = generate_secure_token()
    assert token != generate_secure_token()
    assert hash_token(token) == hashlib.sha256(token.encode()).hexdigest()
    assert tokens_match(hash_token(token), hash_token(token))
    assert not tokens_match(hash_token(token), hash_token(token + 'x'))
    assert not tokens_match(None, hash_token(token))
    assert not tokens_match(hash_token(token), None)


def test_lone_surrogates_hash_consistently():
    salt = generate_salt()
    digest = hash_password('\ud800', salt, cost=1000)
    assert digest == hash_password('\ud800', salt, cost=1000)
    assert verify_password('\ud800', salt, digest)
    assert not verify_password('\udc00', salt, digest)
    assert hash_token('\ud800') != hash_token('\udc00')
