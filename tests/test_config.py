"""Test configuration loading"""
from datetime import timedelta

from authcore.app import create_app
from authcore.config import PasswordPolicy
from authcore.services.auth_service import current_policy


def test_development_config():
    """Verify development configuration loads correctly"""
    app = create_app('development', SQLALCHEMY_DATABASE_URI='sqlite:///:memory:')
    assert app.config['DEBUG'] is True
    assert app.config['PBKDF2_ITERATIONS'] == 600000
    assert app.config['MAX_LOGIN_ATTEMPTS'] == 3
    assert 'SECRET_KEY' in app.config


def test_testing_config_uses_fast_hashing(app):
    assert app.config['TESTING'] is True
    assert app.config['PBKDF2_ITERATIONS'] == 1000
    assert app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite:///:memory:'


def test_policy_defaults_from_config(app):
    policy = PasswordPolicy.from_config(app.config)
    assert policy.min_length == 10
    assert policy.history_size == 3
    assert policy.max_login_attempts == 3
    assert policy.lockout_duration == timedelta(minutes=15)
    assert policy.reset_token_ttl == timedelta(hours=1)
    assert policy.hash_scheme == 'pbkdf2_sha512'
    assert policy.hash_cost == 1000
    assert 'password' in policy.dictionary_words


def test_policy_cost_follows_scheme(app):
    app.config['PASSWORD_HASH_SCHEME'] = 'bcrypt_kdf'
    policy = PasswordPolicy.from_config(app.config)
    assert policy.hash_scheme == 'bcrypt_kdf'
    assert policy.hash_cost == 4


def test_policy_is_reread_on_each_call(app):
    assert current_policy().max_login_attempts == 3
    app.config['MAX_LOGIN_ATTEMPTS'] = 7
    assert current_policy().max_login_attempts == 7
