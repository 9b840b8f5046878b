"""Configuration for the authcore credential lifecycle service
Class-based Flask configuration plus the read-only password policy record
"""
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Tuple

DEFAULT_DICTIONARY_WORDS = ('password', 'admin', '123456', 'qwerty', 'welcome', 'test')


class Config:
    """Base configuration with secure defaults"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()

    # Session configuration
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = timedelta(minutes=30)

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///authcore.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    # Busy timeout so a locked database surfaces as an error instead of hanging
    SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'timeout': 10}}

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Password policy
    PASSWORD_MIN_LENGTH = 10
    PASSWORD_REQUIRE_UPPERCASE = True
    PASSWORD_REQUIRE_LOWERCASE = True
    PASSWORD_REQUIRE_NUMBERS = True
    PASSWORD_REQUIRE_SPECIAL_CHARS = True
    PASSWORD_HISTORY_COUNT = 3
    PASSWORD_DICTIONARY_WORDS = DEFAULT_DICTIONARY_WORDS

    # Lockout
    MAX_LOGIN_ATTEMPTS = 3
    LOCKOUT_DURATION = timedelta(minutes=15)

    # Reset tokens
    RESET_TOKEN_TTL = timedelta(hours=1)

    # Hashing: 'pbkdf2_sha512' (cost = iterations) or 'bcrypt_kdf' (cost = rounds)
    PASSWORD_HASH_SCHEME = 'pbkdf2_sha512'
    PBKDF2_ITERATIONS = 600000
    BCRYPT_KDF_ROUNDS = 100

    # Optimistic concurrency: re-read and re-apply a lost update this many times
    ACCOUNT_UPDATE_ATTEMPTS = 5

    # Whether failed logins report how many attempts are left
    EXPOSE_ATTEMPTS_REMAINING = False


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    SESSION_COOKIE_SECURE = False  # Allow HTTP in dev
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production configuration with enhanced security"""
    DEBUG = False
    TESTING = False

    # Server databases: fail fast when no connection is available
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True, 'pool_timeout': 10}

    def __init__(self):
        # Require secure environment variables in production
        self.SECRET_KEY = os.environ['SECRET_KEY']
        self.SQLALCHEMY_DATABASE_URI = os.environ['DATABASE_URL']


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    SESSION_COOKIE_SECURE = False

    # Use in-memory database for tests
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # Faster hashing for tests
    PBKDF2_ITERATIONS = 1000
    BCRYPT_KDF_ROUNDS = 4


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


@dataclass(frozen=True)
class PasswordPolicy:
    """Process-wide password and lockout policy, read-only to the services"""
    min_length: int = 10
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_special_chars: bool = True
    history_size: int = 3
    max_login_attempts: int = 3
    lockout_duration: timedelta = timedelta(minutes=15)
    dictionary_words: Tuple[str, ...] = DEFAULT_DICTIONARY_WORDS
    reset_token_ttl: timedelta = timedelta(hours=1)
    hash_scheme: str = 'pbkdf2_sha512'
    hash_cost: int = 600000
    update_attempts: int = 5

    @classmethod
    def from_config(cls, cfg: Mapping) -> 'PasswordPolicy':
        """Build a policy from a Flask config mapping"""
        scheme = cfg.get('PASSWORD_HASH_SCHEME', cls.hash_scheme)
        if scheme == 'bcrypt_kdf':
            cost = cfg.get('BCRYPT_KDF_ROUNDS', Config.BCRYPT_KDF_ROUNDS)
        else:
            cost = cfg.get('PBKDF2_ITERATIONS', cls.hash_cost)

        return cls(
            min_length=cfg.get('PASSWORD_MIN_LENGTH', cls.min_length),
            require_uppercase=cfg.get('PASSWORD_REQUIRE_UPPERCASE', cls.require_uppercase),
            require_lowercase=cfg.get('PASSWORD_REQUIRE_LOWERCASE', cls.require_lowercase),
            require_numbers=cfg.get('PASSWORD_REQUIRE_NUMBERS', cls.require_numbers),
            require_special_chars=cfg.get('PASSWORD_REQUIRE_SPECIAL_CHARS', cls.require_special_chars),
            history_size=cfg.get('PASSWORD_HISTORY_COUNT', cls.history_size),
            max_login_attempts=cfg.get('MAX_LOGIN_ATTEMPTS', cls.max_login_attempts),
            lockout_duration=cfg.get('LOCKOUT_DURATION', cls.lockout_duration),
            dictionary_words=tuple(cfg.get('PASSWORD_DICTIONARY_WORDS', cls.dictionary_words)),
            reset_token_ttl=cfg.get('RESET_TOKEN_TTL', cls.reset_token_ttl),
            hash_scheme=scheme,
            hash_cost=cost,
            update_attempts=cfg.get('ACCOUNT_UPDATE_ATTEMPTS', cls.update_attempts),
        )

    def to_public_dict(self) -> dict:
        """Rules a client needs to render and pre-check password requirements"""
        return {
            'min_length': self.min_length,
            'require_uppercase': self.require_uppercase,
            'require_lowercase': self.require_lowercase,
            'require_numbers': self.require_numbers,
            'require_special_chars': self.require_special_chars,
            'history_size': self.history_size,
            'max_login_attempts': self.max_login_attempts,
            'lockout_seconds': int(self.lockout_duration.total_seconds()),
            'dictionary_words': list(self.dictionary_words),
        }
