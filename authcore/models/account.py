"""Account model for the credential lifecycle"""
import math
import uuid
from datetime import datetime

from authcore.extensions import db
from authcore.utils.clock import utcnow


def _new_account_id():
    return str(uuid.uuid4())


class Account(db.Model):
    """One record per user: credentials, lockout counters and reset-token state"""
    __tablename__ = 'accounts'

    id = db.Column(db.String(36), primary_key=True, default=_new_account_id)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)

    # Current credential (never plaintext)
    password_hash = db.Column(db.String(256), nullable=False)
    salt = db.Column(db.String(256), nullable=False)
    password_created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Lockout state; locked_until in the past means unlocked
    failed_login_attempts = db.Column(db.Integer, nullable=False, default=0)
    locked_until = db.Column(db.DateTime, nullable=True)

    # Outstanding reset token (hash only)
    reset_token_hash = db.Column(db.String(64), nullable=True, index=True)
    reset_token_expires_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_login_at = db.Column(db.DateTime, nullable=True)

    # Every UPDATE is guarded by "WHERE version = <read version>"
    version = db.Column(db.Integer, nullable=False)
    __mapper_args__ = {'version_id_col': version}

    credential_history = db.relationship(
        'CredentialHistory',
        backref='account',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='CredentialHistory.id.desc()'
    )

    def __repr__(self):
        return f'<Account {self.username}>'

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until

    def lock_seconds_remaining(self, now: datetime) -> int:
        if not self.is_locked(now):
            return 0
        return math.ceil((self.locked_until - now).total_seconds())

    def clear_lockout(self):
        """Transition to Unlocked(0)"""
        self.locked_until = None
        self.failed_login_attempts = 0

    def register_failed_attempt(self, now: datetime, max_attempts: int, lockout_duration) -> bool:
        """
        Count a wrong password. Returns True if this attempt locked the account.
        """
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
        if self.failed_login_attempts >= max_attempts:
            self.locked_until = now + lockout_duration
            return True
        return False

    def record_successful_login(self, now: datetime):
        self.clear_lockout()
        self.last_login_at = now

    def has_live_reset_token(self, now: datetime) -> bool:
        """Expired tokens count as absent"""
        return (self.reset_token_hash is not None
                and self.reset_token_expires_at is not None
                and now < self.reset_token_expires_at)

    def set_reset_token(self, token_hash: str, expires_at: datetime):
        """Replace any previous token"""
        self.reset_token_hash = token_hash
        self.reset_token_expires_at = expires_at

    def clear_reset_token(self):
        self.reset_token_hash = None
        self.reset_token_expires_at = None

    def to_public_dict(self) -> dict:
        """Account view without secret fields"""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_login_at': self.last_login_at.isoformat() if self.last_login_at else None,
            'password_created_at': self.password_created_at.isoformat() if self.password_created_at else None,
            'failed_login_attempts': self.failed_login_attempts,
        }
