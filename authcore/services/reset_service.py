# authcore/services/reset_service.py
"""Reset-token flow: issue, verify, consume

Per account the flow is either NoToken or PendingToken(token_hash, expires_at).
Only a SHA-256 of the raw token is stored; the raw value goes to the
out-of-band sender and nowhere else. Each token is independently random, so a
leaked token hash or server secret cannot be used to forge others.
"""
import logging
from typing import Optional

from flask import current_app

from authcore.errors import InvalidOrExpiredToken, PasswordRejected, StorageUnavailable
from authcore.models import Account
from authcore.services.account_store import AccountStore, ConcurrentUpdate
from authcore.services.auth_service import current_policy
from authcore.services.password_service import PasswordService
from authcore.utils.clock import utcnow
from authcore.utils.security import generate_secure_token, hash_token, tokens_match

logger = logging.getLogger(__name__)


def current_sender():
    return current_app.extensions['reset_token_sender']


class ResetService:
    """Issues, verifies and consumes single-use, time-bounded reset tokens"""

    def __init__(self, store=None, sender=None, policy_provider=None, clock=None):
        self.store = store or AccountStore()
        self.sender = sender or current_sender()
        self.policy_provider = policy_provider or current_policy
        self.clock = clock or utcnow

    def issue(self, email: str) -> None:
        """
        Issue a token for the account registered under email.
        Always returns None so callers cannot tell whether the address exists.
        """
        policy = self.policy_provider()

        for _ in range(policy.update_attempts):
            account = self.store.find_by_email(email)
            if account is None:
                logger.info('Password reset requested for unknown address')
                return None

            token = generate_secure_token()
            account.set_reset_token(hash_token(token), self.clock() + policy.reset_token_ttl)
            account_id = account.id
            try:
                self.store.update(account)
            except ConcurrentUpdate:
                continue

            logger.info(f'Issued password reset token for account {account_id}')
            self.sender.send(email, token)
            return None

        raise StorageUnavailable()

    def _resolve(self, token: str) -> Optional[Account]:
        """Account holding a live token matching the raw token, or None"""
        if not token:
            return None
        token_hash = hash_token(token)
        account = self.store.find_by_reset_token(token_hash)
        if account is None:
            return None
        if not tokens_match(token_hash, account.reset_token_hash):
            return None
        if not account.has_live_reset_token(self.clock()):
            return None
        return account

    def verify(self, token: str) -> bool:
        """Read-only check that the token is known and not expired"""
        valid = self._resolve(token) is not None
        self.store.discard()
        return valid

    def consume(self, token: str, new_password: str) -> dict:
        """
        Reset the password with a live token. On success the credential is
        rotated, the token cleared and the lockout reset in one update.

        Raises:
            InvalidOrExpiredToken, PasswordRejected, StorageUnavailable
        """
        policy = self.policy_provider()

        for _ in range(policy.update_attempts):
            account = self._resolve(token)
            if account is None:
                self.store.discard()
                logger.info('Rejected invalid or expired reset token')
                raise InvalidOrExpiredToken()

            try:
                PasswordService.ensure_acceptable(account, new_password, policy)
            except PasswordRejected:
                self.store.discard()
                raise

            PasswordService.rotate(account, new_password, policy, self.clock())
            account.clear_reset_token()
            account.clear_lockout()
            account_id = account.id
            try:
                self.store.update(account)
            except ConcurrentUpdate:
                continue

            logger.info(f'Password reset completed for account {account_id}')
            return account.to_public_dict()

        raise StorageUnavailable()
