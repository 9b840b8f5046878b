# authcore/services/password_service.py
"""Credential rotation shared by password change and password reset"""
from datetime import datetime

from authcore.config import PasswordPolicy
from authcore.errors import PasswordRejected
from authcore.models import Account, CredentialHistory
from authcore.services.policy_service import REUSED_PASSWORD, validate_password
from authcore.utils.security import generate_salt, hash_password, verify_password


class PasswordService:
    """Reuse checks, policy checks and bounded-history rotation"""

    @staticmethod
    def is_password_in_history(account: Account, password: str, history_size: int) -> bool:
        """Check the current credential and the last history_size retired ones"""
        if verify_password(password, account.salt, account.password_hash):
            return True

        for entry in account.credential_history[:history_size]:
            if verify_password(password, entry.salt, entry.password_hash):
                return True

        return False

    @staticmethod
    def ensure_acceptable(account: Account, password: str, policy: PasswordPolicy):
        """
        Raise PasswordRejected if the password was used before or breaks the policy.
        Reuse is checked first and reported on its own.
        """
        if PasswordService.is_password_in_history(account, password, policy.history_size):
            raise PasswordRejected([REUSED_PASSWORD])

        result = validate_password(password, policy)
        if not result.valid:
            raise PasswordRejected(result.violations)

    @staticmethod
    def rotate(account: Account, new_password: str, policy: PasswordPolicy, now: datetime):
        """
        Replace the credential with a freshly salted one and push the old one
        onto the bounded history. The caller commits.
        """
        retired = CredentialHistory(
            password_hash=account.password_hash,
            salt=account.salt,
            created_at=account.password_created_at or now,
            retired_at=now
        )
        account.credential_history.insert(0, retired)
        # delete-orphan removes trimmed rows on flush
        del account.credential_history[policy.history_size:]

        salt = generate_salt()
        account.salt = salt
        account.password_hash = hash_password(new_password, salt, policy.hash_scheme, policy.hash_cost)
        account.password_created_at = now

    @staticmethod
    def rehash(account: Account, password: str, policy: PasswordPolicy):
        """Re-derive the current password under the configured scheme and cost"""
        salt = generate_salt()
        account.salt = salt
        account.password_hash = hash_password(password, salt, policy.hash_scheme, policy.hash_cost)
