"""Authentication service: registration, login with lockout, password change"""
import logging

from flask import current_app

from authcore.config import PasswordPolicy
from authcore.errors import (AccountLocked, InvalidCredentials, PasswordRejected,
                             StorageUnavailable)
from authcore.services.account_store import AccountStore, ConcurrentUpdate
from authcore.services.password_service import PasswordService
from authcore.services.policy_service import validate_password
from authcore.utils.clock import utcnow
from authcore.utils.security import (generate_salt, hash_password, needs_rehash,
                                     verify_password)

logger = logging.getLogger(__name__)

# Unknown usernames are hashed against this so they cost the same as real ones
_DUMMY_SALT = generate_salt()


def current_policy() -> PasswordPolicy:
    """Read the policy from the active app on every call"""
    return PasswordPolicy.from_config(current_app.config)


class AuthService:
    """
    Login state machine per account: Unlocked(failed_attempts) and
    LockedUntil(timestamp). There is no terminal state.
    """

    def __init__(self, store=None, policy_provider=None, clock=None):
        self.store = store or AccountStore()
        self.policy_provider = policy_provider or current_policy
        self.clock = clock or utcnow

    def register(self, username: str, email: str, password: str) -> dict:
        """
        CREATE: validate the password and insert a new Unlocked(0) account

        Raises:
            PasswordRejected, DuplicateAccount, StorageUnavailable
        """
        policy = self.policy_provider()
        result = validate_password(password, policy)
        if not result.valid:
            raise PasswordRejected(result.violations)

        salt = generate_salt()
        password_hash = hash_password(password, salt, policy.hash_scheme, policy.hash_cost)
        account = self.store.create(username, email, password_hash, salt)
        return account.to_public_dict()

    def login(self, username: str, password: str) -> dict:
        """
        READ: evaluate a login attempt and apply the lockout policy

        Returns:
            Public view of the account on success

        Raises:
            InvalidCredentials, AccountLocked, StorageUnavailable
        """
        policy = self.policy_provider()
        # Keyed by (salt, hash) so a retry only re-hashes if the credential changed
        checked = {}

        for _ in range(policy.update_attempts):
            now = self.clock()
            account = self.store.find_by_username(username)

            if account is None:
                hash_password(password, _DUMMY_SALT, policy.hash_scheme, policy.hash_cost)
                logger.info('Login failed for unknown account')
                raise InvalidCredentials()

            if account.is_locked(now):
                seconds = account.lock_seconds_remaining(now)
                self.store.discard()
                raise AccountLocked(seconds)

            if account.locked_until is not None:
                # Lock expired: back to Unlocked(0) before evaluating
                account.clear_lockout()

            key = (account.salt, account.password_hash)
            if key not in checked:
                checked[key] = verify_password(password, account.salt, account.password_hash)

            account_id = account.id
            if not checked[key]:
                locked = account.register_failed_attempt(
                    now, policy.max_login_attempts, policy.lockout_duration)
                attempts_remaining = max(policy.max_login_attempts - account.failed_login_attempts, 0)
                try:
                    self.store.update(account)
                except ConcurrentUpdate:
                    continue

                if locked:
                    logger.warning(f'Account {account_id} locked after {policy.max_login_attempts} failed attempts')
                    raise AccountLocked(int(policy.lockout_duration.total_seconds()))
                logger.info(f'Login failed for account {account_id}, {attempts_remaining} attempts remaining')
                raise InvalidCredentials(attempts_remaining)

            account.record_successful_login(now)
            if needs_rehash(account.password_hash, policy.hash_scheme, policy.hash_cost):
                PasswordService.rehash(account, password, policy)
                logger.info(f'Rehashed credential for account {account_id}')
            try:
                self.store.update(account)
            except ConcurrentUpdate:
                continue

            logger.info(f'Login succeeded for account {account_id}')
            return account.to_public_dict()

        logger.error(f'Gave up updating account after {policy.update_attempts} conflicting writes')
        raise StorageUnavailable()

    def change_password(self, username: str, current_password: str, new_password: str) -> dict:
        """
        UPDATE: rotate the credential after verifying the current password.
        The current password goes through the same lockout rules as login.

        Raises:
            InvalidCredentials, AccountLocked, PasswordRejected, StorageUnavailable
        """
        account_id = self.login(username, current_password)['id']
        policy = self.policy_provider()

        for _ in range(policy.update_attempts):
            account = self.store.find_by_id(account_id)
            if account is None:
                raise InvalidCredentials()

            try:
                PasswordService.ensure_acceptable(account, new_password, policy)
            except PasswordRejected:
                self.store.discard()
                raise

            PasswordService.rotate(account, new_password, policy, self.clock())
            try:
                self.store.update(account)
            except ConcurrentUpdate:
                continue

            logger.info(f'Password changed for account {account_id}')
            return account.to_public_dict()

        raise StorageUnavailable()
