# authcore/services/account_store.py
"""Account Store
Persistence boundary for accounts. Uniqueness is enforced by the database
constraints and every update is a version-checked whole-record write.
Storage faults are rolled back and surfaced as StorageUnavailable.
"""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from authcore.errors import DuplicateAccount, StorageUnavailable
from authcore.extensions import db
from authcore.models import Account

logger = logging.getLogger(__name__)


class ConcurrentUpdate(Exception):
    """The record changed between read and write; re-read and re-apply"""


class AccountStore:
    """CRUD access to Account records"""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def create(self, username: str, email: str, password_hash: str, salt: str) -> Account:
        """
        Insert a new account

        Raises:
            DuplicateAccount: username or email already taken
            StorageUnavailable: any other storage failure
        """
        account = Account(
            username=username,
            email=email,
            password_hash=password_hash,
            salt=salt,
            failed_login_attempts=0,
        )
        try:
            self.session.add(account)
            self.session.commit()
            self.session.refresh(account)
        except IntegrityError:
            self.session.rollback()
            raise DuplicateAccount()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f'Account insert failed: {e.__class__.__name__}')
            raise StorageUnavailable() from e

        logger.info(f'Created account {account.id}')
        return account

    def _first(self, stmt) -> Optional[Account]:
        # History is loaded here so no lazy load happens outside this boundary
        stmt = stmt.options(selectinload(Account.credential_history))
        try:
            return self.session.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f'Account lookup failed: {e.__class__.__name__}')
            raise StorageUnavailable() from e

    def find_by_id(self, account_id: str) -> Optional[Account]:
        return self._first(select(Account).where(Account.id == account_id))

    def find_by_username(self, username: str) -> Optional[Account]:
        return self._first(select(Account).where(Account.username == username))

    def find_by_email(self, email: str) -> Optional[Account]:
        return self._first(select(Account).where(Account.email == email))

    def find_by_reset_token(self, token_hash: str) -> Optional[Account]:
        """Look up by the stored token hash; expiry is checked by the caller"""
        return self._first(select(Account).where(Account.reset_token_hash == token_hash))

    def count(self) -> int:
        try:
            return self.session.execute(select(func.count()).select_from(Account)).scalar_one()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageUnavailable() from e

    def update(self, account: Account):
        """
        Commit the account (and its credential history) as one transaction

        The UPDATE only matches the version that was read, so a concurrent
        writer makes this raise ConcurrentUpdate instead of losing its change.
        """
        account_id = account.id
        try:
            self.session.add(account)
            self.session.commit()
            # Reload the committed row now rather than on first attribute access
            self.session.refresh(account)
        except StaleDataError:
            self.session.rollback()
            logger.debug(f'Concurrent update on account {account_id}')
            raise ConcurrentUpdate()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateAccount() from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f'Account update failed: {e.__class__.__name__}')
            raise StorageUnavailable() from e

    def discard(self):
        """Drop uncommitted changes so the next read sees committed state"""
        self.session.rollback()
