# authcore/services/__init__.py
"""Service layer for the credential lifecycle"""
from .account_store import AccountStore
from .auth_service import AuthService
from .delivery import OutboxSender, ResetTokenSender
from .reset_service import ResetService

__all__ = ['AccountStore', 'AuthService', 'OutboxSender', 'ResetService', 'ResetTokenSender']
