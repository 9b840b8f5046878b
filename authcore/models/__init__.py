# authcore/models/__init__.py
"""Database models for the credential lifecycle"""
from .account import Account
from .credential_history import CredentialHistory

__all__ = ['Account', 'CredentialHistory']
