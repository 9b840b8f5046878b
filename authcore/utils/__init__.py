# authcore/utils/__init__.py
"""Utility functions"""
from .security import hash_password, verify_password

__all__ = ['hash_password', 'verify_password']
