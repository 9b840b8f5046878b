# authcore/controllers/__init__.py
"""JSON transport for the credential lifecycle"""
from .auth_controller import auth_bp

__all__ = ['auth_bp']
