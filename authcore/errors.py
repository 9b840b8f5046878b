"""Error taxonomy for the credential lifecycle

Every error is recoverable and carries enough detail to render a user-facing
message. Services raise them; the auth blueprint turns them into JSON.
"""
from typing import List, Optional


class AuthError(Exception):
    """Base class for all caller-reported outcomes"""
    code = 'auth_error'
    status_code = 400
    message = 'Request could not be completed'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.code, 'message': self.message}


class DuplicateAccount(AuthError):
    code = 'duplicate_account'
    status_code = 409
    message = 'Username or email already exists'


class InvalidCredentials(AuthError):
    """Wrong username or password. The message never says which."""
    code = 'invalid_credentials'
    status_code = 401
    message = 'Invalid username or password'

    def __init__(self, attempts_remaining: Optional[int] = None):
        super().__init__()
        self.attempts_remaining = attempts_remaining


class AccountLocked(AuthError):
    code = 'account_locked'
    status_code = 423
    message = 'Account is temporarily locked'

    def __init__(self, seconds_remaining: int):
        super().__init__(f'Account is temporarily locked. Try again in {seconds_remaining} seconds')
        self.seconds_remaining = seconds_remaining

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['seconds_remaining'] = self.seconds_remaining
        return data


class PasswordRejected(AuthError):
    code = 'password_rejected'
    status_code = 422
    message = 'Password does not meet requirements'

    def __init__(self, violations: List):
        super().__init__()
        self.violations = list(violations)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['violations'] = [{'code': v.code, 'message': v.message} for v in self.violations]
        return data


class InvalidOrExpiredToken(AuthError):
    code = 'invalid_or_expired_token'
    status_code = 401
    message = 'Invalid or expired token'


class StorageUnavailable(AuthError):
    code = 'storage_unavailable'
    status_code = 503
    message = 'Account storage is unavailable. Please try again later'
