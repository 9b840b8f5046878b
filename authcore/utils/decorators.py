# authcore/utils/decorators.py
"""Authentication decorators"""
from functools import wraps

from flask import jsonify, session

from authcore.services.account_store import AccountStore


def login_required(f):
    """
    Ensure the session belongs to an existing account before running the view.
    Verified on every request.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'account_id' not in session:
            return jsonify({'success': False, 'error': 'unauthenticated',
                            'message': 'Please log in first'}), 401

        account = AccountStore().find_by_id(session['account_id'])
        if account is None:
            session.clear()
            return jsonify({'success': False, 'error': 'unauthenticated',
                            'message': 'Session invalid. Please log in again'}), 401

        return f(*args, **kwargs)
    return decorated_function
