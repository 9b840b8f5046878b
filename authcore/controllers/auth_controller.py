# authcore/controllers/auth_controller.py
"""Authentication Controller
Thin JSON transport over the credential lifecycle services
"""
import logging

from flask import Blueprint, current_app, jsonify, request, session

from authcore.errors import AuthError, InvalidOrExpiredToken
from authcore.services.auth_service import AuthService, current_policy
from authcore.services.policy_service import validate_password
from authcore.services.reset_service import ResetService
from authcore.utils.decorators import login_required

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def _payload():
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def _secret(data, name):
    """A password field; anything but a string counts as missing"""
    value = data.get(name)
    return value if isinstance(value, str) else ''


def _text(data, name):
    """An identifier field (username, email, token): a storable, stripped string or ''"""
    value = _secret(data, name).strip()
    try:
        value.encode('utf-8')
    except UnicodeEncodeError:
        return ''
    return value


def _missing():
    return jsonify({'success': False, 'error': 'missing_fields',
                    'message': 'Missing required fields'}), 400


@auth_bp.errorhandler(AuthError)
def handle_auth_error(error):
    logger.debug(f"{request.path} -> {error.code}")
    body = error.to_dict()
    if getattr(error, 'attempts_remaining', None) is not None \
            and current_app.config.get('EXPOSE_ATTEMPTS_REMAINING'):
        body['attempts_remaining'] = error.attempts_remaining
    return jsonify(body), error.status_code


@auth_bp.route('/register', methods=['POST'])
def register():
    """CREATE: account registration"""
    data = _payload()
    username = _text(data, 'username')
    email = _text(data, 'email')
    password = _secret(data, 'password')

    if not username or not email or not password:
        return _missing()

    account = AuthService().register(username, email, password)
    return jsonify({'success': True, 'user': account}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """READ: authenticate and start a fresh session"""
    data = _payload()
    username = _text(data, 'username')
    password = _secret(data, 'password')

    if not username or not password:
        return _missing()

    account = AuthService().login(username, password)

    # New session on every login so a planted session id is never promoted
    session.clear()
    session['account_id'] = account['id']
    session['username'] = account['username']
    session.permanent = True

    return jsonify({'success': True, 'user': account})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'success': True})


@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """UPDATE: rotate the credential of the logged-in account"""
    data = _payload()
    current_password = _secret(data, 'current_password')
    new_password = _secret(data, 'new_password')

    if not current_password or not new_password:
        return _missing()

    account = AuthService().change_password(session['username'], current_password, new_password)
    return jsonify({'success': True, 'user': account})


@auth_bp.route('/password-policy', methods=['GET'])
def password_policy():
    """Read-only view of the policy in effect"""
    return jsonify({'success': True, 'policy': current_policy().to_public_dict()})


@auth_bp.route('/password-policy/check', methods=['POST'])
def check_password():
    """Per-rule status of a candidate password, for live form feedback"""
    password = _secret(_payload(), 'password')
    result = validate_password(password, current_policy())
    return jsonify({
        'success': True,
        'valid': result.valid,
        'requirements': result.requirements,
        'violations': [{'code': v.code, 'message': v.message} for v in result.violations],
    })


@auth_bp.route('/request-password-reset', methods=['POST'])
def request_password_reset():
    """Always succeeds; the token only travels out of band"""
    email = _text(_payload(), 'email')
    if not email:
        return _missing()

    ResetService().issue(email)
    return jsonify({'success': True,
                    'message': 'If the address is registered, a reset link has been sent'})


@auth_bp.route('/verify-reset-token', methods=['POST'])
def verify_reset_token():
    token = _text(_payload(), 'token')
    if not token:
        return _missing()

    if not ResetService().verify(token):
        raise InvalidOrExpiredToken()
    return jsonify({'success': True})


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    data = _payload()
    token = _text(data, 'token')
    new_password = _secret(data, 'new_password')

    if not token or not new_password:
        return _missing()

    ResetService().consume(token, new_password)
    return jsonify({'success': True, 'message': 'Password has been reset'})
