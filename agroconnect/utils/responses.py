# JSON envelope helpers: {success, message, data}
from flask import current_app, jsonify

from agroconnect.storage import get_store


def api_success(data=None, message=None, status=200):
    body = {'success': True}
    if message is not None:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return jsonify(body), status


def api_error(message, status=400):
    return jsonify({'success': False, 'message': message}), status


def public_user(user, hide_contact=False):
    """Strip credentials (and optionally contact details) from a user record."""
    hidden = {'password_hash'}
    if hide_contact:
        hidden |= {'email', 'phone'}
    return {key: value for key, value in user.items() if key not in hidden}


def server_error(message):
    """Roll back the store, log the active exception and answer 500."""
    get_store().rollback()
    current_app.logger.exception(message)
    return api_error(message, 500)
