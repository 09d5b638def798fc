# Bearer token authentication on top of Flask-Login
from datetime import datetime, timedelta
from functools import wraps

from flask import current_app, g
from flask_login import LoginManager, UserMixin, current_user, login_required

from agroconnect.storage import get_store
from agroconnect.utils.responses import api_error
from agroconnect.utils.security import new_session_token
from agroconnect.utils.validation import parse_date

login_manager = LoginManager()

MISSING_TOKEN = 'Token xác thực không được cung cấp'
INVALID_TOKEN = 'Token không hợp lệ hoặc đã hết hạn'
INACTIVE_ACCOUNT = 'Tài khoản không tồn tại hoặc đã bị vô hiệu hóa'


class AuthUser(UserMixin):
    """The authenticated user for the current request."""

    def __init__(self, record, token):
        self.record = record
        self.id = record['id']
        self.email = record['email']
        self.role = record['role']
        self.token = token

    @property
    def is_active(self):
        return bool(self.record.get('is_active'))

    def __repr__(self):
        return f'<AuthUser {self.email} ({self.role})>'


def create_user_session(store, user_id):
    ttl_hours = current_app.config['SESSION_TOKEN_TTL_HOURS']
    return store.sessions.create({
        'user_id': user_id,
        'session_token': new_session_token(),
        'expires_at': datetime.utcnow() + timedelta(hours=ttl_hours)
    })


def find_active_session(store, token):
    """Return the session for token, dropping it if it has expired."""
    user_session = store.sessions.find_one(session_token=token)
    if user_session is None:
        return None
    expires_at = parse_date(user_session['expires_at'])
    if expires_at is None or expires_at <= datetime.utcnow():
        store.sessions.delete(user_session['id'])
        return None
    return user_session


def bearer_token(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer':
        return None
    return token.strip() or None


@login_manager.request_loader
def load_user_from_request(request):
    token = bearer_token(request)
    if not token:
        g.auth_error = MISSING_TOKEN
        return None

    store = get_store()
    user_session = find_active_session(store, token)
    if user_session is None:
        g.auth_error = INVALID_TOKEN
        return None

    user = store.users.get(user_session['user_id'])
    if not user or not user['is_active']:
        g.auth_error = INACTIVE_ACCOUNT
        return None

    return AuthUser(user, token)


@login_manager.unauthorized_handler
def unauthorized():
    return api_error(g.get('auth_error', MISSING_TOKEN), 401)


def role_required(*roles):
    """Require a bearer token whose user has one of the given roles."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if current_user.role not in roles:
                return api_error('Không có quyền truy cập', 403)
            return view(*args, **kwargs)
        return login_required(wrapped)
    return decorator
