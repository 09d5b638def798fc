# Authentication Routes
from datetime import datetime
from flask import Blueprint, request, current_app
from flask_login import login_required, current_user

from agroconnect.storage import get_store
from agroconnect.services.esg import ESG_ROLES, create_verification_request
from agroconnect.utils.auth import create_user_session
from agroconnect.utils.responses import api_success, api_error, server_error, public_user
from agroconnect.utils.security import hash_password, check_password
from agroconnect.utils.validation import pick

auth_bp = Blueprint('auth', __name__)

VALID_ROLES = ('farmer', 'business', 'consumer', 'esg_expert')
EDITABLE_FIELDS = ('email', 'phone', 'full_name', 'avatar_url')


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    phone = (data.get('phone') or '').strip() or None
    password = data.get('password')
    role = data.get('role')
    full_name = (data.get('full_name') or '').strip()

    # Validation
    if not all([email, password, role, full_name]):
        return api_error('Email, password, role và full_name là bắt buộc')

    if role not in VALID_ROLES:
        return api_error('Role không hợp lệ')

    try:
        store = get_store()
        if store.users.find_one(email=email):
            return api_error('Email đã được sử dụng', 409)

        if phone and store.users.find_one(phone=phone):
            return api_error('Số điện thoại đã được sử dụng', 409)

        user = store.users.create({
            'email': email,
            'phone': phone,
            'password_hash': hash_password(password),
            'role': role,
            'full_name': full_name,
            'avatar_url': data.get('avatar_url')
        })

        store.profiles.create({
            'user_id': user['id'],
            'bio': '',
            'certifications': [],
            'activity_history': [],
            'social_links': {}
        })

        if role in ESG_ROLES:
            create_verification_request(store, user['id'], 'Yêu cầu xác thực ESG tự động khi đăng ký')

        current_app.logger.info('Registered user %s (%s)', email, role)
        return api_success(public_user(user), 'Đăng ký thành công', 201)
    except Exception:
        return server_error('Lỗi server khi đăng ký')


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password')

    if not email or not password:
        return api_error('Email và password là bắt buộc')

    try:
        store = get_store()
        user = store.users.find_one(email=email)

        if not user or not check_password(password, user['password_hash']):
            current_app.logger.warning('Failed login for %s', email)
            return api_error('Email hoặc password không đúng', 401)

        if not user['is_active']:
            return api_error('Tài khoản đã bị vô hiệu hóa', 403)

        user = store.users.update(user['id'], {'last_login': datetime.utcnow()})
        user_session = create_user_session(store, user['id'])

        return api_success({
            'user': public_user(user),
            'session_token': user_session['session_token'],
            'expires_at': user_session['expires_at']
        }, 'Đăng nhập thành công')
    except Exception:
        return server_error('Lỗi server khi đăng nhập')


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    try:
        get_store().sessions.delete_where(session_token=current_user.token)
        return api_success(message='Đăng xuất thành công')
    except Exception:
        return server_error('Lỗi server khi đăng xuất')


@auth_bp.route('/me', methods=['GET'])
@login_required
def get_me():
    try:
        user = get_store().users.get(current_user.id)
        if not user:
            return api_error('Không tìm thấy user', 404)
        return api_success(public_user(user))
    except Exception:
        return server_error('Lỗi server khi lấy thông tin user')


@auth_bp.route('/me', methods=['PUT'])
@login_required
def update_me():
    data = request.get_json(silent=True) or {}
    updates = pick(data, EDITABLE_FIELDS)

    if 'email' in updates:
        updates['email'] = (updates['email'] or '').strip().lower()
        if not updates['email']:
            return api_error('Email không được để trống')
    if 'full_name' in updates and not (updates['full_name'] or '').strip():
        return api_error('Họ tên không được để trống')
    if 'phone' in updates:
        updates['phone'] = (updates['phone'] or '').strip() or None

    try:
        store = get_store()

        # Check if email is being changed and already exists
        if updates.get('email'):
            existing = store.users.find_one(email=updates['email'])
            if existing and existing['id'] != current_user.id:
                return api_error('Email đã được sử dụng', 409)

        # Check if phone is being changed and already exists
        if updates.get('phone'):
            existing = store.users.find_one(phone=updates['phone'])
            if existing and existing['id'] != current_user.id:
                return api_error('Số điện thoại đã được sử dụng', 409)

        user = store.users.update(current_user.id, updates)
        if not user:
            return api_error('Không tìm thấy user', 404)

        return api_success(public_user(user), 'Cập nhật thông tin thành công')
    except Exception:
        return server_error('Lỗi server khi cập nhật thông tin')
