# Profile Routes
from flask import Blueprint, request
from flask_login import login_required, current_user

from agroconnect.routes.auth import VALID_ROLES
from agroconnect.storage import get_store
from agroconnect.utils.responses import api_success, api_error, server_error, public_user
from agroconnect.utils.validation import pick, to_float, pagination

profile_bp = Blueprint('profile', __name__)

EDITABLE_FIELDS = ('bio', 'location_lat', 'location_lng', 'address',
                   'certifications', 'activity_history', 'social_links')


@profile_bp.route('/me', methods=['GET'])
@login_required
def get_my_profile():
    try:
        store = get_store()
        user = store.users.get(current_user.id)
        if not user:
            return api_error('Không tìm thấy user', 404)

        return api_success({
            'user': public_user(user),
            'profile': store.profiles.find_one(user_id=current_user.id)
        })
    except Exception:
        return server_error('Lỗi server khi lấy hồ sơ')


@profile_bp.route('/me', methods=['PUT'])
@login_required
def update_my_profile():
    data = request.get_json(silent=True) or {}
    updates = pick(data, EDITABLE_FIELDS)

    for field in ('location_lat', 'location_lng'):
        if field in updates and updates[field] not in (None, ''):
            updates[field] = to_float(updates[field])
            if updates[field] is None:
                return api_error('Tọa độ không hợp lệ')
        elif field in updates:
            updates[field] = None

    for field in ('certifications', 'activity_history'):
        if field in updates and not isinstance(updates[field], list):
            return api_error(f'{field} phải là danh sách')
    if 'social_links' in updates and not isinstance(updates['social_links'], dict):
        return api_error('social_links phải là object')

    try:
        store = get_store()
        profile = store.profiles.find_one(user_id=current_user.id)
        if not profile:
            return api_error('Không tìm thấy hồ sơ', 404)

        profile = store.profiles.update(profile['id'], updates)
        return api_success(profile, 'Cập nhật hồ sơ thành công')
    except Exception:
        return server_error('Lỗi server khi cập nhật hồ sơ')


@profile_bp.route('/<int:user_id>', methods=['GET'])
def get_public_profile(user_id):
    try:
        store = get_store()
        user = store.users.get(user_id)
        if not user:
            return api_error('Không tìm thấy user', 404)

        return api_success({
            'user': public_user(user, hide_contact=True),
            'profile': store.profiles.find_one(user_id=user_id)
        })
    except Exception:
        return server_error('Lỗi server khi lấy hồ sơ')


@profile_bp.route('/role/<role>', methods=['GET'])
def list_by_role(role):
    if role not in VALID_ROLES:
        return api_error('Role không hợp lệ')

    limit, offset = pagination(request.args)
    try:
        users = get_store().users.find(role=role, is_active=True)
        return api_success([public_user(user, hide_contact=True)
                            for user in users[offset:offset + limit]])
    except Exception:
        return server_error('Lỗi server khi lấy danh sách users')
