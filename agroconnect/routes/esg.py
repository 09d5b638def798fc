# ESG Verification Routes
from flask import Blueprint, request, current_app
from flask_login import login_required, current_user

from agroconnect.storage import get_store
from agroconnect.services.esg import (
    create_verification_request, approve_verification, reject_verification
)
from agroconnect.utils.auth import role_required
from agroconnect.utils.responses import api_success, api_error, server_error
from agroconnect.utils.validation import pagination, pick, to_float

esg_bp = Blueprint('esg', __name__)

SCORE_DETAIL_FIELDS = (
    'environment_score', 'social_score', 'governance_score',
    'co2_emissions', 'water_usage', 'waste_management_score',
    'gender_equality_score', 'safety_score', 'community_participation_score',
    'data_transparency_score', 'legal_compliance_score', 'traceability_score'
)


def _score_details(store, verification):
    if verification['verification_status'] != 'approved':
        return None
    return store.esg_scores.find_one(esg_verification_id=verification['id'])


@esg_bp.route('/me', methods=['GET'])
@login_required
def get_my_verification():
    try:
        store = get_store()
        verification = store.esg_verifications.find_one(user_id=current_user.id)
        if not verification:
            return api_error('Chưa có yêu cầu xác thực ESG', 404)

        return api_success({
            'verification': verification,
            'score_details': _score_details(store, verification)
        })
    except Exception:
        return server_error('Lỗi server khi lấy thông tin ESG')


@esg_bp.route('/request', methods=['POST'])
@login_required
def request_verification():
    data = request.get_json(silent=True) or {}
    try:
        store = get_store()
        if store.esg_verifications.find_one(user_id=current_user.id):
            return api_error('Đã có yêu cầu xác thực ESG', 409)

        verification = create_verification_request(store, current_user.id, data.get('verification_notes'))
        return api_success(verification, 'Yêu cầu xác thực ESG đã được tạo', 201)
    except Exception:
        return server_error('Lỗi server khi tạo yêu cầu xác thực')


@esg_bp.route('/pending', methods=['GET'])
@role_required('esg_expert')
def list_pending():
    limit, offset = pagination(request.args)
    try:
        store = get_store()
        pending = store.esg_verifications.find(verification_status='pending')

        results = []
        for verification in pending[offset:offset + limit]:
            user = store.users.get(verification['user_id'])
            verification['user'] = {
                'id': user['id'],
                'full_name': user['full_name'],
                'email': user['email'],
                'role': user['role']
            } if user else None
            results.append(verification)

        return api_success(results)
    except Exception:
        return server_error('Lỗi server khi lấy danh sách yêu cầu xác thực')


@esg_bp.route('/<int:verification_id>/approve', methods=['POST'])
@role_required('esg_expert')
def approve(verification_id):
    data = request.get_json(silent=True) or {}
    esg_score = to_float(data.get('esg_score'))

    if esg_score is None or not 0 <= esg_score <= 100:
        return api_error('ESG score phải từ 0-100')

    score_details = data.get('score_details')
    if score_details is not None and not isinstance(score_details, dict):
        return api_error('score_details phải là object')

    try:
        store = get_store()
        verification = store.esg_verifications.get(verification_id)
        if not verification:
            return api_error('Không tìm thấy yêu cầu xác thực', 404)

        if verification['verification_status'] != 'pending':
            return api_error('Yêu cầu xác thực đã được xử lý')

        verification = approve_verification(
            store, verification, current_user.id, esg_score, data.get('verification_notes')
        )

        details = None
        if score_details:
            values = {field: to_float(value)
                      for field, value in pick(score_details, SCORE_DETAIL_FIELDS).items()
                      if to_float(value) is not None}
            values['esg_verification_id'] = verification['id']
            details = store.esg_scores.create(values)

        current_app.logger.info('ESG verification %s approved by %s (score %s)',
                                verification_id, current_user.id, esg_score)
        return api_success({
            'verification': verification,
            'score_details': details
        }, 'Duyệt yêu cầu xác thực thành công')
    except Exception:
        return server_error('Lỗi server khi duyệt yêu cầu xác thực')


@esg_bp.route('/<int:verification_id>/reject', methods=['POST'])
@role_required('esg_expert')
def reject(verification_id):
    data = request.get_json(silent=True) or {}
    try:
        store = get_store()
        verification = store.esg_verifications.get(verification_id)
        if not verification:
            return api_error('Không tìm thấy yêu cầu xác thực', 404)

        if verification['verification_status'] != 'pending':
            return api_error('Yêu cầu xác thực đã được xử lý')

        verification = reject_verification(store, verification, current_user.id, data.get('verification_notes'))
        current_app.logger.info('ESG verification %s rejected by %s', verification_id, current_user.id)
        return api_success(verification, 'Từ chối yêu cầu xác thực thành công')
    except Exception:
        return server_error('Lỗi server khi từ chối yêu cầu xác thực')


@esg_bp.route('/esg-id/<esg_id>', methods=['GET'])
def get_by_esg_id(esg_id):
    try:
        store = get_store()
        verification = store.esg_verifications.find_one(esg_id=esg_id)
        if not verification:
            return api_error('Không tìm thấy ESG ID', 404)

        # Only show approved verifications publicly
        if verification['verification_status'] != 'approved':
            return api_error('ESG ID chưa được xác thực', 404)

        user = store.users.get(verification['user_id'])
        return api_success({
            'verification': verification,
            'user': {
                'id': user['id'],
                'full_name': user['full_name'],
                'role': user['role']
            } if user else None,
            'score_details': _score_details(store, verification)
        })
    except Exception:
        return server_error('Lỗi server khi lấy thông tin ESG')


@esg_bp.route('/auto-approve-super-expert', methods=['POST'])
def auto_approve_super_expert():
    """Bootstrap the first ESG expert, who has nobody to approve them."""
    if not current_app.config['ALLOW_SUPER_EXPERT_BOOTSTRAP']:
        return api_error('Chức năng này đã bị vô hiệu hóa', 403)

    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    if not email:
        return api_error('Email là bắt buộc')

    try:
        store = get_store()
        user = store.users.find_one(email=email)
        if not user:
            return api_error('Không tìm thấy user', 404)

        if user['role'] != 'esg_expert':
            return api_error('Chỉ có thể auto-approve ESG Expert')

        verification = store.esg_verifications.find_one(user_id=user['id'])
        if not verification:
            return api_error('Không tìm thấy ESG verification request', 404)

        if verification['verification_status'] != 'pending':
            return api_error('ESG verification đã được xử lý')

        verification = approve_verification(
            store, verification, user['id'], 100,
            'Auto-approved Super ESG Expert - System initialization'
        )
        current_app.logger.warning('Super ESG expert bootstrapped: %s', email)
        return api_success(verification, 'Super ESG Expert đã được auto-approve')
    except Exception:
        return server_error('Lỗi server khi auto-approve')
