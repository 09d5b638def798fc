# Farming Season Routes
from flask import Blueprint, request
from flask_login import login_required, current_user

from agroconnect.storage import get_store
from agroconnect.utils.responses import api_success, api_error, server_error
from agroconnect.utils.validation import (
    blank_fields, parse_date, to_float, pick, pagination, paginate, string_list
)

season_bp = Blueprint('season', __name__)

SEASON_STATUSES = ('planning', 'planting', 'growing', 'harvesting', 'completed')
EDITABLE_FIELDS = ('season_name', 'crop_type', 'planting_date', 'expected_harvest_date',
                   'area_size', 'location_lat', 'location_lng', 'location_address',
                   'fertilizers', 'pesticides', 'notes', 'status')


def validate_season(values):
    """Return an error message for a full set of season values, or None."""
    if blank_fields(values, ('season_name', 'crop_type')):
        return 'Tên mùa vụ và loại cây trồng không được để trống'

    planting = parse_date(values.get('planting_date'))
    harvest = parse_date(values.get('expected_harvest_date'))
    if planting is None or harvest is None:
        return 'Ngày không hợp lệ'
    if planting >= harvest:
        return 'Ngày thu hoạch dự kiến phải sau ngày gieo trồng'

    area_size = to_float(values.get('area_size'))
    if area_size is None or area_size <= 0:
        return 'Diện tích phải lớn hơn 0'

    if values.get('status') not in SEASON_STATUSES:
        return 'Trạng thái mùa vụ không hợp lệ'
    return None


def season_access_error(store, season_id, user_id):
    """Error response when season_id is missing or belongs to someone else."""
    season = store.seasons.get(season_id)
    if not season:
        return api_error('Không tìm thấy mùa vụ', 404)
    if season['user_id'] != user_id:
        return api_error('Không có quyền truy cập mùa vụ này', 403)
    return None


def normalize_season(values):
    for field in ('area_size', 'location_lat', 'location_lng'):
        if field in values:
            values[field] = to_float(values[field])
    for field in ('fertilizers', 'pesticides'):
        if field in values:
            values[field] = string_list(values[field])
    return values


@season_bp.route('', methods=['POST'])
@login_required
def create_season():
    data = request.get_json(silent=True) or {}

    required = ('season_name', 'crop_type', 'planting_date', 'expected_harvest_date', 'area_size')
    if not all(data.get(field) for field in required):
        return api_error('Tên mùa vụ, loại cây trồng, ngày gieo trồng, ngày thu hoạch dự kiến và diện tích là bắt buộc')

    values = normalize_season(pick(data, EDITABLE_FIELDS))
    values.setdefault('status', 'planning')
    values.setdefault('fertilizers', [])
    values.setdefault('pesticides', [])

    error = validate_season(values)
    if error:
        return api_error(error)

    try:
        values['user_id'] = current_user.id
        season = get_store().seasons.create(values)
        return api_success(season, 'Tạo mùa vụ thành công', 201)
    except Exception:
        return server_error('Lỗi server khi tạo mùa vụ')


@season_bp.route('/me', methods=['GET'])
@login_required
def list_my_seasons():
    limit, offset = pagination(request.args)
    filters = {'user_id': current_user.id}
    if request.args.get('status'):
        filters['status'] = request.args['status']

    try:
        seasons = get_store().seasons.find(**filters)
        return api_success(paginate(seasons, limit, offset, 'seasons'))
    except Exception:
        return server_error('Lỗi server khi lấy danh sách mùa vụ')


@season_bp.route('/<int:season_id>', methods=['GET'])
@login_required
def get_season(season_id):
    try:
        season = get_store().seasons.get(season_id)
        if not season:
            return api_error('Không tìm thấy mùa vụ', 404)

        if season['user_id'] != current_user.id:
            return api_error('Không có quyền truy cập mùa vụ này', 403)

        return api_success(season)
    except Exception:
        return server_error('Lỗi server khi lấy thông tin mùa vụ')


@season_bp.route('/<int:season_id>', methods=['PUT'])
@login_required
def update_season(season_id):
    data = request.get_json(silent=True) or {}
    try:
        store = get_store()
        season = store.seasons.get(season_id)
        if not season:
            return api_error('Không tìm thấy mùa vụ', 404)

        if season['user_id'] != current_user.id:
            return api_error('Không có quyền cập nhật mùa vụ này', 403)

        updates = normalize_season(pick(data, EDITABLE_FIELDS))
        error = validate_season({**season, **updates})
        if error:
            return api_error(error)

        season = store.seasons.update(season_id, updates)
        return api_success(season, 'Cập nhật mùa vụ thành công')
    except Exception:
        return server_error('Lỗi server khi cập nhật mùa vụ')


@season_bp.route('/<int:season_id>', methods=['DELETE'])
@login_required
def delete_season(season_id):
    try:
        store = get_store()
        season = store.seasons.get(season_id)
        if not season:
            return api_error('Không tìm thấy mùa vụ', 404)

        if season['user_id'] != current_user.id:
            return api_error('Không có quyền xóa mùa vụ này', 403)

        # Images and products outlive the season they were attached to
        for image in store.images.find(season_id=season_id):
            store.images.update(image['id'], {'season_id': None})
        for product in store.products.find(season_id=season_id):
            store.products.update(product['id'], {'season_id': None})

        store.seasons.delete(season_id)
        return api_success(message='Xóa mùa vụ thành công')
    except Exception:
        return server_error('Lỗi server khi xóa mùa vụ')
