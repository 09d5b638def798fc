# Farm Image Routes
import os
from datetime import datetime
from flask import Blueprint, request, current_app, url_for
from flask_login import login_required, current_user
from werkzeug.utils import secure_filename

from agroconnect.routes.season import season_access_error
from agroconnect.storage import get_store
from agroconnect.utils.responses import api_success, api_error, server_error
from agroconnect.utils.validation import (
    blank_fields, parse_date, to_float, to_int, pick, pagination, paginate, string_list
)

image_bp = Blueprint('image', __name__)

IMAGE_TYPES = ('crop', 'field', 'certificate', 'diary', 'other')
EDITABLE_FIELDS = ('season_id', 'image_url', 'image_type', 'title', 'description',
                   'tags', 'location_lat', 'location_lng', 'taken_date')

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def validate_image(values):
    if blank_fields(values, ('image_url', 'title')):
        return 'Đường dẫn và tiêu đề hình ảnh không được để trống'
    if values.get('image_type') not in IMAGE_TYPES:
        return 'Loại hình ảnh không hợp lệ'
    if parse_date(values.get('taken_date')) is None:
        return 'Ngày chụp không hợp lệ'
    return None


def normalize_image(values):
    for field in ('location_lat', 'location_lng'):
        if field in values:
            values[field] = to_float(values[field])
    if 'season_id' in values:
        values['season_id'] = to_int(values['season_id'])
    if 'tags' in values:
        values['tags'] = string_list(values['tags'])
    return values


@image_bp.route('/upload', methods=['POST'])
@login_required
def upload_image():
    """Store an uploaded file and return the URL to reference it by."""
    file = request.files.get('file')
    if file is None or file.filename == '':
        return api_error('Không có file được tải lên')

    if not allowed_file(file.filename):
        return api_error('Chỉ chấp nhận file hình ảnh (png, jpg, jpeg, gif, webp)')

    try:
        upload_dir = current_app.config['IMAGE_UPLOAD_FOLDER']
        os.makedirs(upload_dir, exist_ok=True)
        filename = secure_filename(f"image_{current_user.id}_{int(datetime.utcnow().timestamp() * 1000)}_{file.filename}")
        file.save(os.path.join(upload_dir, filename))

        return api_success({
            'filename': filename,
            'image_url': url_for('main.uploaded_file', filename=f'images/{filename}')
        }, 'Tải file thành công', 201)
    except Exception:
        return server_error('Lỗi server khi tải file')


@image_bp.route('', methods=['POST'])
@login_required
def create_image():
    data = request.get_json(silent=True) or {}

    required = ('image_url', 'image_type', 'title', 'taken_date')
    if not all(data.get(field) for field in required):
        return api_error('URL hình ảnh, loại hình ảnh, tiêu đề và ngày chụp là bắt buộc')

    values = normalize_image(pick(data, EDITABLE_FIELDS))
    values.setdefault('tags', [])
    error = validate_image(values)
    if error:
        return api_error(error)

    try:
        store = get_store()
        if values.get('season_id') is not None:
            error = season_access_error(store, values['season_id'], current_user.id)
            if error:
                return error

        values['user_id'] = current_user.id
        image = store.images.create(values)
        return api_success(image, 'Tải lên hình ảnh thành công', 201)
    except Exception:
        return server_error('Lỗi server khi tải lên hình ảnh')


@image_bp.route('/me', methods=['GET'])
@login_required
def list_my_images():
    limit, offset = pagination(request.args)
    filters = {'user_id': current_user.id}
    season_id = to_int(request.args.get('season_id'))
    if season_id is not None:
        filters['season_id'] = season_id
    if request.args.get('image_type'):
        filters['image_type'] = request.args['image_type']

    try:
        images = get_store().images.find(**filters)
        return api_success(paginate(images, limit, offset, 'images'))
    except Exception:
        return server_error('Lỗi server khi lấy danh sách hình ảnh')


@image_bp.route('/season/<int:season_id>', methods=['GET'])
@login_required
def list_season_images(season_id):
    try:
        images = get_store().images.find(season_id=season_id, user_id=current_user.id)
        return api_success(images)
    except Exception:
        return server_error('Lỗi server khi lấy hình ảnh mùa vụ')


@image_bp.route('/<int:image_id>', methods=['GET'])
@login_required
def get_image(image_id):
    try:
        image = get_store().images.get(image_id)
        if not image:
            return api_error('Không tìm thấy hình ảnh', 404)

        if image['user_id'] != current_user.id:
            return api_error('Không có quyền truy cập hình ảnh này', 403)

        return api_success(image)
    except Exception:
        return server_error('Lỗi server khi lấy thông tin hình ảnh')


@image_bp.route('/<int:image_id>', methods=['PUT'])
@login_required
def update_image(image_id):
    data = request.get_json(silent=True) or {}
    try:
        store = get_store()
        image = store.images.get(image_id)
        if not image:
            return api_error('Không tìm thấy hình ảnh', 404)

        if image['user_id'] != current_user.id:
            return api_error('Không có quyền cập nhật hình ảnh này', 403)

        updates = normalize_image(pick(data, EDITABLE_FIELDS))
        error = validate_image({**image, **updates})
        if error:
            return api_error(error)

        if updates.get('season_id') is not None:
            error = season_access_error(store, updates['season_id'], current_user.id)
            if error:
                return error

        image = store.images.update(image_id, updates)
        return api_success(image, 'Cập nhật hình ảnh thành công')
    except Exception:
        return server_error('Lỗi server khi cập nhật hình ảnh')


@image_bp.route('/<int:image_id>', methods=['DELETE'])
@login_required
def delete_image(image_id):
    try:
        store = get_store()
        image = store.images.get(image_id)
        if not image:
            return api_error('Không tìm thấy hình ảnh', 404)

        if image['user_id'] != current_user.id:
            return api_error('Không có quyền xóa hình ảnh này', 403)

        store.images.delete(image_id)
        return api_success(message='Xóa hình ảnh thành công')
    except Exception:
        return server_error('Lỗi server khi xóa hình ảnh')
