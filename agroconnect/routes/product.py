# Product Routes
from flask import Blueprint, request
from flask_login import login_required, current_user

from agroconnect.routes.season import season_access_error
from agroconnect.storage import get_store
from agroconnect.utils.responses import api_success, api_error, server_error
from agroconnect.utils.validation import (
    blank_fields, parse_date, to_float, to_int, pick, pagination, paginate, string_list
)

product_bp = Blueprint('product', __name__)

CURRENCIES = ('VND', 'USD', 'EUR')
PRODUCT_STATUSES = ('available', 'reserved', 'sold', 'expired')
EDITABLE_FIELDS = ('season_id', 'product_name', 'product_type', 'quantity', 'unit',
                   'price_per_unit', 'currency', 'harvest_date', 'expiry_date',
                   'location_address', 'location_lat', 'location_lng',
                   'quality_standards', 'certifications', 'description', 'images', 'status')

# Orders in these states still hold on to their product
OPEN_ORDER_STATUSES = ('pending', 'negotiating', 'confirmed', 'in_progress', 'shipped', 'delivered')


def open_orders_for(store, product_id):
    return [order for order in store.orders.find(product_id=product_id)
            if order['status'] in OPEN_ORDER_STATUSES]


def validate_product(values):
    if blank_fields(values, ('product_name', 'product_type', 'unit', 'location_address')):
        return 'Tên sản phẩm, loại sản phẩm, đơn vị và địa chỉ không được để trống'
    quantity = values.get('quantity')
    if quantity is None or quantity <= 0:
        return 'Số lượng phải lớn hơn 0'
    price = values.get('price_per_unit')
    if price is None or price <= 0:
        return 'Giá phải lớn hơn 0'
    if values.get('currency') not in CURRENCIES:
        return 'Tiền tệ không hợp lệ'
    if parse_date(values.get('harvest_date')) is None:
        return 'Ngày thu hoạch không hợp lệ'
    if values.get('expiry_date') and parse_date(values['expiry_date']) is None:
        return 'Ngày hết hạn không hợp lệ'
    if values.get('status') not in PRODUCT_STATUSES:
        return 'Trạng thái sản phẩm không hợp lệ'
    return None


def normalize_product(values):
    for field in ('quantity', 'price_per_unit', 'location_lat', 'location_lng'):
        if field in values:
            values[field] = to_float(values[field])
    if 'season_id' in values:
        values['season_id'] = to_int(values['season_id'])
    for field in ('quality_standards', 'certifications', 'images'):
        if field in values:
            values[field] = string_list(values[field])
    if isinstance(values.get('currency'), str):
        values['currency'] = values['currency'].upper()
    return values


@product_bp.route('', methods=['POST'])
@login_required
def create_product():
    data = request.get_json(silent=True) or {}

    required = ('product_name', 'product_type', 'quantity', 'unit', 'price_per_unit',
                'currency', 'harvest_date', 'location_address')
    if not all(data.get(field) for field in required):
        return api_error('Tên sản phẩm, loại sản phẩm, số lượng, đơn vị, giá, tiền tệ, ngày thu hoạch và địa chỉ là bắt buộc')

    values = normalize_product(pick(data, EDITABLE_FIELDS))
    values['status'] = 'available'
    for field in ('quality_standards', 'certifications', 'images'):
        values.setdefault(field, [])

    error = validate_product(values)
    if error:
        return api_error(error)

    try:
        store = get_store()
        if values.get('season_id') is not None:
            error = season_access_error(store, values['season_id'], current_user.id)
            if error:
                return error

        values['user_id'] = current_user.id
        product = store.products.create(values)
        return api_success(product, 'Tạo sản phẩm thành công', 201)
    except Exception:
        return server_error('Lỗi server khi tạo sản phẩm')


@product_bp.route('/me', methods=['GET'])
@login_required
def list_my_products():
    limit, offset = pagination(request.args)
    filters = {'user_id': current_user.id}
    season_id = to_int(request.args.get('season_id'))
    if season_id is not None:
        filters['season_id'] = season_id
    if request.args.get('status'):
        filters['status'] = request.args['status']

    try:
        products = get_store().products.find(**filters)
        return api_success(paginate(products, limit, offset, 'products'))
    except Exception:
        return server_error('Lỗi server khi lấy danh sách sản phẩm')


@product_bp.route('/available', methods=['GET'])
def list_available_products():
    limit, offset = pagination(request.args)
    product_type = (request.args.get('product_type') or '').lower()
    location = (request.args.get('location') or '').lower()
    min_price = to_float(request.args.get('min_price'))
    max_price = to_float(request.args.get('max_price'))

    try:
        products = get_store().products.find(status='available')

        if product_type:
            products = [p for p in products if product_type in p['product_type'].lower()]
        if location:
            products = [p for p in products if location in p['location_address'].lower()]
        if min_price is not None:
            products = [p for p in products if p['price_per_unit'] >= min_price]
        if max_price is not None:
            products = [p for p in products if p['price_per_unit'] <= max_price]

        return api_success(paginate(products, limit, offset, 'products'))
    except Exception:
        return server_error('Lỗi server khi lấy danh sách sản phẩm có sẵn')


@product_bp.route('/season/<int:season_id>', methods=['GET'])
@login_required
def list_season_products(season_id):
    try:
        products = get_store().products.find(season_id=season_id, user_id=current_user.id)
        return api_success(products)
    except Exception:
        return server_error('Lỗi server khi lấy sản phẩm mùa vụ')


@product_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id):
    try:
        product = get_store().products.get(product_id)
        if not product:
            return api_error('Không tìm thấy sản phẩm', 404)
        return api_success(product)
    except Exception:
        return server_error('Lỗi server khi lấy thông tin sản phẩm')


@product_bp.route('/<int:product_id>', methods=['PUT'])
@login_required
def update_product(product_id):
    data = request.get_json(silent=True) or {}
    try:
        store = get_store()
        product = store.products.get(product_id)
        if not product:
            return api_error('Không tìm thấy sản phẩm', 404)

        if product['user_id'] != current_user.id:
            return api_error('Không có quyền cập nhật sản phẩm này', 403)

        updates = normalize_product(pick(data, EDITABLE_FIELDS))
        error = validate_product({**product, **updates})
        if error:
            return api_error(error)

        # Open orders own the status until they finish or are cancelled
        status_changed = 'status' in updates and updates['status'] != product['status']
        if status_changed and open_orders_for(store, product_id):
            return api_error('Không thể thay đổi trạng thái sản phẩm đang có đơn hàng')

        if updates.get('season_id') is not None:
            error = season_access_error(store, updates['season_id'], current_user.id)
            if error:
                return error

        product = store.products.update(product_id, updates)
        return api_success(product, 'Cập nhật sản phẩm thành công')
    except Exception:
        return server_error('Lỗi server khi cập nhật sản phẩm')


@product_bp.route('/<int:product_id>', methods=['DELETE'])
@login_required
def delete_product(product_id):
    try:
        store = get_store()
        product = store.products.get(product_id)
        if not product:
            return api_error('Không tìm thấy sản phẩm', 404)

        if product['user_id'] != current_user.id:
            return api_error('Không có quyền xóa sản phẩm này', 403)

        if open_orders_for(store, product_id):
            return api_error('Không thể xóa sản phẩm đang có đơn hàng')

        store.products.delete(product_id)
        return api_success(message='Xóa sản phẩm thành công')
    except Exception:
        return server_error('Lỗi server khi xóa sản phẩm')
