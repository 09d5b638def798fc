# Order Routes
import secrets
import string
import time
from flask import Blueprint, request, current_app
from flask_login import login_required, current_user

from agroconnect.storage import get_store
from agroconnect.utils.auth import role_required
from agroconnect.utils.responses import api_success, api_error, server_error
from agroconnect.utils.validation import parse_date, to_float, to_int, pick, pagination, paginate

order_bp = Blueprint('order', __name__)

ORDER_STATUSES = ('pending', 'negotiating', 'confirmed', 'in_progress',
                  'shipped', 'delivered', 'cancelled', 'completed')

# Allowed next states for each order status
ORDER_TRANSITIONS = {
    'pending': ('negotiating', 'cancelled'),
    'negotiating': ('confirmed', 'cancelled'),
    'confirmed': ('in_progress', 'cancelled'),
    'in_progress': ('shipped', 'cancelled'),
    'shipped': ('delivered',),
    'delivered': ('completed',),
    'cancelled': (),
    'completed': ()
}

DELETABLE_STATUSES = ('pending', 'cancelled')
EDITABLE_FIELDS = ('quantity', 'price_per_unit', 'delivery_address', 'delivery_lat',
                   'delivery_lng', 'delivery_date', 'notes', 'contract_url', 'status')


def generate_order_number():
    """ORD-<ms timestamp>-<6 random upper case chars>"""
    alphabet = string.ascii_uppercase + string.digits
    random_part = ''.join(secrets.choice(alphabet) for _ in range(6))
    return f'ORD-{int(time.time() * 1000)}-{random_part}'


def can_transition(current, new):
    return new in ORDER_TRANSITIONS.get(current, ())


def is_party(order, user_id):
    return user_id in (order['farmer_id'], order['business_id'])


def orders_for_user(store, user_id):
    orders = store.orders.find(farmer_id=user_id) + store.orders.find(business_id=user_id)
    return sorted(orders, key=lambda order: order['id'])


def order_stats(orders):
    stats = {'total': len(orders)}
    for status in ORDER_STATUSES:
        stats[status] = sum(1 for order in orders if order['status'] == status)
    return stats


def set_product_status(store, product_id, status):
    if store.products.get(product_id):
        store.products.update(product_id, {'status': status})


def release_product(store, product_id):
    product = store.products.get(product_id)
    if product and product['status'] == 'reserved':
        store.products.update(product_id, {'status': 'available'})


def normalize_order(values):
    for field in ('quantity', 'price_per_unit', 'delivery_lat', 'delivery_lng'):
        if field in values:
            values[field] = to_float(values[field])
    return values


@order_bp.route('', methods=['POST'])
@role_required('business')
def create_order():
    data = request.get_json(silent=True) or {}

    required = ('farmer_id', 'product_id', 'quantity', 'unit', 'price_per_unit', 'currency', 'delivery_address')
    if not all(data.get(field) for field in required):
        return api_error('Farmer ID, Product ID, quantity, unit, price, currency và địa chỉ giao hàng là bắt buộc.')

    farmer_id = to_int(data.get('farmer_id'))
    product_id = to_int(data.get('product_id'))
    values = normalize_order(pick(data, EDITABLE_FIELDS))
    values.pop('status', None)

    if farmer_id is None or product_id is None:
        return api_error('Farmer ID hoặc Product ID không hợp lệ.')
    if values.get('quantity') is None or values['quantity'] <= 0:
        return api_error('Số lượng phải lớn hơn 0.')
    if values.get('price_per_unit') is None or values['price_per_unit'] <= 0:
        return api_error('Giá phải lớn hơn 0.')
    if values.get('delivery_date') and parse_date(values['delivery_date']) is None:
        return api_error('Ngày giao hàng không hợp lệ.')

    currency = str(data['currency']).upper()
    if currency not in ('VND', 'USD', 'EUR'):
        return api_error('Tiền tệ không hợp lệ.')

    try:
        store = get_store()
        product = store.products.get(product_id)
        if not product:
            return api_error('Không tìm thấy sản phẩm.', 404)

        if product['status'] != 'available':
            return api_error('Sản phẩm không có sẵn để đặt hàng.')

        farmer = store.users.get(farmer_id)
        if not farmer or farmer['role'] != 'farmer':
            return api_error('Không tìm thấy nông dân.', 404)

        if product['user_id'] != farmer_id:
            return api_error('Sản phẩm không thuộc về nông dân này.')

        values.update({
            'order_number': generate_order_number(),
            'farmer_id': farmer_id,
            'business_id': current_user.id,
            'product_id': product_id,
            'unit': data['unit'],
            'currency': currency,
            'total_amount': values['quantity'] * values['price_per_unit'],
            'status': 'pending'
        })
        order = store.orders.create(values)
        store.products.update(product_id, {'status': 'reserved'})

        current_app.logger.info('Order %s created by business %s for product %s',
                                order['order_number'], current_user.id, product_id)
        return api_success(order, 'Tạo đơn hàng thành công', 201)
    except Exception:
        return server_error('Lỗi server khi tạo đơn hàng')


@order_bp.route('/me', methods=['GET'])
@login_required
def list_my_orders():
    limit, offset = pagination(request.args, default_limit=50)
    status = request.args.get('status')

    try:
        orders = orders_for_user(get_store(), current_user.id)
        if status:
            orders = [order for order in orders if order['status'] == status]
        return api_success(paginate(orders, limit, offset, 'orders'))
    except Exception:
        return server_error('Lỗi server khi lấy danh sách đơn hàng')


@order_bp.route('/stats', methods=['GET'])
@login_required
def get_order_stats():
    try:
        return api_success(order_stats(orders_for_user(get_store(), current_user.id)))
    except Exception:
        return server_error('Lỗi server khi lấy thống kê đơn hàng')


@order_bp.route('/<int:order_id>', methods=['GET'])
@login_required
def get_order(order_id):
    try:
        order = get_store().orders.get(order_id)
        if not order:
            return api_error('Không tìm thấy đơn hàng.', 404)

        if not is_party(order, current_user.id):
            return api_error('Bạn không có quyền truy cập đơn hàng này.', 403)

        return api_success(order)
    except Exception:
        return server_error('Lỗi server khi lấy thông tin đơn hàng')


@order_bp.route('/<int:order_id>', methods=['PUT'])
@login_required
def update_order(order_id):
    data = request.get_json(silent=True) or {}
    try:
        store = get_store()
        order = store.orders.get(order_id)
        if not order:
            return api_error('Không tìm thấy đơn hàng.', 404)

        if not is_party(order, current_user.id):
            return api_error('Bạn không có quyền chỉnh sửa đơn hàng này.', 403)

        updates = normalize_order(pick(data, EDITABLE_FIELDS))

        new_status = updates.get('status')
        if new_status is not None and not can_transition(order['status'], new_status):
            return api_error(f"Không thể chuyển từ trạng thái {order['status']} sang {new_status}.")

        for field in ('quantity', 'price_per_unit'):
            if field in updates and (updates[field] is None or updates[field] <= 0):
                return api_error('Số lượng và giá phải lớn hơn 0.')
        if updates.get('delivery_date') and parse_date(updates['delivery_date']) is None:
            return api_error('Ngày giao hàng không hợp lệ.')

        # Recalculate total amount if quantity or price changes
        if 'quantity' in updates or 'price_per_unit' in updates:
            quantity = updates.get('quantity', order['quantity'])
            price_per_unit = updates.get('price_per_unit', order['price_per_unit'])
            updates['total_amount'] = quantity * price_per_unit

        order = store.orders.update(order_id, updates)

        if new_status == 'cancelled':
            release_product(store, order['product_id'])
        elif new_status == 'completed':
            set_product_status(store, order['product_id'], 'sold')

        return api_success(order, 'Cập nhật đơn hàng thành công')
    except Exception:
        return server_error('Lỗi server khi cập nhật đơn hàng')


@order_bp.route('/<int:order_id>', methods=['DELETE'])
@login_required
def delete_order(order_id):
    try:
        store = get_store()
        order = store.orders.get(order_id)
        if not order:
            return api_error('Không tìm thấy đơn hàng.', 404)

        if not is_party(order, current_user.id):
            return api_error('Bạn không có quyền xóa đơn hàng này.', 403)

        if order['status'] not in DELETABLE_STATUSES:
            return api_error('Chỉ có thể xóa đơn hàng ở trạng thái pending hoặc cancelled.')

        store.orders.delete(order_id)
        release_product(store, order['product_id'])
        return api_success(message='Xóa đơn hàng thành công')
    except Exception:
        return server_error('Lỗi server khi xóa đơn hàng')
