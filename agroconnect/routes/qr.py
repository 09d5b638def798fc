# QR Code & Traceability Routes
from flask import Blueprint, request, current_app
from flask_login import login_required, current_user

from agroconnect.storage import get_store
from agroconnect.services.blockchain import get_blockchain_client
from agroconnect.services.qr import build_qr_payload, render_qr_data_url, parse_qr_payload
from agroconnect.services.traceability import compute_traceability_hash, verify_traceability
from agroconnect.utils.responses import api_success, api_error, server_error
from agroconnect.utils.validation import to_int

qr_bp = Blueprint('qr', __name__)


def mirror_to_chain(client, product, farmer, blockchain_hash):
    """Push the product and its hash to the chain; failures are logged, never raised."""
    result = client.add_product(product, farmer)
    if not result['ok']:
        current_app.logger.warning('Failed to add product %s to blockchain: %s', product['id'], result['error'])
        return None

    tx_hash = result['tx_hash']
    current_app.logger.info('Product %s added to blockchain: %s', product['id'], tx_hash)
    verified = client.verify_product(product['id'], blockchain_hash)
    if not verified['ok']:
        current_app.logger.warning('Failed to verify product %s on blockchain: %s', product['id'], verified['error'])
    return tx_hash


@qr_bp.route('/generate', methods=['POST'])
@login_required
def generate_qr():
    data = request.get_json(silent=True) or {}
    product_id = to_int(data.get('product_id'))
    if product_id is None:
        return api_error('Product ID là bắt buộc')

    try:
        store = get_store()
        product = store.products.get(product_id)
        if not product:
            return api_error('Không tìm thấy sản phẩm', 404)

        if product['user_id'] != current_user.id:
            return api_error('Bạn không có quyền tạo QR code cho sản phẩm này', 403)

        blockchain_hash = compute_traceability_hash(product)

        client = get_blockchain_client()
        blockchain_available = client.is_available()
        tx_hash = None
        if blockchain_available:
            tx_hash = mirror_to_chain(client, product, store.users.get(product['user_id']), blockchain_hash)
        else:
            current_app.logger.info('Blockchain not available, using local hash only')

        payload = build_qr_payload(product, blockchain_hash, tx_hash, current_app.config['FRONTEND_URL'])
        qr_code = render_qr_data_url(payload)

        store.products.update(product_id, {'blockchain_hash': blockchain_hash})

        return api_success({
            'qr_code': qr_code,
            'qr_data': payload,
            'blockchain_hash': blockchain_hash,
            'blockchain_tx_hash': tx_hash,
            'blockchain_available': blockchain_available,
            'traceability_url': payload['traceability_url'],
            'product_info': {
                'id': product['id'],
                'name': product['product_name'],
                'harvest_date': product['harvest_date'],
                'location': product['location_address']
            }
        }, 'Tạo QR code thành công')
    except Exception:
        return server_error('Lỗi server khi tạo QR code')


@qr_bp.route('/traceability/<int:product_id>', methods=['GET'])
def get_traceability(product_id):
    try:
        store = get_store()
        product = store.products.get(product_id)
        if not product:
            return api_error('Không tìm thấy sản phẩm', 404)

        farmer = store.users.get(product['user_id'])
        orders = store.orders.find(product_id=product_id)

        client = get_blockchain_client()
        blockchain_available = client.is_available()
        verification = verify_traceability(product, product['blockchain_hash'])
        verification.update({
            'blockchain_available': blockchain_available,
            'blockchain_verification': client.get_verification(product_id) if blockchain_available else None
        })

        return api_success({
            'product': {
                'id': product['id'],
                'name': product['product_name'],
                'type': product['product_type'],
                'quantity': product['quantity'],
                'unit': product['unit'],
                'harvest_date': product['harvest_date'],
                'location': product['location_address'],
                'quality_standards': product['quality_standards'] or [],
                'certifications': product['certifications'] or [],
                'blockchain_hash': product['blockchain_hash'],
                'created_at': product['created_at']
            },
            'farmer': {
                'id': farmer['id'],
                'name': farmer['full_name'],
                'email': farmer['email']
            } if farmer else None,
            'orders': [{
                'id': order['id'],
                'order_number': order['order_number'],
                'business_id': order['business_id'],
                'quantity': order['quantity'],
                'status': order['status'],
                'created_at': order['created_at']
            } for order in orders],
            'blockchain_verification': verification
        })
    except Exception:
        return server_error('Lỗi server khi lấy thông tin truy xuất')


@qr_bp.route('/scan', methods=['POST'])
def scan_qr():
    data = request.get_json(silent=True) or {}
    qr_data = data.get('qr_data')
    if not qr_data:
        return api_error('QR data là bắt buộc')

    try:
        payload = parse_qr_payload(qr_data)
    except ValueError as e:
        return api_error(str(e))

    product_id = to_int(payload.get('product_id'))
    if product_id is None:
        return api_error('QR code không hợp lệ')

    try:
        product = get_store().products.get(product_id)
        if not product:
            return api_error('Không tìm thấy sản phẩm', 404)

        verification = verify_traceability(product, payload.get('blockchain_hash'))
        return api_success({
            'product_id': product['id'],
            'product_name': product['product_name'],
            'blockchain_verified': verification['is_verified'],
            'traceability_url': payload.get('traceability_url'),
            'created_at': payload.get('created_at')
        })
    except Exception:
        return server_error('Lỗi server khi quét QR code')


@qr_bp.route('/blockchain/status', methods=['GET'])
def blockchain_status():
    try:
        client = get_blockchain_client()
        if not client.is_available():
            return api_success({
                'available': False,
                'message': 'Blockchain không khả dụng'
            })

        return api_success({'available': True, **(client.get_stats() or {})})
    except Exception:
        current_app.logger.exception('Blockchain status error')
        return api_error('Lỗi khi kiểm tra trạng thái blockchain', 500)
