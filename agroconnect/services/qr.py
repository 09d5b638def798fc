# QR code rendering for product traceability
import base64
import json
from datetime import datetime
from io import BytesIO

import qrcode

QR_TYPE = 'product_traceability'
FILL_COLOR = '#2E7D32'
BACK_COLOR = '#FFFFFF'


def traceability_url(frontend_url, product_id):
    return f"{frontend_url.rstrip('/')}/traceability/{product_id}"


def build_qr_payload(product, blockchain_hash, tx_hash, frontend_url):
    return {
        'type': QR_TYPE,
        'product_id': product['id'],
        'blockchain_hash': blockchain_hash,
        'blockchain_tx_hash': tx_hash,
        'traceability_url': traceability_url(frontend_url, product['id']),
        'created_at': datetime.utcnow().isoformat()
    }


def render_qr_data_url(payload):
    """Encode payload as JSON in a QR code and return it as a PNG data URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(json.dumps(payload, ensure_ascii=False))
    qr.make(fit=True)
    img = qr.make_image(fill_color=FILL_COLOR, back_color=BACK_COLOR)

    buf = BytesIO()
    img.save(buf, format='PNG')
    return 'data:image/png;base64,' + base64.b64encode(buf.getvalue()).decode('ascii')


def parse_qr_payload(qr_data):
    """
    Decode scanned QR text (or an already decoded object).

    Raises:
        ValueError: the data is not JSON or not a traceability payload
    """
    if isinstance(qr_data, dict):
        payload = qr_data
    else:
        try:
            payload = json.loads(qr_data)
        except (TypeError, ValueError):
            raise ValueError('QR code không hợp lệ')
    if not isinstance(payload, dict) or payload.get('type') != QR_TYPE:
        raise ValueError('QR code không phải là mã truy xuất sản phẩm')
    return payload
