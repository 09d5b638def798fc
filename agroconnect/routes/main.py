# Main Routes
from datetime import datetime
from flask import Blueprint, current_app, send_from_directory

from agroconnect.storage import get_store
from agroconnect.utils.responses import api_success, api_error

main_bp = Blueprint('main', __name__)

API_VERSION = '1.0.0'


@main_bp.route('/api/ping')
def ping():
    return api_success(message=current_app.config['PING_MESSAGE'])


@main_bp.route('/api/health')
def health():
    """Liveness plus a cheap storage round trip."""
    try:
        users = get_store().users.count()
    except Exception:
        current_app.logger.exception('Health check failed')
        return api_error('Storage không khả dụng', 503)

    return api_success({
        'status': 'healthy',
        'version': API_VERSION,
        'storage': current_app.config['STORAGE_BACKEND'],
        'users': users,
        'timestamp': datetime.utcnow().isoformat()
    })


@main_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
