# Flask Application Factory
from pathlib import Path
from flask import Flask
from flask_cors import CORS

from agroconnect.config import Config
from agroconnect.storage import init_storage, get_store
from agroconnect.services.esg import ESG_ROLES, create_verification_request, approve_verification
from agroconnect.utils.auth import login_manager
from agroconnect.utils.responses import api_error
from agroconnect.utils.security import hash_password

DEMO_PASSWORD = 'demo123'

DEMO_USERS = [
    {
        'email': 'farmer@demo.com',
        'full_name': 'Nông dân Demo',
        'phone': '0901000001',
        'role': 'farmer',
        'bio': 'Hợp tác xã lúa hữu cơ Đồng Tháp',
        'address': 'Cao Lãnh, Đồng Tháp',
        'location_lat': 10.4602,
        'location_lng': 105.6329
    },
    {
        'email': 'business@demo.com',
        'full_name': 'Doanh nghiệp Demo',
        'phone': '0901000002',
        'role': 'business',
        'bio': 'Công ty thu mua và chế biến nông sản',
        'address': 'Ninh Kiều, Cần Thơ',
        'location_lat': 10.0452,
        'location_lng': 105.7469
    },
    {
        'email': 'expert@demo.com',
        'full_name': 'Chuyên gia ESG Demo',
        'phone': '0901000003',
        'role': 'esg_expert',
        'bio': 'Chuyên gia đánh giá ESG nông nghiệp',
        'address': 'Quận 1, TP. Hồ Chí Minh',
        'location_lat': 10.7769,
        'location_lng': 106.7009
    }
]


def seed_demo_users_if_needed(app):
    """
    Create the demo farmer, business and ESG expert accounts if missing.

    Every account gets a profile and, for ESG roles, a verification request.
    The expert is approved straight away (score 100) so that someone can
    review the other requests.
    """
    result = {'created': [], 'skipped': []}
    store = get_store()

    for user_data in DEMO_USERS:
        if store.users.find_one(email=user_data['email']):
            result['skipped'].append(user_data['email'])
            continue

        user = store.users.create({
            'email': user_data['email'],
            'phone': user_data['phone'],
            'password_hash': hash_password(DEMO_PASSWORD),
            'role': user_data['role'],
            'full_name': user_data['full_name']
        })
        store.profiles.create({
            'user_id': user['id'],
            'bio': user_data['bio'],
            'address': user_data['address'],
            'location_lat': user_data['location_lat'],
            'location_lng': user_data['location_lng'],
            'certifications': [],
            'activity_history': [],
            'social_links': {}
        })

        if user['role'] in ESG_ROLES:
            verification = create_verification_request(store, user['id'], 'Yêu cầu xác thực ESG tự động khi đăng ký')
            if user['role'] == 'esg_expert':
                approve_verification(store, verification, user['id'], 100,
                                     'Auto-approved Super ESG Expert - System initialization')

        result['created'].append(user_data['email'])
        app.logger.info('Created demo user: %s', user_data['email'])

    if result['created']:
        app.logger.info('Seeded %d demo users (password: %s)', len(result['created']), DEMO_PASSWORD)
    else:
        app.logger.info('Demo users already exist, skipping seeding')
    return result


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return api_error('Không tìm thấy tài nguyên', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return api_error('Phương thức không được hỗ trợ', 405)

    @app.errorhandler(413)
    def too_large(error):
        return api_error('File quá lớn', 413)

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error('Unhandled server error: %s', error)
        return api_error('Lỗi server', 500)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    origins = app.config['CORS_ORIGINS']
    if origins != '*':
        origins = [origin.strip() for origin in origins.split(',') if origin.strip()]
    CORS(app, resources={r'/api/*': {'origins': origins}})
    init_storage(app)
    login_manager.init_app(app)

    # Create upload directories
    Path(app.config['UPLOAD_FOLDER']).mkdir(parents=True, exist_ok=True)
    Path(app.config['IMAGE_UPLOAD_FOLDER']).mkdir(parents=True, exist_ok=True)

    if app.config['SEED_DEMO_USERS']:
        with app.app_context():
            app.logger.info('Checking if demo users need seeding...')
            seed_demo_users_if_needed(app)

    # Register blueprints
    from agroconnect.routes.main import main_bp
    from agroconnect.routes.auth import auth_bp
    from agroconnect.routes.profile import profile_bp
    from agroconnect.routes.esg import esg_bp
    from agroconnect.routes.season import season_bp
    from agroconnect.routes.image import image_bp
    from agroconnect.routes.product import product_bp
    from agroconnect.routes.order import order_bp
    from agroconnect.routes.partner import partner_bp
    from agroconnect.routes.qr import qr_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
    app.register_blueprint(esg_bp, url_prefix='/api/esg')
    app.register_blueprint(season_bp, url_prefix='/api/season')
    app.register_blueprint(image_bp, url_prefix='/api/image')
    app.register_blueprint(product_bp, url_prefix='/api/product')
    app.register_blueprint(order_bp, url_prefix='/api/order')
    app.register_blueprint(partner_bp, url_prefix='/api/partner')
    app.register_blueprint(qr_bp, url_prefix='/api/qr')

    register_error_handlers(app)
    app.logger.info('AgroConnect API ready (storage: %s)', app.config['STORAGE_BACKEND'])
    return app
