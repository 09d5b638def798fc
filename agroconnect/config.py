# Application Configuration
import os
from pathlib import Path

basedir = Path(__file__).parent.parent

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # sqlite (SQLAlchemy models) or json (flat file store)
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'sqlite').lower()

    # Handle both PostgreSQL (Render) and SQLite (local)
    database_url = os.environ.get('DATABASE_URL')
    if database_url:
        # Render provides postgres:// but SQLAlchemy needs postgresql://
        if database_url.startswith('postgres://'):
            database_url = database_url.replace('postgres://', 'postgresql://', 1)
        SQLALCHEMY_DATABASE_URI = database_url
    else:
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{basedir / "instance" / "agroconnect.db"}'

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JSON_DB_PATH = Path(os.environ.get('JSON_DB_PATH') or basedir / 'instance' / 'agroconnect.json')

    # Bearer session tokens
    SESSION_TOKEN_TTL_HOURS = int(os.environ.get('SESSION_TOKEN_TTL_HOURS', 24))

    # Upload settings
    UPLOAD_FOLDER = basedir / 'instance' / 'uploads'
    IMAGE_UPLOAD_FOLDER = UPLOAD_FOLDER / 'images'
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size

    FRONTEND_URL = os.environ.get('FRONTEND_URL') or 'http://localhost:8080'
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    PING_MESSAGE = os.environ.get('PING_MESSAGE') or 'ping'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    SEED_DEMO_USERS = os.environ.get('SEED_DEMO_USERS', '0') == '1'
    ALLOW_SUPER_EXPERT_BOOTSTRAP = os.environ.get('ALLOW_SUPER_EXPERT_BOOTSTRAP', '0') == '1'

    # Blockchain mirror (Polygon Amoy testnet), disabled unless explicitly enabled
    BLOCKCHAIN_ENABLED = os.environ.get('BLOCKCHAIN_ENABLED', '0') == '1'
    BLOCKCHAIN_RPC_URL = os.environ.get('POLYGON_RPC_URL') or 'https://rpc-amoy.polygon.technology'
    BLOCKCHAIN_CONTRACT_ADDRESS = os.environ.get('CONTRACT_ADDRESS') or '0x0000000000000000000000000000000000000000'
    BLOCKCHAIN_PRIVATE_KEY = os.environ.get('PRIVATE_KEY') or None
    BLOCKCHAIN_CHAIN_ID = 80002
    BLOCKCHAIN_GAS_LIMIT = 500000
    BLOCKCHAIN_EXPLORER_URL = 'https://amoy.polygonscan.com'

    # Partner matching
    PARTNER_MIN_MATCH_SCORE = 30
    PARTNER_MAX_SUGGESTIONS = 10
    PARTNER_DEFAULT_MIN_ESG_SCORE = 70
    PARTNER_DEFAULT_MAX_DISTANCE_KM = 50
    PARTNER_CANDIDATE_LIMIT = 100


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret'
    STORAGE_BACKEND = 'sqlite'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SEED_DEMO_USERS = False
    ALLOW_SUPER_EXPERT_BOOTSTRAP = True
    BLOCKCHAIN_ENABLED = False
    LOG_LEVEL = 'WARNING'
