# Storage backends
from flask import current_app

from agroconnect.models import db
from agroconnect.storage.json_store import JsonStore
from agroconnect.storage.sql_store import SqlStore

EXTENSION_KEY = 'agroconnect_store'


def init_storage(app):
    """Attach the configured store to the app and make sure its schema exists."""
    backend = app.config['STORAGE_BACKEND']
    if backend == 'sqlite':
        db.init_app(app)
        with app.app_context():
            db.create_all()
        store = SqlStore()
    elif backend == 'json':
        store = JsonStore(app.config['JSON_DB_PATH'])
    else:
        raise ValueError(f'Unsupported STORAGE_BACKEND {backend!r} (expected sqlite or json)')

    app.extensions[EXTENSION_KEY] = store
    app.logger.info('Storage backend ready: %s', backend)
    return store


def get_store():
    return current_app.extensions[EXTENSION_KEY]


__all__ = ['init_storage', 'get_store', 'SqlStore', 'JsonStore']
