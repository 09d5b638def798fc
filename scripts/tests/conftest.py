import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

import pytest

from agroconnect import create_app
from agroconnect.config import TestingConfig

PASSWORD = 'secret123'


def make_config(backend, tmp_path):
    class Config(TestingConfig):
        STORAGE_BACKEND = backend
        JSON_DB_PATH = tmp_path / 'agroconnect.json'
        UPLOAD_FOLDER = tmp_path / 'uploads'
        IMAGE_UPLOAD_FOLDER = tmp_path / 'uploads' / 'images'
    return Config


@pytest.fixture(params=['sqlite', 'json'])
def app(request, tmp_path):
    app = create_app(make_config(request.param, tmp_path))
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


class UserFactory:
    """Registers and logs in users through the API."""

    def __init__(self, client):
        self.client = client
        self.counter = 0

    def __call__(self, role='farmer', **extra):
        self.counter += 1
        email = extra.pop('email', f'{role}{self.counter}@example.com')
        body = {'email': email, 'password': PASSWORD, 'role': role,
                'full_name': f'{role.title()} {self.counter}', **extra}
        resp = self.client.post('/api/auth/register', json=body)
        assert resp.status_code == 201, resp.get_json()
        user = resp.get_json()['data']

        resp = self.client.post('/api/auth/login', json={'email': email, 'password': PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        token = resp.get_json()['data']['session_token']
        return {'id': user['id'], 'email': email, 'role': role,
                'token': token, 'headers': bearer(token)}


@pytest.fixture
def make_user(client):
    return UserFactory(client)


@pytest.fixture
def expert(client, make_user):
    """An ESG expert approved through the bootstrap endpoint."""
    user = make_user('esg_expert')
    resp = client.post('/api/esg/auto-approve-super-expert', json={'email': user['email']})
    assert resp.status_code == 200, resp.get_json()
    return user


def approve_esg(client, expert, user, score=90):
    resp = client.get('/api/esg/me', headers=user['headers'])
    verification_id = resp.get_json()['data']['verification']['id']
    resp = client.post(f'/api/esg/{verification_id}/approve', headers=expert['headers'],
                       json={'esg_score': score})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data']


SEASON = {
    'season_name': 'Vụ Đông Xuân 2024',
    'crop_type': 'Lúa',
    'planting_date': '2024-01-10',
    'expected_harvest_date': '2024-04-20',
    'area_size': 2.5
}

PRODUCT = {
    'product_name': 'Gạo ST25',
    'product_type': 'Lúa gạo',
    'quantity': 1000,
    'unit': 'kg',
    'price_per_unit': 25000,
    'currency': 'VND',
    'harvest_date': '2024-04-20',
    'location_address': 'Sóc Trăng',
    'location_lat': 9.6025,
    'location_lng': 105.9739,
    'quality_standards': ['VietGAP'],
    'certifications': ['Organic']
}

IMAGE = {
    'image_url': 'https://example.com/field.jpg',
    'image_type': 'field',
    'title': 'Ruộng lúa',
    'taken_date': '2024-02-01'
}


def create_product(client, farmer, **overrides):
    resp = client.post('/api/product', headers=farmer['headers'], json={**PRODUCT, **overrides})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['data']


def create_order(client, business, farmer, product, **overrides):
    body = {
        'farmer_id': farmer['id'],
        'product_id': product['id'],
        'quantity': 100,
        'unit': 'kg',
        'price_per_unit': 24000,
        'currency': 'VND',
        'delivery_address': 'Cần Thơ',
        **overrides
    }
    resp = client.post('/api/order', headers=business['headers'], json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['data']
