import json

import pytest

from agroconnect.storage.json_store import JsonStore


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / 'db.json')


def test_create_applies_model_defaults(store):
    user = store.users.create({'email': 'a@example.com', 'password_hash': 'x',
                               'role': 'farmer', 'full_name': 'A'})
    assert user['id'] == 1
    assert user['is_active'] is True
    assert user['is_verified'] is False
    assert user['phone'] is None
    assert user['created_at']


def test_ids_increase_and_records_persist(store, tmp_path):
    store.seasons.create({'user_id': 1, 'season_name': 'A'})
    second = store.seasons.create({'user_id': 1, 'season_name': 'B'})
    assert second['id'] == 2

    reopened = JsonStore(tmp_path / 'db.json')
    assert [s['season_name'] for s in reopened.seasons.find(user_id=1)] == ['A', 'B']

    with open(tmp_path / 'db.json', encoding='utf-8') as fh:
        assert len(json.load(fh)['seasons']) == 2


def test_find_filters_and_count(store):
    store.products.create({'user_id': 1, 'product_name': 'A', 'status': 'available'})
    store.products.create({'user_id': 1, 'product_name': 'B', 'status': 'sold'})
    store.products.create({'user_id': 2, 'product_name': 'C'})

    assert [p['product_name'] for p in store.products.find(status='available')] == ['A', 'C']
    assert store.products.count(user_id=1) == 2
    assert store.products.find_one(user_id=3) is None


def test_returned_records_are_copies(store):
    product = store.products.create({'user_id': 1, 'product_name': 'A', 'certifications': ['x']})
    product['certifications'].append('y')
    assert store.products.get(product['id'])['certifications'] == ['x']


def test_update_and_delete(store):
    season = store.seasons.create({'user_id': 1, 'season_name': 'A'})
    updated = store.seasons.update(season['id'], {'season_name': 'B'})
    assert updated['season_name'] == 'B'
    assert updated['updated_at'] >= season['updated_at']
    assert store.seasons.update(99, {'season_name': 'C'}) is None

    assert store.seasons.delete(season['id']) is True
    assert store.seasons.delete(season['id']) is False
    assert store.seasons.get(season['id']) is None


def test_delete_where(store):
    for token in ('a', 'b', 'c'):
        store.sessions.create({'user_id': 1 if token != 'c' else 2, 'session_token': token})
    assert store.sessions.delete_where(user_id=1) == 2
    assert [s['session_token'] for s in store.sessions.find()] == ['c']
    assert store.sessions.delete_where(user_id=1) == 0


def test_unknown_field_is_rejected(store):
    with pytest.raises(ValueError):
        store.users.create({'email': 'a@example.com', 'nickname': 'x'})


def test_rollback_reloads_last_saved_state(store):
    store.users.create({'email': 'a@example.com', 'role': 'farmer', 'full_name': 'A', 'password_hash': 'x'})
    store.database.data['users'].clear()
    store.rollback()
    assert store.users.count() == 1


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{not json', encoding='utf-8')
    with pytest.raises(ValueError):
        JsonStore(path)
