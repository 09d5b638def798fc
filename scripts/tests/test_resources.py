import io

from conftest import IMAGE, PRODUCT, SEASON, create_order, create_product


def create_season(client, farmer, **overrides):
    resp = client.post('/api/season', headers=farmer['headers'], json={**SEASON, **overrides})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['data']


def create_image(client, farmer, **overrides):
    resp = client.post('/api/image', headers=farmer['headers'], json={**IMAGE, **overrides})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['data']


# Seasons

def test_season_defaults_and_validation(client, make_user):
    farmer = make_user()
    season = create_season(client, farmer, fertilizers='NPK, Phân hữu cơ')
    assert season['status'] == 'planning'
    assert season['fertilizers'] == ['NPK', 'Phân hữu cơ']
    assert season['pesticides'] == []
    assert season['user_id'] == farmer['id']

    def post(**overrides):
        return client.post('/api/season', headers=farmer['headers'], json={**SEASON, **overrides})

    assert post(season_name='').status_code == 400
    assert post(planting_date='10/01/2024').status_code == 400
    assert post(expected_harvest_date='2024-01-10').status_code == 400
    assert post(area_size=-2).status_code == 400
    assert post(status='sleeping').status_code == 400


def test_season_update_validates_merged_record(client, make_user):
    farmer = make_user()
    season = create_season(client, farmer)
    url = f"/api/season/{season['id']}"

    resp = client.put(url, headers=farmer['headers'], json={'planting_date': '2024-05-01'})
    assert resp.status_code == 400

    resp = client.put(url, headers=farmer['headers'], json={'status': 'growing', 'user_id': 999})
    assert resp.status_code == 200
    assert resp.get_json()['data']['status'] == 'growing'
    assert resp.get_json()['data']['user_id'] == farmer['id']


def test_season_update_rejects_blank_text(client, make_user):
    farmer = make_user()
    season = create_season(client, farmer)
    url = f"/api/season/{season['id']}"

    assert client.put(url, headers=farmer['headers'], json={'season_name': None}).status_code == 400
    assert client.put(url, headers=farmer['headers'], json={'crop_type': '  '}).status_code == 400
    assert client.get(url, headers=farmer['headers']).get_json()['data']['season_name'] == SEASON['season_name']


def test_season_listing(client, make_user):
    farmer = make_user()
    create_season(client, farmer)
    create_season(client, farmer, season_name='Vụ Hè Thu', status='growing')
    create_season(client, make_user())

    data = client.get('/api/season/me', headers=farmer['headers']).get_json()['data']
    assert data['total'] == 2
    data = client.get('/api/season/me?status=growing', headers=farmer['headers']).get_json()['data']
    assert [s['season_name'] for s in data['seasons']] == ['Vụ Hè Thu']
    data = client.get('/api/season/me?limit=1&offset=1', headers=farmer['headers']).get_json()['data']
    assert len(data['seasons']) == 1
    assert data['total'] == 2


def test_season_delete_detaches_children(client, make_user):
    farmer = make_user()
    season = create_season(client, farmer)
    image = create_image(client, farmer, season_id=season['id'])
    product = create_product(client, farmer, season_id=season['id'])

    assert client.delete(f"/api/season/{season['id']}", headers=farmer['headers']).status_code == 200
    assert client.get(f"/api/season/{season['id']}", headers=farmer['headers']).status_code == 404

    image = client.get(f"/api/image/{image['id']}", headers=farmer['headers']).get_json()['data']
    assert image['season_id'] is None
    assert client.get(f"/api/product/{product['id']}").get_json()['data']['season_id'] is None


# Ownership

def test_other_users_get_403(client, make_user):
    owner = make_user()
    intruder = make_user()
    season = create_season(client, owner)
    image = create_image(client, owner)
    product = create_product(client, owner)

    for url in (f"/api/season/{season['id']}", f"/api/image/{image['id']}"):
        assert client.get(url, headers=intruder['headers']).status_code == 403
        assert client.put(url, headers=intruder['headers'], json={'title': 'x'}).status_code == 403
        assert client.delete(url, headers=intruder['headers']).status_code == 403

    url = f"/api/product/{product['id']}"
    assert client.put(url, headers=intruder['headers'], json={'quantity': 1}).status_code == 403
    assert client.delete(url, headers=intruder['headers']).status_code == 403

    # attaching to someone else's season
    resp = client.post('/api/image', headers=intruder['headers'], json={**IMAGE, 'season_id': season['id']})
    assert resp.status_code == 403
    resp = client.post('/api/product', headers=intruder['headers'], json={**PRODUCT, 'season_id': season['id']})
    assert resp.status_code == 403
    resp = client.post('/api/product', headers=intruder['headers'], json={**PRODUCT, 'season_id': 999})
    assert resp.status_code == 404


def test_missing_resources_get_404(client, make_user):
    farmer = make_user()
    for url in ('/api/season/999', '/api/image/999'):
        assert client.get(url, headers=farmer['headers']).status_code == 404
    assert client.get('/api/product/999').status_code == 404
    assert client.delete('/api/product/999', headers=farmer['headers']).status_code == 404


def test_resources_require_login(client):
    assert client.post('/api/season', json=SEASON).status_code == 401
    assert client.get('/api/image/me').status_code == 401
    assert client.post('/api/product', json=PRODUCT).status_code == 401


# Images

def test_image_validation_and_filters(client, make_user):
    farmer = make_user()
    season = create_season(client, farmer)
    create_image(client, farmer, season_id=season['id'], tags=['lúa', 'đồng'])
    create_image(client, farmer, image_type='certificate')

    assert client.post('/api/image', headers=farmer['headers'],
                       json={**IMAGE, 'image_type': 'selfie'}).status_code == 400
    assert client.post('/api/image', headers=farmer['headers'],
                       json={**IMAGE, 'taken_date': 'yesterday'}).status_code == 400

    data = client.get('/api/image/me?image_type=certificate', headers=farmer['headers']).get_json()['data']
    assert data['total'] == 1
    data = client.get(f"/api/image/me?season_id={season['id']}", headers=farmer['headers']).get_json()['data']
    assert data['images'][0]['tags'] == ['lúa', 'đồng']

    images = client.get(f"/api/image/season/{season['id']}", headers=farmer['headers']).get_json()['data']
    assert len(images) == 1


def test_image_update_rejects_blank_text(client, make_user):
    farmer = make_user()
    image = create_image(client, farmer)
    url = f"/api/image/{image['id']}"

    assert client.put(url, headers=farmer['headers'], json={'title': None}).status_code == 400
    assert client.put(url, headers=farmer['headers'], json={'image_url': ''}).status_code == 400
    assert client.get(url, headers=farmer['headers']).get_json()['data']['title'] == IMAGE['title']


def test_image_upload(client, make_user):
    farmer = make_user()
    resp = client.post('/api/image/upload', headers=farmer['headers'],
                       data={'file': (io.BytesIO(b'\x89PNG fake'), 'ruong lua.png')},
                       content_type='multipart/form-data')
    assert resp.status_code == 201
    data = resp.get_json()['data']
    assert data['image_url'].startswith('/uploads/images/')
    assert ' ' not in data['filename']

    assert client.get(data['image_url']).data == b'\x89PNG fake'

    resp = client.post('/api/image/upload', headers=farmer['headers'],
                       data={'file': (io.BytesIO(b'MZ'), 'virus.exe')},
                       content_type='multipart/form-data')
    assert resp.status_code == 400
    resp = client.post('/api/image/upload', headers=farmer['headers'], data={},
                       content_type='multipart/form-data')
    assert resp.status_code == 400


# Products

def test_product_create_forces_available(client, make_user):
    farmer = make_user()
    product = create_product(client, farmer, status='sold', currency='usd', certifications='Organic, VietGAP')
    assert product['status'] == 'available'
    assert product['currency'] == 'USD'
    assert product['certifications'] == ['Organic', 'VietGAP']
    assert product['blockchain_hash'] is None


def test_product_validation(client, make_user):
    farmer = make_user()

    def post(**overrides):
        return client.post('/api/product', headers=farmer['headers'], json={**PRODUCT, **overrides})

    assert post(location_address='').status_code == 400
    assert post(quantity=-1).status_code == 400
    assert post(price_per_unit='free').status_code == 400
    assert post(currency='JPY').status_code == 400
    assert post(harvest_date='mùa xuân').status_code == 400
    assert post(expiry_date='never').status_code == 400

    product = create_product(client, farmer)
    url = f"/api/product/{product['id']}"
    assert client.put(url, headers=farmer['headers'], json={'status': 'lost'}).status_code == 400
    resp = client.put(url, headers=farmer['headers'], json={'price_per_unit': 30000, 'user_id': 999})
    assert resp.status_code == 200
    assert resp.get_json()['data']['price_per_unit'] == 30000
    assert resp.get_json()['data']['user_id'] == farmer['id']


def test_product_update_rejects_blank_text(client, make_user):
    farmer = make_user('farmer')
    business = make_user('business')
    product = create_product(client, farmer)
    url = f"/api/product/{product['id']}"

    for field in ('product_name', 'product_type', 'unit', 'location_address'):
        resp = client.put(url, headers=farmer['headers'], json={field: None})
        assert resp.status_code == 400, field

    assert client.get(url).get_json()['data']['product_type'] == PRODUCT['product_type']
    query = {'product_type': 'lúa'}
    assert client.get('/api/product/available', query_string=query).status_code == 200
    resp = client.get('/api/partner/products', headers=business['headers'], query_string=query)
    assert resp.status_code == 200


def test_available_products_filters(client, make_user):
    farmer = make_user()
    create_product(client, farmer)
    create_product(client, farmer, product_name='Cà phê Robusta', product_type='Cà phê',
                   location_address='Buôn Ma Thuột, Đắk Lắk', price_per_unit=90000)
    hidden = create_product(client, farmer, product_name='Tiêu')
    client.put(f"/api/product/{hidden['id']}", headers=farmer['headers'], json={'status': 'expired'})

    def names(**query):
        data = client.get('/api/product/available', query_string=query).get_json()['data']
        return [p['product_name'] for p in data['products']]

    assert names() == ['Gạo ST25', 'Cà phê Robusta']
    assert names(product_type='cà phê') == ['Cà phê Robusta']
    assert names(location='sóc trăng') == ['Gạo ST25']
    assert names(min_price=50000) == ['Cà phê Robusta']
    assert names(max_price=50000) == ['Gạo ST25']


def test_my_products_and_season_products(client, make_user):
    farmer = make_user()
    season = create_season(client, farmer)
    create_product(client, farmer, season_id=season['id'])
    create_product(client, farmer)
    create_product(client, make_user())

    data = client.get('/api/product/me', headers=farmer['headers']).get_json()['data']
    assert data['total'] == 2
    data = client.get(f"/api/product/me?season_id={season['id']}", headers=farmer['headers']).get_json()['data']
    assert data['total'] == 1
    products = client.get(f"/api/product/season/{season['id']}", headers=farmer['headers']).get_json()['data']
    assert len(products) == 1


def test_product_with_open_order_cannot_be_deleted(client, make_user):
    farmer = make_user('farmer')
    business = make_user('business')
    product = create_product(client, farmer)
    order = create_order(client, business, farmer, product)
    url = f"/api/product/{product['id']}"

    resp = client.delete(url, headers=farmer['headers'])
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Không thể xóa sản phẩm đang có đơn hàng'

    client.put(f"/api/order/{order['id']}", headers=farmer['headers'], json={'status': 'cancelled'})
    assert client.delete(url, headers=farmer['headers']).status_code == 200
    assert client.get(url).status_code == 404


def test_product_status_is_locked_by_open_order(client, make_user):
    farmer = make_user('farmer')
    business = make_user('business')
    product = create_product(client, farmer)
    order = create_order(client, business, farmer, product)
    url = f"/api/product/{product['id']}"
    assert client.get(url).get_json()['data']['status'] == 'reserved'

    resp = client.put(url, headers=farmer['headers'], json={'status': 'available'})
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Không thể thay đổi trạng thái sản phẩm đang có đơn hàng'

    # other fields stay editable, and so does a status that does not change
    resp = client.put(url, headers=farmer['headers'], json={'status': 'reserved', 'description': 'Hàng mới'})
    assert resp.status_code == 200

    client.put(f"/api/order/{order['id']}", headers=farmer['headers'], json={'status': 'cancelled'})
    resp = client.put(url, headers=farmer['headers'], json={'status': 'expired'})
    assert resp.status_code == 200
    assert resp.get_json()['data']['status'] == 'expired'
