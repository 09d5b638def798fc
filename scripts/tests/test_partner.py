import pytest

from conftest import approve_esg, create_product

HANOI = {'location_lat': 21.0285, 'location_lng': 105.8542}


def set_profile(client, user, **fields):
    resp = client.put('/api/profile/me', headers=user['headers'], json=fields)
    assert resp.status_code == 200, resp.get_json()


def suggestions(client, user, path, **query):
    resp = client.get(f'/api/partner/{path}', headers=user['headers'], query_string=query)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data']


def test_farmer_sees_verified_businesses_ranked(client, make_user, expert):
    farmer = make_user('farmer')
    set_profile(client, farmer, **HANOI)
    create_product(client, farmer)

    close = make_user('business')
    set_profile(client, close, certifications=['VietGAP', {'name': 'Organic'}], **HANOI)
    approve_esg(client, expert, close, score=90)

    remote = make_user('business')
    approve_esg(client, expert, remote, score=80)

    low_esg = make_user('business')
    approve_esg(client, expert, low_esg, score=50)

    make_user('business')  # never verified

    data = suggestions(client, farmer, 'suggestions', product_types='lúa', certifications='VietGAP')
    ranked = data['suggestions']
    assert [s['user_id'] for s in ranked] == [close['id'], remote['id']]
    assert data['total'] == 2

    # 30 type + 22.5 ESG + 20 certs + 15 distance, rounded half up
    assert ranked[0]['matching_score'] == 88
    assert ranked[0]['distance_km'] == 0
    assert ranked[0]['certifications'] == ['VietGAP', 'Organic']
    assert len(ranked[0]['matching_reasons']) == 4
    assert ranked[1]['matching_score'] == 50
    assert ranked[1]['distance_km'] is None

    assert data['criteria']['min_esg_score'] == 70
    assert data['criteria']['max_distance'] == 50
    assert data['criteria']['product_types'] == ['lúa']


def test_criteria_come_from_query(client, make_user, expert):
    farmer = make_user('farmer')
    create_product(client, farmer)
    business = make_user('business')
    approve_esg(client, expert, business, score=50)

    assert suggestions(client, farmer, 'suggestions', product_types='lúa')['total'] == 0

    data = suggestions(client, farmer, 'suggestions', product_types='lúa,cà phê', min_esg_score=40)
    assert data['criteria']['product_types'] == ['lúa', 'cà phê']
    # 15 type + 12.5 ESG
    assert data['total'] == 0

    data = suggestions(client, farmer, 'suggestions', product_types='lúa', min_esg_score=40)
    assert [s['matching_score'] for s in data['suggestions']] == [43]


def test_business_sees_verified_farmers_with_products(client, make_user, expert):
    business = make_user('business')

    productive = make_user('farmer')
    create_product(client, productive)
    approve_esg(client, expert, productive, score=90)

    empty = make_user('farmer')
    approve_esg(client, expert, empty, score=90)

    unverified = make_user('farmer')
    create_product(client, unverified)

    data = suggestions(client, business, 'business-suggestions',
                       product_types='lúa', quality_standards='VietGAP')
    assert [s['user_id'] for s in data['suggestions']] == [productive['id']]
    # 30 type + 22.5 ESG + 10 quality standards
    assert data['suggestions'][0]['matching_score'] == 63
    assert data['suggestions'][0]['esg_id'].startswith('ESG-')


@pytest.mark.parametrize('role, path', [('business', 'suggestions'), ('farmer', 'business-suggestions')])
def test_suggestions_are_role_restricted(client, make_user, role, path):
    user = make_user(role)
    assert client.get(f'/api/partner/{path}', headers=user['headers']).status_code == 403


def test_products_by_distance(client, make_user):
    farmer = make_user('farmer')
    viewer = make_user('business')
    south = create_product(client, farmer)
    north = create_product(client, farmer, product_name='Gạo nếp', product_type='Lúa nếp', **HANOI)
    create_product(client, farmer, product_name='Cà phê', product_type='Cà phê',
                   location_lat=None, location_lng=None)

    def products(**query):
        resp = client.get('/api/partner/products', headers=viewer['headers'], query_string=query)
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()['data']['products']

    everything = products()
    assert len(everything) == 3
    assert all(p['distance_km'] is None for p in everything)

    nearby = products(user_lat=south['location_lat'], user_lng=south['location_lng'], location_radius=10)
    assert [p['id'] for p in nearby] == [south['id']]
    assert nearby[0]['distance_km'] == 0

    rice = products(product_type='lúa', user_lat=21.0, user_lng=105.8)
    assert [p['id'] for p in rice] == [south['id'], north['id']]
    assert rice[1]['distance_km'] < rice[0]['distance_km']

    resp = client.get('/api/partner/products', headers=viewer['headers'], query_string={'user_lat': 21})
    assert resp.status_code == 400
    assert client.get('/api/partner/products').status_code == 401
