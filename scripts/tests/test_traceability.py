import hashlib
import json

import pytest

from agroconnect.services.traceability import (
    compute_traceability_hash, traceability_payload, verify_traceability
)

PRODUCT = {
    'id': 7,
    'user_id': 3,
    'product_name': 'Gạo ST25',
    'harvest_date': '2024-04-20',
    'location_address': 'Sóc Trăng',
    'quality_standards': ['VietGAP'],
    'certifications': ['Organic'],
    'created_at': '2024-04-21T08:30:00',
    'price_per_unit': 25000,
    'status': 'available'
}

HASHED_FIELDS = {
    'id': 8,
    'user_id': 4,
    'product_name': 'Gạo Tám',
    'harvest_date': '2024-04-21',
    'location_address': 'Cần Thơ',
    'quality_standards': ['GlobalGAP'],
    'certifications': [],
    'created_at': '2024-04-21T08:30:01'
}


def test_hash_is_sha256_of_compact_payload():
    serialized = json.dumps(traceability_payload(PRODUCT), separators=(',', ':'), ensure_ascii=False)
    assert compute_traceability_hash(PRODUCT) == hashlib.sha256(serialized.encode('utf-8')).hexdigest()
    assert list(traceability_payload(PRODUCT)) == [
        'product_id', 'product_name', 'farmer_id', 'harvest_date',
        'location', 'quality_standards', 'certifications', 'created_at'
    ]


def test_hash_is_deterministic():
    assert compute_traceability_hash(PRODUCT) == compute_traceability_hash(dict(PRODUCT))


@pytest.mark.parametrize('field', sorted(HASHED_FIELDS))
def test_changing_any_hashed_field_changes_hash(field):
    changed = {**PRODUCT, field: HASHED_FIELDS[field]}
    assert compute_traceability_hash(changed) != compute_traceability_hash(PRODUCT)


def test_unhashed_fields_do_not_matter():
    changed = {**PRODUCT, 'price_per_unit': 1, 'status': 'sold', 'blockchain_hash': 'x'}
    assert compute_traceability_hash(changed) == compute_traceability_hash(PRODUCT)


def test_missing_lists_hash_like_empty_lists():
    assert compute_traceability_hash({**PRODUCT, 'certifications': None}) == \
        compute_traceability_hash({**PRODUCT, 'certifications': []})


def test_verify_against_stored_hash():
    stored = {**PRODUCT, 'blockchain_hash': compute_traceability_hash(PRODUCT)}
    result = verify_traceability(stored, stored['blockchain_hash'])
    assert result['is_verified'] is True
    assert result['expected_hash'] == result['actual_hash']

    tampered = {**stored, 'product_name': 'Gạo thường'}
    assert verify_traceability(tampered, tampered['blockchain_hash'])['is_verified'] is False


def test_verify_checks_only_the_given_hash():
    stored = {**PRODUCT, 'blockchain_hash': compute_traceability_hash(PRODUCT)}
    assert verify_traceability(stored, 'deadbeef')['is_verified'] is False
    assert verify_traceability({**PRODUCT, 'blockchain_hash': None},
                               compute_traceability_hash(PRODUCT))['is_verified'] is True


def test_missing_hash_is_never_verified():
    stored = {**PRODUCT, 'blockchain_hash': compute_traceability_hash(PRODUCT)}
    result = verify_traceability(stored, None)
    assert result['is_verified'] is False
    assert result['actual_hash'] is None
