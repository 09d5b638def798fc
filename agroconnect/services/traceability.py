"""
Product traceability fingerprint.

The hash is a SHA-256 digest of a product's static attributes serialised as
compact JSON. It is stored on the product and recomputed on verification;
a product verifies when the two are equal.
"""
import hashlib
import json
from datetime import datetime


def traceability_payload(product):
    return {
        'product_id': product['id'],
        'product_name': product['product_name'],
        'farmer_id': product['user_id'],
        'harvest_date': product['harvest_date'],
        'location': product['location_address'],
        'quality_standards': product.get('quality_standards') or [],
        'certifications': product.get('certifications') or [],
        'created_at': product['created_at']
    }


def compute_traceability_hash(product):
    serialized = json.dumps(traceability_payload(product), separators=(',', ':'), ensure_ascii=False)
    return hashlib.sha256(serialized.encode('utf-8')).hexdigest()


def verify_traceability(product, claimed_hash):
    """
    Compare a hash against the one recomputed from the current record.

    Args:
        product: product record
        claimed_hash: hash to check, e.g. the stored one or one read from a QR code;
            None never verifies

    Returns:
        dict with is_verified, expected_hash, actual_hash and verification_date
    """
    expected = compute_traceability_hash(product)
    return {
        'is_verified': claimed_hash is not None and claimed_hash == expected,
        'expected_hash': expected,
        'actual_hash': claimed_hash,
        'verification_date': datetime.utcnow().isoformat()
    }
