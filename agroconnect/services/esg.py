# ESG verification workflow
import secrets
import string
import time
from datetime import datetime

BASE36 = string.digits + string.ascii_uppercase

# Roles that get an ESG verification request on registration
ESG_ROLES = ('farmer', 'business', 'esg_expert')


def _base36(number):
    digits = ''
    while number:
        number, remainder = divmod(number, 36)
        digits = BASE36[remainder] + digits
    return digits or '0'


def generate_esg_id():
    """ESG-<base36 ms timestamp>-<6 random base36 chars>, upper case."""
    random_part = ''.join(secrets.choice(BASE36) for _ in range(6))
    return f'ESG-{_base36(int(time.time() * 1000))}-{random_part}'


def create_verification_request(store, user_id, notes=None):
    return store.esg_verifications.create({
        'user_id': user_id,
        'verification_status': 'pending',
        'verification_notes': notes
    })


def approve_verification(store, verification, verified_by, esg_score, notes=None):
    """Approve a pending request and mark its owner as verified."""
    approved = store.esg_verifications.update(verification['id'], {
        'esg_id': generate_esg_id(),
        'verification_status': 'approved',
        'verified_by': verified_by,
        'verification_date': datetime.utcnow(),
        'esg_score': esg_score,
        'verification_notes': notes
    })
    store.users.update(verification['user_id'], {'is_verified': True})
    return approved


def reject_verification(store, verification, verified_by, notes=None):
    return store.esg_verifications.update(verification['id'], {
        'verification_status': 'rejected',
        'verified_by': verified_by,
        'verification_date': datetime.utcnow(),
        'verification_notes': notes
    })
