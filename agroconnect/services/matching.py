"""
Partner matching.

Scores a candidate counterpart for a requesting farmer or business with a
fixed-weight, additive heuristic (0-100):

    product type overlap   30
    ESG score              25
    certification overlap  20
    geographic proximity   15
    quality standards      10

Each component is independent; missing data just skips that component.
"""
import math

EARTH_RADIUS_KM = 6371

PRODUCT_TYPE_POINTS = 30
ESG_POINTS = 25
CERTIFICATION_POINTS = 20
DISTANCE_POINTS = 15
QUALITY_STANDARD_POINTS = 10
MAX_SCORE = 100


def haversine_km(lat1, lng1, lat2, lng2):
    """Great-circle distance between two lat/lng pairs in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(d_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def profile_distance_km(profile_a, profile_b):
    """Distance between two profiles, or None if either lacks coordinates."""
    if not profile_a or not profile_b:
        return None
    coords = (profile_a.get('location_lat'), profile_a.get('location_lng'),
              profile_b.get('location_lat'), profile_b.get('location_lng'))
    if any(value is None for value in coords):
        return None
    return haversine_km(*coords)


def certification_names(profile):
    """Certification names from a profile; entries are strings or {"name": ...} objects."""
    names = []
    for cert in (profile or {}).get('certifications') or []:
        name = cert.get('name') if isinstance(cert, dict) else cert
        if name:
            names.append(str(name))
    return names


def _overlaps(a, b):
    a, b = a.lower(), b.lower()
    return a in b or b in a


def _matched(requested, available):
    return [item for item in requested
            if any(_overlaps(item, candidate) for candidate in available)]


def build_criteria(product_types=None, min_esg_score=70, certifications=None,
                   quality_standards=None, max_distance=50):
    return {
        'product_types': list(product_types or []),
        'min_esg_score': min_esg_score,
        'certifications': list(certifications or []),
        'quality_standards': list(quality_standards or []),
        'max_distance': max_distance
    }


def calculate_matching_score(criteria, candidate_profile=None, candidate_esg=None,
                             requester_profile=None, farmer_products=None):
    """
    Score one candidate against the requester's criteria.

    Args:
        criteria: dict from build_criteria()
        candidate_profile: candidate's profile record (location, certifications)
        candidate_esg: candidate's ESG verification record
        requester_profile: requester's profile record (location)
        farmer_products: products of the farmer side of the pair

    Returns:
        tuple: (score capped at 100, list of human readable reasons)
    """
    score = 0.0
    reasons = []
    farmer_products = farmer_products or []

    # 1. Product type overlap
    requested_types = criteria.get('product_types') or []
    if requested_types and farmer_products:
        offered_types = [p['product_type'] for p in farmer_products if p.get('product_type')]
        matched = _matched(requested_types, offered_types)
        if matched:
            score += len(matched) / len(requested_types) * PRODUCT_TYPE_POINTS
            reasons.append(f"Sản phẩm phù hợp: {', '.join(matched)}")

    # 2. ESG score, only for approved verifications above the threshold
    if candidate_esg and candidate_esg.get('verification_status') == 'approved':
        esg_score = candidate_esg.get('esg_score')
        if esg_score is not None and esg_score >= criteria.get('min_esg_score', 70):
            score += min(ESG_POINTS, esg_score / 100 * ESG_POINTS)
            reasons.append(f'ESG Score cao: {esg_score:g}/100')

    # 3. Certification overlap
    requested_certs = criteria.get('certifications') or []
    if requested_certs:
        matched = _matched(requested_certs, certification_names(candidate_profile))
        if matched:
            score += len(matched) / len(requested_certs) * CERTIFICATION_POINTS
            reasons.append(f"Chứng nhận phù hợp: {', '.join(matched)}")

    # 4. Geographic proximity, linear falloff inside max_distance
    distance = profile_distance_km(requester_profile, candidate_profile)
    if distance is not None and distance <= criteria.get('max_distance', 50):
        score += max(0.0, DISTANCE_POINTS - distance / 10)
        reasons.append(f'Khoảng cách gần: {distance:.1f}km')

    # 5. Quality standard overlap
    requested_standards = criteria.get('quality_standards') or []
    if requested_standards:
        offered_standards = [standard for p in farmer_products
                             for standard in (p.get('quality_standards') or [])]
        matched = _matched(requested_standards, offered_standards)
        if matched:
            score += len(matched) / len(requested_standards) * QUALITY_STANDARD_POINTS
            reasons.append(f"Tiêu chuẩn chất lượng: {', '.join(matched)}")

    return min(MAX_SCORE, score), reasons


def rank_suggestions(suggestions, min_score=30, limit=10):
    """
    Keep suggestions scoring above min_score, best first, at most limit.

    Equal scores keep their candidate order (sorted() is stable).
    """
    kept = [s for s in suggestions if s['matching_score'] > min_score]
    kept = sorted(kept, key=lambda s: s['matching_score'], reverse=True)
    return kept[:limit]
