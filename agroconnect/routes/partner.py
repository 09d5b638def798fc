# Partner Matching Routes
import math
from flask import Blueprint, request, current_app
from flask_login import login_required, current_user

from agroconnect.storage import get_store
from agroconnect.services.matching import (
    build_criteria, calculate_matching_score, certification_names,
    haversine_km, profile_distance_km, rank_suggestions
)
from agroconnect.utils.auth import role_required
from agroconnect.utils.responses import api_success, api_error, server_error
from agroconnect.utils.validation import query_list, to_float, pagination, paginate

partner_bp = Blueprint('partner', __name__)


def criteria_from_request(args, config):
    min_esg_score = to_float(args.get('min_esg_score'))
    max_distance = to_float(args.get('max_distance'))
    return build_criteria(
        product_types=query_list(args, 'product_types'),
        min_esg_score=config['PARTNER_DEFAULT_MIN_ESG_SCORE'] if min_esg_score is None else min_esg_score,
        certifications=query_list(args, 'certifications'),
        quality_standards=query_list(args, 'quality_standards'),
        max_distance=config['PARTNER_DEFAULT_MAX_DISTANCE_KM'] if max_distance is None else max_distance
    )


def build_suggestion(candidate, profile, esg, score, reasons, distance, criteria):
    profile = profile or {}
    return {
        'user_id': candidate['id'],
        'full_name': candidate['full_name'],
        'role': candidate['role'],
        'email': candidate['email'],
        'phone': candidate['phone'],
        'location_address': profile.get('address'),
        'location_lat': profile.get('location_lat'),
        'location_lng': profile.get('location_lng'),
        'esg_score': esg.get('esg_score') if esg else None,
        'esg_id': esg.get('esg_id') if esg else None,
        'certifications': certification_names(profile),
        'matching_score': score,
        'matching_reasons': reasons,
        'distance_km': round(distance, 2) if distance is not None else None,
        'preferred_product_types': criteria['product_types'],
        'description': profile.get('bio')
    }


def ranked(suggestions):
    config = current_app.config
    top = rank_suggestions(suggestions, config['PARTNER_MIN_MATCH_SCORE'], config['PARTNER_MAX_SUGGESTIONS'])
    for suggestion in top:
        # round half up
        suggestion['matching_score'] = math.floor(suggestion['matching_score'] + 0.5)
    return top


@partner_bp.route('/suggestions', methods=['GET'])
@role_required('farmer')
def farmer_suggestions():
    """Verified businesses with an approved ESG record, scored for the current farmer."""
    criteria = criteria_from_request(request.args, current_app.config)
    try:
        store = get_store()
        farmer_profile = store.profiles.find_one(user_id=current_user.id)
        farmer_products = store.products.find(user_id=current_user.id)

        businesses = store.users.find(role='business', is_active=True)
        suggestions = []
        for business in businesses[:current_app.config['PARTNER_CANDIDATE_LIMIT']]:
            if not business['is_verified']:
                continue

            esg = store.esg_verifications.find_one(user_id=business['id'])
            if not esg or esg['verification_status'] != 'approved':
                continue

            profile = store.profiles.find_one(user_id=business['id'])
            score, reasons = calculate_matching_score(criteria, profile, esg, farmer_profile, farmer_products)
            distance = profile_distance_km(farmer_profile, profile)
            suggestions.append(build_suggestion(business, profile, esg, score, reasons, distance, criteria))

        top = ranked(suggestions)
        return api_success({
            'suggestions': top,
            'total': len(top),
            'criteria': criteria
        }, 'Gợi ý đối tác thành công')
    except Exception:
        return server_error('Lỗi server khi lấy gợi ý đối tác')


@partner_bp.route('/business-suggestions', methods=['GET'])
@role_required('business')
def business_suggestions():
    """Verified farmers with at least one product, scored for the current business."""
    criteria = criteria_from_request(request.args, current_app.config)
    try:
        store = get_store()
        business_profile = store.profiles.find_one(user_id=current_user.id)

        farmers = store.users.find(role='farmer', is_active=True)
        suggestions = []
        for farmer in farmers[:current_app.config['PARTNER_CANDIDATE_LIMIT']]:
            if not farmer['is_verified']:
                continue

            products = store.products.find(user_id=farmer['id'])
            if not products:
                continue

            profile = store.profiles.find_one(user_id=farmer['id'])
            esg = store.esg_verifications.find_one(user_id=farmer['id'])
            score, reasons = calculate_matching_score(criteria, profile, esg, business_profile, products)
            distance = profile_distance_km(business_profile, profile)
            suggestions.append(build_suggestion(farmer, profile, esg, score, reasons, distance, criteria))

        top = ranked(suggestions)
        return api_success({
            'suggestions': top,
            'total': len(top),
            'criteria': criteria
        }, 'Gợi ý nông dân thành công')
    except Exception:
        return server_error('Lỗi server khi lấy gợi ý nông dân')


@partner_bp.route('/products', methods=['GET'])
@login_required
def available_products():
    limit, offset = pagination(request.args)
    product_type = (request.args.get('product_type') or '').lower()
    radius = to_float(request.args.get('location_radius'))
    user_lat = to_float(request.args.get('user_lat'))
    user_lng = to_float(request.args.get('user_lng'))

    if (user_lat is None) != (user_lng is None):
        return api_error('Cần cung cấp cả user_lat và user_lng')

    try:
        products = get_store().products.find(status='available')

        if product_type:
            products = [p for p in products if product_type in p['product_type'].lower()]

        has_origin = user_lat is not None
        for product in products:
            located = product['location_lat'] is not None and product['location_lng'] is not None
            product['distance_km'] = (
                round(haversine_km(user_lat, user_lng, product['location_lat'], product['location_lng']), 2)
                if has_origin and located else None
            )

        if has_origin and radius is not None:
            products = [p for p in products if p['distance_km'] is not None and p['distance_km'] <= radius]

        return api_success(paginate(products, limit, offset, 'products'), 'Lấy danh sách sản phẩm thành công')
    except Exception:
        return server_error('Lỗi server khi lấy danh sách sản phẩm')
