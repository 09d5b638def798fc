# Domain services: matching, traceability, QR codes, blockchain and ESG workflow
from agroconnect.services.matching import calculate_matching_score, rank_suggestions, haversine_km
from agroconnect.services.traceability import compute_traceability_hash, verify_traceability
from agroconnect.services.qr import build_qr_payload, render_qr_data_url, parse_qr_payload
from agroconnect.services.blockchain import BlockchainClient, get_blockchain_client
from agroconnect.services.esg import generate_esg_id, approve_verification, reject_verification

__all__ = [
    'calculate_matching_score',
    'rank_suggestions',
    'haversine_km',
    'compute_traceability_hash',
    'verify_traceability',
    'build_qr_payload',
    'render_qr_data_url',
    'parse_qr_payload',
    'BlockchainClient',
    'get_blockchain_client',
    'generate_esg_id',
    'approve_verification',
    'reject_verification'
]
