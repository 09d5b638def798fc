"""
Polygon Amoy mirror for product traceability records.

The client is inert unless BLOCKCHAIN_ENABLED is set: no Web3 provider is
built, is_available() is False and every write returns an error result
instead of touching the network. Results are plain dicts:

    {"ok": True, "tx_hash": "0x..."}
    {"ok": False, "error": "..."}
"""
from flask import current_app
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from agroconnect.utils.validation import parse_date

EXTENSION_KEY = 'agroconnect_blockchain'


def _param(name, type_, **extra):
    return {'name': name, 'type': type_, **extra}


def _function(name, inputs, outputs=(), mutability='nonpayable'):
    return {
        'type': 'function',
        'name': name,
        'inputs': list(inputs),
        'outputs': list(outputs),
        'stateMutability': mutability
    }


VERIFICATION_TUPLE = _param('', 'tuple', components=[
    _param('productId', 'uint256'),
    _param('blockchainHash', 'string'),
    _param('isVerified', 'bool'),
    _param('verifiedAt', 'uint256'),
    _param('verifiedBy', 'address'),
])

CONTRACT_ABI = [
    _function('addProduct', [
        _param('_id', 'uint256'),
        _param('_name', 'string'),
        _param('_productType', 'string'),
        _param('_quantity', 'uint256'),
        _param('_unit', 'string'),
        _param('_harvestDate', 'uint256'),
        _param('_location', 'string'),
        _param('_farmerName', 'string'),
        _param('_farmerEmail', 'string'),
        _param('_qualityStandards', 'string[]'),
        _param('_certifications', 'string[]'),
        _param('_description', 'string'),
        _param('_images', 'string[]'),
    ], [_param('', 'uint256')]),
    _function('verifyProduct', [_param('_productId', 'uint256'), _param('_blockchainHash', 'string')],
              [_param('', 'uint256')]),
    _function('getVerification', [_param('_productId', 'uint256')], [VERIFICATION_TUPLE], 'view'),
    _function('isProductVerified', [_param('_productId', 'uint256')], [_param('', 'bool')], 'view'),
    _function('getProductCount', [], [_param('', 'uint256')], 'view'),
    _function('getVerificationCount', [], [_param('', 'uint256')], 'view'),
]


def format_product_for_chain(product, farmer=None):
    """Arguments for addProduct, in contract order."""
    harvest = parse_date(product.get('harvest_date'))
    farmer = farmer or {}
    return (
        product['id'],
        product['product_name'],
        product['product_type'],
        int(product['quantity']),
        product['unit'],
        int(harvest.timestamp()) if harvest else 0,
        product['location_address'],
        farmer.get('full_name') or 'Unknown',
        farmer.get('email') or '',
        product.get('quality_standards') or [],
        product.get('certifications') or [],
        product.get('description') or '',
        product.get('images') or [],
    )


class BlockchainClient:
    def __init__(self, config):
        self.enabled = config['BLOCKCHAIN_ENABLED']
        self.chain_id = config['BLOCKCHAIN_CHAIN_ID']
        self.gas_limit = config['BLOCKCHAIN_GAS_LIMIT']
        self.contract_address = config['BLOCKCHAIN_CONTRACT_ADDRESS']
        self.explorer_url = config['BLOCKCHAIN_EXPLORER_URL']
        self.web3 = None
        self.contract = None
        self.account = None

        if not self.enabled:
            return

        self.web3 = Web3(Web3.HTTPProvider(config['BLOCKCHAIN_RPC_URL'], request_kwargs={'timeout': 30}))
        self.web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        self.contract = self.web3.eth.contract(
            address=Web3.to_checksum_address(self.contract_address), abi=CONTRACT_ABI
        )
        if config['BLOCKCHAIN_PRIVATE_KEY']:
            self.account = self.web3.eth.account.from_key(config['BLOCKCHAIN_PRIVATE_KEY'])
        else:
            current_app.logger.warning('Private key not provided; blockchain client is read-only')

    def is_available(self):
        if not self.enabled or self.web3 is None:
            return False
        try:
            return self.web3.is_connected()
        except Exception as e:
            current_app.logger.warning('Blockchain not available: %s', e)
            return False

    def _transact(self, fn):
        if self.account is None:
            return {'ok': False, 'error': 'Blockchain not initialized'}
        try:
            txn = fn.build_transaction({
                'from': self.account.address,
                'nonce': self.web3.eth.get_transaction_count(self.account.address, 'pending'),
                'chainId': self.chain_id,
                'gas': self.gas_limit,
            })
            signed = self.account.sign_transaction(txn)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=180)
            if receipt.status != 1:
                return {'ok': False, 'error': 'Blockchain transaction failed (receipt.status != 1)'}
            return {'ok': True, 'tx_hash': self.web3.to_hex(tx_hash)}
        except Exception as e:
            current_app.logger.warning('Blockchain transaction error: %s', e)
            return {'ok': False, 'error': f'Blockchain error: {e}'}

    def add_product(self, product, farmer=None):
        if not self.enabled:
            return {'ok': False, 'error': 'Blockchain disabled'}
        return self._transact(self.contract.functions.addProduct(*format_product_for_chain(product, farmer)))

    def verify_product(self, product_id, blockchain_hash):
        if not self.enabled:
            return {'ok': False, 'error': 'Blockchain disabled'}
        return self._transact(self.contract.functions.verifyProduct(product_id, blockchain_hash))

    def get_verification(self, product_id):
        if not self.enabled:
            return None
        try:
            product_id_, blockchain_hash, is_verified, verified_at, verified_by = \
                self.contract.functions.getVerification(product_id).call()
        except Exception as e:
            current_app.logger.warning('Error reading verification from blockchain: %s', e)
            return None
        return {
            'product_id': product_id_,
            'blockchain_hash': blockchain_hash,
            'is_verified': is_verified,
            'verified_at': verified_at,
            'verified_by': verified_by
        }

    def get_stats(self):
        if not self.enabled:
            return None
        try:
            return {
                'product_count': self.contract.functions.getProductCount().call(),
                'verification_count': self.contract.functions.getVerificationCount().call(),
                'network': 'Polygon Amoy',
                'chain_id': self.chain_id,
                'contract_address': self.contract_address,
                'explorer_url': self.explorer_url
            }
        except Exception as e:
            current_app.logger.warning('Error reading blockchain stats: %s', e)
            return None


def get_blockchain_client():
    """Client for the current app, built on first use."""
    client = current_app.extensions.get(EXTENSION_KEY)
    if client is None:
        client = BlockchainClient(current_app.config)
        current_app.extensions[EXTENSION_KEY] = client
    return client
