# Marketplace Models
from agroconnect.models.user import db, RecordMixin
from datetime import datetime

class Product(RecordMixin, db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    season_id = db.Column(db.Integer, db.ForeignKey('seasons.id'))
    product_name = db.Column(db.String(200), nullable=False)
    product_type = db.Column(db.String(100), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(20), nullable=False)  # kg, ton, ...
    price_per_unit = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(3), nullable=False)  # VND, USD, EUR
    harvest_date = db.Column(db.String(40), nullable=False)
    expiry_date = db.Column(db.String(40))
    location_address = db.Column(db.String(300), nullable=False)
    location_lat = db.Column(db.Float)
    location_lng = db.Column(db.Float)
    quality_standards = db.Column(db.JSON)
    certifications = db.Column(db.JSON)
    description = db.Column(db.Text)
    images = db.Column(db.JSON)
    status = db.Column(db.String(20), default='available', nullable=False)  # available, reserved, sold, expired
    blockchain_hash = db.Column(db.String(64))  # traceability fingerprint
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Product {self.id} - {self.product_name}>'


class Order(RecordMixin, db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(40), unique=True, nullable=False)
    farmer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    business_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(20), nullable=False)
    price_per_unit = db.Column(db.Float, nullable=False)
    total_amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(3), nullable=False)
    status = db.Column(db.String(20), default='pending', nullable=False)
    delivery_address = db.Column(db.String(300), nullable=False)
    delivery_lat = db.Column(db.Float)
    delivery_lng = db.Column(db.Float)
    delivery_date = db.Column(db.String(40))
    notes = db.Column(db.Text)
    contract_url = db.Column(db.String(500))
    qr_code = db.Column(db.Text)
    blockchain_hash = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Order {self.order_number}>'
