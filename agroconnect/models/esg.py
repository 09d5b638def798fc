# ESG Verification Models
from agroconnect.models.user import db, RecordMixin
from datetime import datetime

class ESGVerification(RecordMixin, db.Model):
    __tablename__ = 'esg_verifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    esg_id = db.Column(db.String(40), unique=True)
    verification_status = db.Column(db.String(20), default='pending', nullable=False)  # pending, approved, rejected
    verified_by = db.Column(db.Integer, db.ForeignKey('users.id'))  # ESG expert
    verification_date = db.Column(db.DateTime)
    verification_notes = db.Column(db.Text)
    esg_score = db.Column(db.Float)  # 0-100
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<ESGVerification {self.id} - {self.verification_status}>'


class ESGScoreDetails(RecordMixin, db.Model):
    __tablename__ = 'esg_score_details'

    id = db.Column(db.Integer, primary_key=True)
    esg_verification_id = db.Column(db.Integer, db.ForeignKey('esg_verifications.id'), nullable=False, index=True)
    environment_score = db.Column(db.Float, default=0, nullable=False)
    social_score = db.Column(db.Float, default=0, nullable=False)
    governance_score = db.Column(db.Float, default=0, nullable=False)
    co2_emissions = db.Column(db.Float)  # tonnes CO2e
    water_usage = db.Column(db.Float)  # m3
    waste_management_score = db.Column(db.Float)
    gender_equality_score = db.Column(db.Float)
    safety_score = db.Column(db.Float)
    community_participation_score = db.Column(db.Float)
    data_transparency_score = db.Column(db.Float)
    legal_compliance_score = db.Column(db.Float)
    traceability_score = db.Column(db.Float)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<ESGScoreDetails {self.id} for Verification {self.esg_verification_id}>'
