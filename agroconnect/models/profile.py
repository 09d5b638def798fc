# Profile Model
from agroconnect.models.user import db, RecordMixin
from datetime import datetime

class UserProfile(RecordMixin, db.Model):
    __tablename__ = 'user_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    bio = db.Column(db.Text)
    location_lat = db.Column(db.Float)
    location_lng = db.Column(db.Float)
    address = db.Column(db.Text)
    certifications = db.Column(db.JSON)  # list of names or {"name": ...} objects
    activity_history = db.Column(db.JSON)
    social_links = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<UserProfile {self.id} - user {self.user_id}>'
