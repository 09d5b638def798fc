# Farming Diary Models
from agroconnect.models.user import db, RecordMixin
from datetime import datetime

class Season(RecordMixin, db.Model):
    __tablename__ = 'seasons'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    season_name = db.Column(db.String(200), nullable=False)
    crop_type = db.Column(db.String(100), nullable=False)
    planting_date = db.Column(db.String(40), nullable=False)
    expected_harvest_date = db.Column(db.String(40), nullable=False)
    area_size = db.Column(db.Float, nullable=False)  # in hectares
    location_lat = db.Column(db.Float)
    location_lng = db.Column(db.Float)
    location_address = db.Column(db.String(300))
    fertilizers = db.Column(db.JSON)
    pesticides = db.Column(db.JSON)
    notes = db.Column(db.Text)
    status = db.Column(db.String(20), default='planning', nullable=False)  # planning, planting, growing, harvesting, completed
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Season {self.id} - {self.season_name}>'


class Image(RecordMixin, db.Model):
    __tablename__ = 'images'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    season_id = db.Column(db.Integer, db.ForeignKey('seasons.id'))
    image_url = db.Column(db.String(500), nullable=False)
    image_type = db.Column(db.String(20), nullable=False)  # crop, field, certificate, diary, other
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    tags = db.Column(db.JSON)
    location_lat = db.Column(db.Float)
    location_lng = db.Column(db.Float)
    taken_date = db.Column(db.String(40), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Image {self.id} - {self.title}>'
