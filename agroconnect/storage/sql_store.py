# SQLAlchemy-backed storage
from datetime import datetime
from agroconnect.models import db, TABLES


def coerce_values(model, data):
    """Map a plain dict onto the model's columns, parsing ISO timestamps."""
    columns = model.__table__.columns
    values = {}
    for key, value in data.items():
        if key not in columns:
            raise ValueError(f'Unknown field {key!r} for {model.__tablename__}')
        if isinstance(value, str) and isinstance(columns[key].type, db.DateTime):
            value = datetime.fromisoformat(value)
        values[key] = value
    return values


class SqlRepository:
    def __init__(self, model):
        self.model = model

    def _query(self, filters):
        return self.model.query.filter_by(**filters).order_by(self.model.id)

    def get(self, record_id):
        obj = db.session.get(self.model, record_id)
        return obj.to_dict() if obj else None

    def find(self, **filters):
        return [obj.to_dict() for obj in self._query(filters).all()]

    def find_one(self, **filters):
        obj = self._query(filters).first()
        return obj.to_dict() if obj else None

    def count(self, **filters):
        return self.model.query.filter_by(**filters).count()

    def create(self, data):
        obj = self.model(**coerce_values(self.model, data))
        db.session.add(obj)
        db.session.commit()
        return obj.to_dict()

    def update(self, record_id, data):
        obj = db.session.get(self.model, record_id)
        if obj is None:
            return None
        for key, value in coerce_values(self.model, data).items():
            setattr(obj, key, value)
        db.session.commit()
        return obj.to_dict()

    def delete(self, record_id):
        obj = db.session.get(self.model, record_id)
        if obj is None:
            return False
        db.session.delete(obj)
        db.session.commit()
        return True

    def delete_where(self, **filters):
        deleted = self.model.query.filter_by(**filters).delete()
        db.session.commit()
        return deleted


class SqlStore:
    backend = 'sqlite'

    def __init__(self):
        for name, model in TABLES.items():
            setattr(self, name, SqlRepository(model))

    def rollback(self):
        db.session.rollback()
