"""
Flat JSON file storage.

The whole file is read into memory once and rewritten in full after every
mutation. There is no locking, so only a single process may write to it.
Field names and scalar defaults come from the SQLAlchemy models, so records
look the same whichever backend is configured.
"""
import copy
import json
from datetime import datetime
from pathlib import Path

from agroconnect.models import TABLES


class JsonFileDatabase:
    def __init__(self, path, tables):
        self.path = Path(path)
        self.tables = tuple(tables)
        self.data = self.load()

    def load(self):
        data = {}
        if self.path.exists():
            with open(self.path, encoding='utf-8') as fh:
                data = json.load(fh)
        for table in self.tables:
            data.setdefault(table, [])
        return data

    def save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as fh:
            json.dump(self.data, fh, indent=2, ensure_ascii=False)

    def next_id(self, table):
        rows = self.data[table]
        return max(row['id'] for row in rows) + 1 if rows else 1


def _now():
    return datetime.utcnow().isoformat()


class JsonRepository:
    def __init__(self, database, table, model):
        self.database = database
        self.table = table
        self.columns = {column.name: column for column in model.__table__.columns}

    @property
    def rows(self):
        return self.database.data[self.table]

    def _clean(self, data):
        values = {}
        for key, value in data.items():
            if key not in self.columns:
                raise ValueError(f'Unknown field {key!r} for {self.table}')
            if isinstance(value, datetime):
                value = value.isoformat()
            values[key] = value
        return values

    def _blank(self):
        record = {}
        for name, column in self.columns.items():
            default = column.default
            if default is None:
                record[name] = None
            elif default.is_scalar:
                record[name] = default.arg
            else:
                # callable defaults are the utcnow timestamps
                record[name] = _now()
        return record

    def _matching(self, filters):
        return [row for row in self.rows
                if all(row.get(key) == value for key, value in filters.items())]

    def _find_row(self, record_id):
        for row in self.rows:
            if row['id'] == record_id:
                return row
        return None

    def get(self, record_id):
        row = self._find_row(record_id)
        return copy.deepcopy(row) if row else None

    def find(self, **filters):
        return copy.deepcopy(sorted(self._matching(filters), key=lambda row: row['id']))

    def find_one(self, **filters):
        rows = self.find(**filters)
        return rows[0] if rows else None

    def count(self, **filters):
        return len(self._matching(filters))

    def create(self, data):
        record = self._blank()
        record.update(self._clean(data))
        record['id'] = self.database.next_id(self.table)
        self.rows.append(record)
        self.database.save()
        return copy.deepcopy(record)

    def update(self, record_id, data):
        row = self._find_row(record_id)
        if row is None:
            return None
        row.update(self._clean(data))
        if 'updated_at' in self.columns:
            row['updated_at'] = _now()
        self.database.save()
        return copy.deepcopy(row)

    def delete(self, record_id):
        row = self._find_row(record_id)
        if row is None:
            return False
        self.rows.remove(row)
        self.database.save()
        return True

    def delete_where(self, **filters):
        doomed = {row['id'] for row in self._matching(filters)}
        if not doomed:
            return 0
        self.database.data[self.table] = [row for row in self.rows if row['id'] not in doomed]
        self.database.save()
        return len(doomed)


class JsonStore:
    backend = 'json'

    def __init__(self, path):
        self.database = JsonFileDatabase(path, TABLES.keys())
        for name, model in TABLES.items():
            setattr(self, name, JsonRepository(self.database, name, model))

    def rollback(self):
        # every mutation is flushed immediately, so the file is the last good state
        self.database.data = self.database.load()
