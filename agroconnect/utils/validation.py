# Request Validation Helpers
from datetime import datetime, timezone


def parse_date(value):
    """
    Parse a client supplied date or ISO timestamp.

    Accepts 'YYYY-MM-DD' as well as full ISO-8601 strings with a trailing 'Z'.
    Aware values are normalised to naive UTC so they compare with naive ones.

    Returns:
        datetime or None when the value is missing or unparseable
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_float(value):
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int(value):
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def string_list(value):
    """Normalise list input: JSON arrays, repeated query args or comma separated text."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(',') if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def query_list(args, name):
    values = []
    for raw in args.getlist(name):
        values.extend(string_list(raw))
    return values


def pagination(args, default_limit=20):
    limit = to_int(args.get('limit'))
    offset = to_int(args.get('offset'))
    limit = default_limit if limit is None or limit < 0 else limit
    offset = 0 if offset is None or offset < 0 else offset
    return limit, offset


def paginate(items, limit, offset, key):
    return {
        key: items[offset:offset + limit],
        'total': len(items),
        'limit': limit,
        'offset': offset
    }


def pick(data, fields):
    """Keep only whitelisted keys that the client actually sent."""
    return {field: data[field] for field in fields if field in data}


def blank_fields(values, fields):
    """Fields that are not non-empty strings in values."""
    return [field for field in fields
            if not isinstance(values.get(field), str) or not values[field].strip()]
