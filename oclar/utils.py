from datetime import datetime

from flask import current_app


def _field_label(loc):
    return '.'.join(str(part) for part in loc)


MISSING_TYPES = ('missing', 'string_too_short', 'too_short')


def _is_missing(err):
    return err['type'] in MISSING_TYPES or err.get('input') is None


def describe_schema_error(error):
    """Short human-readable summary of a pydantic ValidationError."""
    missing = [_field_label(e['loc']) for e in error.errors() if _is_missing(e)]
    if missing:
        return f"Lipsesc câmpuri obligatorii: {', '.join(missing)}"
    first = error.errors()[0]
    return f"Câmp invalid: {_field_label(first['loc'])} ({first['msg']})"


def schema_error_details(error):
    return [{'field': _field_label(e['loc']), 'message': e['msg']} for e in error.errors()]


def parse_iso_date(date_str):
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str.split('T')[0], '%Y-%m-%d').date()
    except ValueError:
        current_app.logger.warning(f"Could not parse date string {date_str}")
        return None


def parse_id_list(values):
    ids = []
    for value in values or []:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue
    return ids
