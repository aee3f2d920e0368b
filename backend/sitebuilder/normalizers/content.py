from datetime import date, datetime


def serialize_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def normalize_content_row(row):
    return {key: serialize_value(value) for key, value in row.items()}
