from datetime import datetime, timezone


def to_iso(value) -> str:
    # Supabase returns ISO strings or datetimes, the store keeps epoch milliseconds
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
    return str(value)
