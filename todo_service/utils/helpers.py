import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """Generate a new entity ID (random UUID4 string)"""
    return str(uuid.uuid4())


def convert_datetime_to_utc(dt) -> datetime:
    """Convert datetime to UTC timezone-aware datetime"""
    if dt is None:
        return None

    if isinstance(dt, datetime):
        if dt.tzinfo is None:
            # Naive datetime, assume UTC
            return dt.replace(tzinfo=timezone.utc)
        else:
            return dt.astimezone(timezone.utc)

    return dt


def to_iso_string(dt: datetime) -> str:
    """Serialize a datetime as millisecond-precision UTC ISO string, e.g. 2024-01-02T03:04:05.678Z"""
    dt = convert_datetime_to_utc(dt)
    # strftime("%Y") does not zero-pad years before 1000
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}T"
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}.{dt.microsecond // 1000:03d}Z"
    )


def utc_now_iso() -> str:
    """Current time as canonical ISO string"""
    return to_iso_string(datetime.now(timezone.utc))
