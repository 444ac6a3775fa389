from .schedule import (
    DateLike,
    Weekday,
    as_datetime,
    calendar_day,
    decode_schedule,
    describe_schedule,
    encode_schedule,
    normalize_schedule,
)

__all__ = [
    "DateLike",
    "Weekday",
    "as_datetime",
    "calendar_day",
    "decode_schedule",
    "describe_schedule",
    "encode_schedule",
    "normalize_schedule",
]
