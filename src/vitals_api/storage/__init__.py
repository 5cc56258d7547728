"""Storage layer for the Web Vitals API"""

from .day_log import (
    DayLoad,
    DayLogInterface,
    InMemoryDayLog,
    JsonFileDayLog,
    decode_day,
    decode_records,
    encode_day,
    encode_records,
)

__all__ = [
    "DayLoad",
    "DayLogInterface",
    "InMemoryDayLog",
    "JsonFileDayLog",
    "decode_day",
    "decode_records",
    "encode_day",
    "encode_records",
]
