"""
Per-flight state store: key codec, lock registry and record store.
"""

from .keys import flight_key, split_key, key_date, normalize_flight_no
from .locks import KeyLockRegistry
from .record_store import RecordStore

__all__ = [
    "flight_key",
    "split_key",
    "key_date",
    "normalize_flight_no",
    "KeyLockRegistry",
    "RecordStore",
]
