"""
Flight key codec.

A flight key is the sole identity of a flight record, its passenger list,
its movement log and its realtime room. Keys are built from the upper-cased
flight number and the flight date so that ``ai101`` and ``AI101`` on the
same date always resolve to the same flight.
"""

from typing import Optional, Tuple

from ..errors import ValidationError

KEY_SEPARATOR = "|"


def normalize_flight_no(flight_no: Optional[str]) -> str:
    """Trim and upper-case a flight number."""
    return str(flight_no or "").strip().upper()


def normalize_flight_date(flight_date: Optional[str]) -> str:
    """Trim a flight date; the date is otherwise kept as supplied."""
    return str(flight_date or "").strip()


def flight_key(flight_no: Optional[str], flight_date: Optional[str]) -> str:
    """
    Build the canonical key for a flight-date pair.

    Args:
        flight_no: Flight number, any case
        flight_date: Flight date (YYYY-MM-DD)

    Returns:
        str: Key of the form ``"AI101|2024-05-01"``

    Raises:
        ValidationError: If either part is missing or contains the separator
    """
    number = normalize_flight_no(flight_no)
    date = normalize_flight_date(flight_date)
    if not number or not date:
        raise ValidationError("flightNo and flightDate required")
    if KEY_SEPARATOR in number or KEY_SEPARATOR in date:
        raise ValidationError(f"flightNo and flightDate must not contain '{KEY_SEPARATOR}'")
    return f"{number}{KEY_SEPARATOR}{date}"


def split_key(key: str) -> Tuple[str, str]:
    """Split a flight key back into ``(flight_no, flight_date)``."""
    number, _, date = key.partition(KEY_SEPARATOR)
    return number, date


def key_date(key: str) -> str:
    """Date component of a flight key."""
    return split_key(key)[1]
