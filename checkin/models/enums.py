"""
Enums for the check-in service.

Flight status is an open-ended set of operational codes; only the members
listed here carry behaviour. Passenger status is closed.
"""

from enum import Enum


class FlightStatus(str, Enum):
    """Well-known flight status codes."""
    OPEN = "OPEN"
    PD = "PD"          # Operational hold, blocks check-in
    CLOSED = "CLOSED"


class PassengerStatus(str, Enum):
    """Passenger lifecycle status."""
    OPEN = "OPEN"
    CHECKED = "CHECKED"
    BOARDED = "BOARDED"


class EventName(str, Enum):
    """Realtime event names published to flight rooms."""
    FLIGHTS_CHANGED = "flights:changed"
    PAX_CREATED = "pax:created"
    PAX_UPDATED = "pax:updated"
    MOVEMENT_NEW = "movement:new"


class SpecialsKind(str, Enum):
    """Filters for the specials listing."""
    BAGS = "bags"
    INFANTS = "infants"
    COMMENTS = "comments"
