"""
Check-in service Pydantic models package.

This package contains all Pydantic v2 models used throughout the check-in
service for validation, serialization (camelCase on the wire) and typing.
"""

# Enums
from .enums import (
    FlightStatus,
    PassengerStatus,
    EventName,
    SpecialsKind,
)

# Flight models
from .flight import (
    FlightModel,
    MovementRecordModel,
    TeletypeMessageModel,
    utc_timestamp,
)

# Passenger models
from .passenger import (
    BagDropModel,
    PassengerModel,
    CheckInEligibilityModel,
)

# Layout, event and document models
from .seat import CabinLayoutModel, SeatLayoutModel
from .events import EventEnvelopeModel
from .document import DocumentModel

__all__ = [
    # Enums
    "FlightStatus",
    "PassengerStatus",
    "EventName",
    "SpecialsKind",

    # Flight models
    "FlightModel",
    "MovementRecordModel",
    "TeletypeMessageModel",
    "utc_timestamp",

    # Passenger models
    "BagDropModel",
    "PassengerModel",
    "CheckInEligibilityModel",

    # Other models
    "CabinLayoutModel",
    "SeatLayoutModel",
    "EventEnvelopeModel",
    "DocumentModel",
]
