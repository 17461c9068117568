"""
Passenger-related Pydantic models for the check-in service.

This module contains the passenger record held in a flight's manifest, its
bag drop history, and the check-in eligibility probe result.
"""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

from .enums import PassengerStatus
from .flight import utc_timestamp


class BagDropModel(BaseModel):
    """Single bag drop recorded against a passenger."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    count: int = Field(..., ge=0, description="Number of bags dropped")
    total_weight: float = Field(default=0.0, ge=0.0, description="Total weight in kg")
    manual_tag: Optional[str] = Field(None, description="Manually issued tag number")
    timestamp: str = Field(default_factory=utc_timestamp)


class PassengerModel(BaseModel):
    """
    Passenger record within a flight manifest.

    A passenger belongs to exactly one flight list. ``sequence_no`` is
    assigned once at creation and never renumbered.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Process-unique passenger id")
    flight_no: str
    flight_date: str
    surname: str
    given: str = ""
    pnr: str = ""
    passport_no: str = ""
    seat: str = ""
    status: PassengerStatus = Field(default=PassengerStatus.OPEN)
    sequence_no: str = Field(..., description="Zero-padded ordinal within the flight")
    bag_count: int = Field(default=0, ge=0)
    boarded: bool = False
    comment: str = ""
    is_infant: bool = False
    bags: List[BagDropModel] = Field(default_factory=list, description="Bag drop history")

    def to_wire(self) -> dict:
        """Full record in its camelCase wire form."""
        return self.model_dump(mode="json", by_alias=True)


class CheckInEligibilityModel(BaseModel):
    """Result of probing whether a passenger may be checked in."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    allowed: bool
    missing: List[str] = Field(default_factory=list, description="Missing documents or data")
    reason: Optional[str] = None
