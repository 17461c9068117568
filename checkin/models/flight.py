"""
Flight-related Pydantic models for the check-in service.

This module contains the flight record, the ground-movement log entry and
the teletype message log entry kept per flight key.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

from .enums import FlightStatus


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FlightModel(BaseModel):
    """
    Flight record scoped to a flight-date pair.

    Created implicitly on first reference to its key. Descriptive fields are
    upsert-merged on repeated creation; status is only changed explicitly.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    flight_no: str = Field(..., description="Flight number as first supplied")
    flight_date: str = Field(..., description="Flight date (YYYY-MM-DD)")
    origin: Optional[str] = Field(None, description="Departure station")
    destination: Optional[str] = Field(None, description="Arrival station")
    aircraft_type: Optional[str] = Field(None, description="Aircraft type code")
    tail: Optional[str] = Field(None, description="Aircraft registration")
    status: str = Field(default=FlightStatus.OPEN.value, description="Flight status code")


class MovementRecordModel(BaseModel):
    """
    Ground-movement log entry.

    Appended to the per-flight movement log and never mutated afterwards.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    off: Optional[str] = Field(None, description="Off-blocks time")
    atd: Optional[str] = Field(None, description="Actual time of departure")
    ata: Optional[str] = Field(None, description="Actual time of arrival")
    remark: Optional[str] = Field(None, description="Free-text remark")
    timestamp: str = Field(default_factory=utc_timestamp, description="Time the entry was logged")


class TeletypeMessageModel(BaseModel):
    """Teletype message received for a flight."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    kind: str = Field(default="MSG", description="Message type (e.g. 'LDM', 'PSM')")
    text: str = Field(..., description="Raw message text")
    timestamp: str = Field(default_factory=utc_timestamp, description="Time the message was logged")
