"""
Request bodies accepted by the HTTP transport.

Required fields are optional at this layer so that missing values surface
as the service's own validation errors rather than framework errors.
Legacy field names (``from``, ``to``, ``ppNo``) are accepted as aliases.
"""

from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Base for request bodies: camelCase input, unknown fields ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class FlightRefRequest(RequestModel):
    flight_no: Optional[str] = None
    flight_date: Optional[str] = None


class FlightUpsertRequest(FlightRefRequest):
    origin: Optional[str] = Field(None, validation_alias=AliasChoices("origin", "from"))
    destination: Optional[str] = Field(None, validation_alias=AliasChoices("destination", "to"))
    aircraft_type: Optional[str] = Field(None, validation_alias=AliasChoices("aircraftType", "aircraft_type"))
    tail: Optional[str] = None

    def detail_fields(self) -> dict:
        return {
            "origin": self.origin,
            "destination": self.destination,
            "aircraft_type": self.aircraft_type,
            "tail": self.tail,
        }


class FlightStatusRequest(FlightRefRequest):
    status: Optional[str] = None


class PassengerCreateRequest(FlightRefRequest):
    surname: Optional[str] = None
    given: Optional[str] = None
    pnr: Optional[str] = None
    passport_no: Optional[str] = Field(None, validation_alias=AliasChoices("passportNo", "ppNo", "passport_no"))
    seat: Optional[str] = None
    comment: Optional[str] = None
    is_infant: bool = Field(False, validation_alias=AliasChoices("isInfant", "is_infant"))

    def passenger_fields(self) -> dict:
        return {
            "given": self.given,
            "pnr": self.pnr,
            "passport_no": self.passport_no,
            "seat": self.seat,
            "comment": self.comment,
            "is_infant": self.is_infant,
        }


class PassengerSearchRequest(FlightRefRequest):
    q: Optional[str] = None


class BagDropRequest(RequestModel):
    pax_id: Any = Field(None, validation_alias=AliasChoices("paxId", "pax_id"))
    count: Any = 0
    total_weight: Any = 0
    manual_tag: Optional[str] = None


class MovementRequest(FlightRefRequest):
    off: Optional[str] = None
    atd: Optional[str] = None
    ata: Optional[str] = None
    remark: Optional[str] = None


class TeletypeRequest(FlightRefRequest):
    kind: str = "MSG"
    text: Optional[str] = None


class ManifestTextRequest(FlightRefRequest):
    text: Optional[str] = None
