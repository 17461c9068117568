"""
Flight operations: the publishing facade over the record store.

Flight upserts and status changes, interactive passenger creation, manifest
queries and the movement log. Every mutation publishes to the affected
flight's room.
"""

import logging
from typing import Optional, Any, List

from ..models.enums import EventName, SpecialsKind
from ..models.flight import FlightModel, MovementRecordModel, TeletypeMessageModel
from ..models.passenger import PassengerModel
from ..realtime.hub import SubscriptionHub
from ..store.keys import flight_key
from ..store.record_store import RecordStore

logger = logging.getLogger(__name__)


class FlightOperations:
    """Flight-level mutations and manifest queries."""

    def __init__(self, store: RecordStore, hub: SubscriptionHub):
        self.store = store
        self.hub = hub

    def upsert_flight(self, flight_no: Optional[str], flight_date: Optional[str], **fields: Any) -> FlightModel:
        """Create or merge a flight and announce it."""
        flight = self.store.upsert_flight(flight_no, flight_date, **fields)
        key = flight_key(flight_no, flight_date)
        self.hub.publish(key, EventName.FLIGHTS_CHANGED.value, {
            "flightNo": flight.flight_no,
            "flightDate": flight.flight_date,
        })
        return flight

    def set_status(self, flight_no: Optional[str], flight_date: Optional[str], status: str) -> FlightModel:
        """Overwrite a flight's status and announce it."""
        flight = self.store.set_flight_status(flight_no, flight_date, status)
        key = flight_key(flight_no, flight_date)
        self.hub.publish(key, EventName.FLIGHTS_CHANGED.value, {
            "flightNo": flight.flight_no,
            "flightDate": flight.flight_date,
            "status": flight.status,
        })
        return flight

    def list_flights(self, date_filter: Optional[str] = None) -> List[FlightModel]:
        return self.store.list_flights(date_filter)

    def create_passenger(
        self,
        flight_no: Optional[str],
        flight_date: Optional[str],
        surname: Optional[str],
        **fields: Any
    ) -> PassengerModel:
        """Add one passenger and announce the manifest change."""
        passenger = self.store.add_passenger(flight_no, flight_date, surname, **fields)
        self.hub.publish(flight_key(flight_no, flight_date), EventName.PAX_CREATED.value, {})
        return passenger

    def get_passengers(self, flight_no: Optional[str], flight_date: Optional[str]) -> List[PassengerModel]:
        return self.store.get_passengers(flight_no, flight_date)

    def search_passengers(
        self,
        flight_no: Optional[str],
        flight_date: Optional[str],
        query: Optional[str]
    ) -> List[PassengerModel]:
        """
        Case-insensitive substring search over a flight's manifest.

        Matches surname, given name, seat, sequence number and PNR. An empty
        query matches everyone.
        """
        needle = (query or "").strip().upper()
        passengers = self.store.get_passengers(flight_no, flight_date)
        return [
            p for p in list(passengers)
            if any(needle in (value or "").upper() for value in (p.surname, p.given, p.seat, p.sequence_no, p.pnr))
        ]

    def specials(self, flight_no: Optional[str], flight_date: Optional[str], kind: Optional[str]) -> List[PassengerModel]:
        """
        Passengers needing special handling.

        ``bags`` lists passengers with checked bags, ``infants`` infants,
        ``comments`` passengers with a remark; any other kind lists all.
        """
        passengers = list(self.store.passengers_for_key(flight_key(flight_no, flight_date)))
        kind = (kind or "").strip().lower()

        if kind == SpecialsKind.BAGS.value:
            return [p for p in passengers if p.bag_count > 0]
        if kind == SpecialsKind.INFANTS.value:
            return [p for p in passengers if p.is_infant]
        if kind == SpecialsKind.COMMENTS.value:
            return [p for p in passengers if p.comment]
        return passengers

    def record_movement(self, flight_no: Optional[str], flight_date: Optional[str], **fields: Any) -> MovementRecordModel:
        """Append a ground-movement entry and announce it."""
        key = flight_key(flight_no, flight_date)
        with self.store.lock_for(key):
            record = self.store.append_movement(flight_no, flight_date, **fields)
            self.hub.publish(key, EventName.MOVEMENT_NEW.value, record.model_dump(mode="json", by_alias=True))
        logger.info(f"Movement logged for {key}: off={record.off} atd={record.atd} ata={record.ata}")
        return record

    def list_movements(self, flight_no: Optional[str], flight_date: Optional[str]) -> List[MovementRecordModel]:
        return self.store.list_movements(flight_no, flight_date)

    def receive_tty(self, flight_no: Optional[str], flight_date: Optional[str], text: str, kind: str = "MSG") -> TeletypeMessageModel:
        return self.store.append_tty(flight_no, flight_date, text, kind=kind)

    def list_tty(self, flight_no: Optional[str], flight_date: Optional[str]) -> List[TeletypeMessageModel]:
        return self.store.list_tty(flight_no, flight_date)
