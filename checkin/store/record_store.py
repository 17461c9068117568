"""
In-memory record store for flights, passenger manifests and logs.

This module implements the per-flight state store:
- Composite-keyed flight records with create-on-demand ("ensure") semantics
- Ordered passenger lists with stable, zero-padded sequence numbers
- Append-only movement and teletype logs
- Per-key locking around every read-modify-write sequence

The store is an explicit object: construct one per process and pass it to
every consumer. Nothing here publishes events; publishing belongs to the
service layer.
"""

import itertools
import logging
import threading
from typing import Optional, Dict, Any, List, Tuple, Iterable, ContextManager

from ..errors import NotFoundError, ValidationError
from ..models.enums import FlightStatus, PassengerStatus
from ..models.flight import FlightModel, MovementRecordModel, TeletypeMessageModel
from ..models.passenger import PassengerModel
from .keys import flight_key, key_date
from .locks import KeyLockRegistry

logger = logging.getLogger(__name__)

# Flight fields merged by upsert; absent or empty values keep the prior value
FLIGHT_DETAIL_FIELDS = ("origin", "destination", "aircraft_type", "tail")


class RecordStore:
    """
    Per-flight state store.

    Features:
    - Flight records and passenger lists keyed by normalized flight key
    - Idempotent ensure and upsert-merge creation
    - Process-unique monotonic passenger ids with an id -> key index
    - Sequence numbers assigned as list length + 1 under the key lock
    """

    def __init__(self, sequence_width: int = 3):
        """
        Initialize an empty store.

        Args:
            sequence_width: Zero-padding width of passenger sequence numbers
        """
        self.sequence_width = sequence_width
        self.locks = KeyLockRegistry()

        self._flights: Dict[str, FlightModel] = {}
        self._passengers: Dict[str, List[PassengerModel]] = {}
        self._movements: Dict[str, List[MovementRecordModel]] = {}
        self._tty: Dict[str, List[TeletypeMessageModel]] = {}
        self._passenger_index: Dict[str, str] = {}

        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    def lock_for(self, key: str) -> ContextManager[None]:
        """Atomicity unit for read-modify-write sequences on ``key``."""
        return self.locks.lock_context(key)

    def _next_id(self) -> str:
        with self._id_lock:
            return str(next(self._ids))

    # Flights

    def ensure_flight(self, flight_no: Optional[str], flight_date: Optional[str]) -> str:
        """
        Create a flight with status OPEN and an empty manifest if absent.

        Args:
            flight_no: Flight number
            flight_date: Flight date

        Returns:
            str: Flight key
        """
        key = flight_key(flight_no, flight_date)
        with self.lock_for(key):
            self._ensure_locked(key, flight_no, flight_date)
        return key

    def _ensure_locked(self, key: str, flight_no: str, flight_date: str) -> FlightModel:
        flight = self._flights.get(key)
        if flight is None:
            flight = FlightModel(
                flight_no=str(flight_no).strip(),
                flight_date=str(flight_date).strip(),
                status=FlightStatus.OPEN.value,
            )
            self._flights[key] = flight
            logger.info(f"Created flight {key}")
        self._passengers.setdefault(key, [])
        return flight

    def upsert_flight(
        self,
        flight_no: Optional[str],
        flight_date: Optional[str],
        **fields: Any
    ) -> FlightModel:
        """
        Create a flight or merge descriptive fields into an existing one.

        A provided, non-empty field overwrites; an absent field preserves
        the prior value. Status is never touched here.

        Args:
            flight_no: Flight number
            flight_date: Flight date
            **fields: origin, destination, aircraft_type, tail

        Returns:
            FlightModel: The resulting full flight record
        """
        unknown = set(fields) - set(FLIGHT_DETAIL_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown flight fields: {', '.join(sorted(unknown))}")

        key = flight_key(flight_no, flight_date)
        with self.lock_for(key):
            flight = self._ensure_locked(key, flight_no, flight_date)
            flight.flight_no = str(flight_no).strip()
            flight.flight_date = str(flight_date).strip()
            for name in FLIGHT_DETAIL_FIELDS:
                value = fields.get(name)
                if value:
                    setattr(flight, name, value)
            return flight

    def set_flight_status(self, flight_no: Optional[str], flight_date: Optional[str], status: str) -> FlightModel:
        """
        Overwrite a flight's status without transition validation.

        Raises:
            NotFoundError: If the flight is unknown
            ValidationError: If status is empty
        """
        key = flight_key(flight_no, flight_date)
        if not status or not str(status).strip():
            raise ValidationError("status required")
        with self.lock_for(key):
            flight = self._flights.get(key)
            if flight is None:
                raise NotFoundError("flight not found")
            flight.status = str(status).strip().upper()
            logger.info(f"Flight {key} status -> {flight.status}")
            return flight

    def get_flight(self, key: str) -> FlightModel:
        """Flight record for ``key``."""
        flight = self._flights.get(key)
        if flight is None:
            raise NotFoundError("flight not found")
        return flight

    def has_flight(self, key: str) -> bool:
        return key in self._flights

    def list_flights(self, date_filter: Optional[str] = None) -> List[FlightModel]:
        """
        All flights, or only those whose key date equals ``date_filter``.

        Order follows insertion; callers must not depend on it.
        """
        date_filter = (date_filter or "").strip()
        return [
            flight for key, flight in list(self._flights.items())
            if not date_filter or key_date(key) == date_filter
        ]

    # Passengers

    def get_passengers(self, flight_no: Optional[str], flight_date: Optional[str]) -> List[PassengerModel]:
        """Live ordered passenger list, ensuring the flight first."""
        key = self.ensure_flight(flight_no, flight_date)
        return self._passengers[key]

    def passengers_for_key(self, key: str) -> List[PassengerModel]:
        """Live passenger list for an existing key (empty if unseen)."""
        return self._passengers.get(key, [])

    def _next_sequence_no(self, key: str) -> str:
        return str(len(self._passengers[key]) + 1).zfill(self.sequence_width)

    def _append_locked(self, key: str, flight_no: str, flight_date: str, row: Dict[str, Any]) -> PassengerModel:
        passenger = PassengerModel(
            id=self._next_id(),
            flight_no=str(flight_no).strip(),
            flight_date=str(flight_date).strip(),
            surname=row["surname"],
            given=row.get("given") or "",
            pnr=row.get("pnr") or "",
            passport_no=row.get("passport_no") or "",
            seat=row.get("seat") or "",
            comment=row.get("comment") or "",
            is_infant=bool(row.get("is_infant", False)),
            status=PassengerStatus.OPEN,
            sequence_no=self._next_sequence_no(key),
            bag_count=0,
        )
        self._passengers[key].append(passenger)
        self._passenger_index[passenger.id] = key
        return passenger

    def add_passenger(
        self,
        flight_no: Optional[str],
        flight_date: Optional[str],
        surname: Optional[str],
        **fields: Any
    ) -> PassengerModel:
        """
        Append a single passenger to a flight's manifest.

        Args:
            flight_no: Flight number
            flight_date: Flight date
            surname: Passenger surname (required)
            **fields: given, pnr, passport_no, seat, comment, is_infant

        Returns:
            PassengerModel: The created passenger

        Raises:
            ValidationError: If flight number, date or surname is missing
        """
        if not flight_no or not flight_date or not surname:
            raise ValidationError("flightNo, flightDate, surname required")

        key = flight_key(flight_no, flight_date)
        with self.lock_for(key):
            self._ensure_locked(key, flight_no, flight_date)
            passenger = self._append_locked(key, flight_no, flight_date, dict(fields, surname=surname))
        logger.info(f"Added passenger {passenger.id} ({passenger.sequence_no}) to {key}")
        return passenger

    def append_passengers(
        self,
        flight_no: Optional[str],
        flight_date: Optional[str],
        rows: Iterable[Dict[str, Any]]
    ) -> List[PassengerModel]:
        """
        Append a batch of passengers under a single hold of the key lock.

        Args:
            flight_no: Flight number
            flight_date: Flight date
            rows: Passenger field dicts, each with at least ``surname``

        Returns:
            List[PassengerModel]: Created passengers in insertion order
        """
        rows = list(rows)
        key = flight_key(flight_no, flight_date)
        with self.lock_for(key):
            self._ensure_locked(key, flight_no, flight_date)
            created = [self._append_locked(key, flight_no, flight_date, row) for row in rows]
        logger.info(f"Appended {len(created)} passengers to {key}")
        return created

    def find_passenger(self, passenger_id: Optional[str]) -> Tuple[str, PassengerModel]:
        """
        Locate a passenger by id across all flights.

        Returns:
            Tuple[str, PassengerModel]: Owning flight key and the live record

        Raises:
            NotFoundError: If no passenger has this id
        """
        key = self._passenger_index.get(str(passenger_id or ""))
        if key is not None:
            for passenger in self._passengers[key]:
                if passenger.id == str(passenger_id):
                    return key, passenger
        raise NotFoundError("not found")

    # Logs

    def append_movement(self, flight_no: Optional[str], flight_date: Optional[str], **fields: Any) -> MovementRecordModel:
        """Append an entry to the flight's movement log."""
        key = flight_key(flight_no, flight_date)
        record = MovementRecordModel(
            off=fields.get("off"),
            atd=fields.get("atd"),
            ata=fields.get("ata"),
            remark=fields.get("remark"),
        )
        with self.lock_for(key):
            self._movements.setdefault(key, []).append(record)
        return record

    def list_movements(self, flight_no: Optional[str], flight_date: Optional[str]) -> List[MovementRecordModel]:
        key = flight_key(flight_no, flight_date)
        return list(self._movements.get(key, []))

    def append_tty(self, flight_no: Optional[str], flight_date: Optional[str], text: str, kind: str = "MSG") -> TeletypeMessageModel:
        """Append a teletype message to the flight's message log."""
        if not text:
            raise ValidationError("text required")
        key = flight_key(flight_no, flight_date)
        message = TeletypeMessageModel(kind=kind, text=text)
        with self.lock_for(key):
            self._tty.setdefault(key, []).append(message)
        return message

    def list_tty(self, flight_no: Optional[str], flight_date: Optional[str]) -> List[TeletypeMessageModel]:
        key = flight_key(flight_no, flight_date)
        return list(self._tty.get(key, []))

    def get_statistics(self) -> Dict[str, int]:
        """Store-wide record counts."""
        return {
            "flights": len(self._flights),
            "passengers": len(self._passenger_index),
            "movements": sum(len(v) for v in self._movements.values()),
            "tty_messages": sum(len(v) for v in self._tty.values()),
        }
