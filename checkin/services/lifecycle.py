"""
Passenger lifecycle transitions.

OPEN -> CHECKED -> BOARDED, with offload resetting to OPEN from any state.
Check-in is blocked while the owning flight is in PD. Boarding carries no
precondition on the prior status: a passenger who was never checked in can
still be boarded.

Each successful transition publishes the entire updated passenger record to
the flight's room as ``pax:updated`` while the flight key is still locked,
so viewers see transitions in the order they were applied.
"""

import logging
import math
from typing import Any, Optional, Callable

from ..errors import InvalidStateError
from ..models.enums import EventName, FlightStatus, PassengerStatus
from ..models.passenger import BagDropModel, CheckInEligibilityModel, PassengerModel
from ..realtime.hub import SubscriptionHub
from ..store.record_store import RecordStore

logger = logging.getLogger(__name__)

# Flight statuses under which check-in is refused
CHECKIN_BLOCKING_STATUSES = {FlightStatus.PD.value}


def coerce_count(value: Any) -> int:
    """Non-negative integer from loose input; absent or invalid is 0."""
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0
    return int(number)


def coerce_weight(value: Any) -> float:
    """Non-negative weight from loose input; absent or invalid is 0.0."""
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


class PassengerLifecycle:
    """
    Status state machine over passengers addressed by id.

    Features:
    - Id-based addressing across all flights
    - Flight-status guard on check-in
    - Whole-record ``pax:updated`` publish per successful mutation
    """

    def __init__(self, store: RecordStore, hub: SubscriptionHub):
        self.store = store
        self.hub = hub

    def _transition(
        self,
        passenger_id: Optional[str],
        action: str,
        apply: Callable[[str, PassengerModel], None]
    ) -> PassengerModel:
        key, passenger = self.store.find_passenger(passenger_id)
        with self.store.lock_for(key):
            apply(key, passenger)
            self.hub.publish(key, EventName.PAX_UPDATED.value, passenger.to_wire())
        logger.info(f"Passenger {passenger.id} on {key}: {action} -> {passenger.status.value}")
        return passenger

    def check_in(self, passenger_id: Optional[str]) -> PassengerModel:
        """
        Mark a passenger CHECKED.

        Raises:
            NotFoundError: If the passenger id is unknown
            InvalidStateError: If the flight is in PD
        """
        def apply(key: str, passenger: PassengerModel) -> None:
            flight = self.store.get_flight(key)
            if flight.status in CHECKIN_BLOCKING_STATUSES:
                logger.info(f"Check-in refused for passenger {passenger.id}: {key} is {flight.status}")
                raise InvalidStateError(f"Flight in {flight.status}")
            passenger.status = PassengerStatus.CHECKED

        return self._transition(passenger_id, "checkin", apply)

    def board(self, passenger_id: Optional[str]) -> PassengerModel:
        """Mark a passenger BOARDED regardless of prior status."""
        def apply(key: str, passenger: PassengerModel) -> None:
            passenger.status = PassengerStatus.BOARDED
            passenger.boarded = True

        return self._transition(passenger_id, "board", apply)

    def offload(self, passenger_id: Optional[str]) -> PassengerModel:
        """Reset a passenger to OPEN, clearing the boarded flag and seat."""
        def apply(key: str, passenger: PassengerModel) -> None:
            passenger.status = PassengerStatus.OPEN
            passenger.boarded = False
            passenger.seat = ""

        return self._transition(passenger_id, "offload", apply)

    def add_bags(
        self,
        passenger_id: Optional[str],
        count: Any = 0,
        total_weight: Any = 0,
        manual_tag: Optional[str] = None
    ) -> PassengerModel:
        """
        Add checked bags to a passenger.

        Args:
            passenger_id: Passenger id
            count: Number of bags; coerced to a non-negative integer
            total_weight: Total weight in kg, recorded in the bag history
            manual_tag: Manually issued tag number, if any
        """
        bags = coerce_count(count)
        weight = coerce_weight(total_weight)

        def apply(key: str, passenger: PassengerModel) -> None:
            passenger.bag_count += bags
            passenger.bags.append(BagDropModel(count=bags, total_weight=weight, manual_tag=manual_tag or None))

        return self._transition(passenger_id, f"bags +{bags}", apply)

    def can_check_in(self, passenger_id: Optional[str]) -> CheckInEligibilityModel:
        """Probe whether check-in would currently be accepted."""
        key, passenger = self.store.find_passenger(passenger_id)
        flight = self.store.get_flight(key)
        if flight.status in CHECKIN_BLOCKING_STATUSES:
            return CheckInEligibilityModel(allowed=False, reason=f"Flight in {flight.status}")
        return CheckInEligibilityModel(allowed=True)
