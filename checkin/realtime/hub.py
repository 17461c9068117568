"""
Room-scoped subscription hub.

Connections join rooms named by flight key; every mutation of a flight is
published to that flight's room only. Delivery is fire-and-forget: each
connection owns a bounded outbox that the publisher fills with
``put_nowait``, and a slow or vanished consumer loses events rather than
stalling the mutation that produced them.

``publish`` must be called from the event loop thread that consumes the
outboxes.
"""

import asyncio
import itertools
import logging
import threading
import uuid
from typing import Optional, Dict, Any, List, Set, Callable

from ..models.events import EventEnvelopeModel
from ..store.keys import flight_key

logger = logging.getLogger(__name__)

Relay = Callable[[EventEnvelopeModel], None]


class Connection:
    """A realtime client identified by an opaque id."""

    def __init__(self, connection_id: Optional[str] = None, outbox_size: int = 256):
        self.id = connection_id or uuid.uuid4().hex[:12]
        self.outbox: "asyncio.Queue[EventEnvelopeModel]" = asyncio.Queue(maxsize=outbox_size)
        self.delivered = 0
        self.dropped = 0
        self.closed = False

    def deliver(self, envelope: EventEnvelopeModel) -> bool:
        """Enqueue without blocking; returns False if the event was dropped."""
        if self.closed:
            return False
        try:
            self.outbox.put_nowait(envelope)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Outbox full for connection {self.id}, dropped {envelope.event}")
            return False
        self.delivered += 1
        return True

    async def receive(self, timeout: Optional[float] = None) -> EventEnvelopeModel:
        """Next event from the outbox."""
        if timeout is None:
            return await self.outbox.get()
        return await asyncio.wait_for(self.outbox.get(), timeout)

    def drain(self) -> List[EventEnvelopeModel]:
        """Everything currently queued, without waiting."""
        events = []
        while not self.outbox.empty():
            events.append(self.outbox.get_nowait())
        return events

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, queued={self.outbox.qsize()})"


class SubscriptionHub:
    """
    Room membership and typed event fan-out.

    Features:
    - A connection may join any number of rooms; repeated joins are no-ops
    - Publish snapshots room membership and preserves per-room order
    - Membership is removed for all rooms when a connection terminates
    - Relays receive every envelope (e.g. for cross-process fan-out)
    """

    def __init__(self, outbox_size: int = 256):
        self.outbox_size = outbox_size
        self._lock = threading.Lock()
        self._rooms: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = {}
        self._connections: Dict[str, Connection] = {}
        self._relays: List[Relay] = []
        self._sequence = itertools.count(1)

    def connect(self, connection_id: Optional[str] = None) -> Connection:
        """Register a new connection."""
        connection = Connection(connection_id, outbox_size=self.outbox_size)
        with self._lock:
            self._connections[connection.id] = connection
            self._memberships[connection.id] = set()
        logger.debug(f"Connection {connection.id} opened")
        return connection

    def join(self, connection: Connection, flight_no: Optional[str], flight_date: Optional[str]) -> str:
        """
        Add a connection to the room of a flight.

        Returns:
            str: The room's flight key
        """
        key = flight_key(flight_no, flight_date)
        self.join_key(connection, key)
        return key

    def join_key(self, connection: Connection, key: str) -> None:
        with self._lock:
            if connection.id not in self._connections:
                self._connections[connection.id] = connection
            self._rooms.setdefault(key, set()).add(connection.id)
            self._memberships.setdefault(connection.id, set()).add(key)
        logger.debug(f"Connection {connection.id} joined {key}")

    def leave(self, connection: Connection, key: str) -> None:
        """Remove a connection from one room; safe to repeat."""
        with self._lock:
            self._discard_locked(connection.id, key)

    def _discard_locked(self, connection_id: str, key: str) -> None:
        members = self._rooms.get(key)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self._rooms[key]
        rooms = self._memberships.get(connection_id)
        if rooms is not None:
            rooms.discard(key)

    def disconnect(self, connection: Connection) -> None:
        """Remove a terminated connection from every room it joined."""
        connection.closed = True
        with self._lock:
            for key in list(self._memberships.get(connection.id, ())):
                self._discard_locked(connection.id, key)
            self._memberships.pop(connection.id, None)
            self._connections.pop(connection.id, None)
        logger.debug(f"Connection {connection.id} closed")

    def members(self, key: str) -> Set[str]:
        """Ids of the connections currently in a room."""
        with self._lock:
            return set(self._rooms.get(key, ()))

    def rooms_of(self, connection: Connection) -> Set[str]:
        with self._lock:
            return set(self._memberships.get(connection.id, ()))

    def add_relay(self, relay: Relay) -> None:
        """Register a callable that receives every published envelope."""
        self._relays.append(relay)

    def publish(self, key: str, event_name: str, payload: Optional[Dict[str, Any]] = None) -> int:
        """
        Deliver an event to every current member of a room.

        Args:
            key: Flight key naming the room
            event_name: Event name (e.g. ``pax:updated``)
            payload: JSON-serializable event body

        Returns:
            int: Number of members the event was enqueued for
        """
        envelope = EventEnvelopeModel(
            room=key,
            event=str(getattr(event_name, "value", event_name)),
            payload=payload or {},
            sequence=next(self._sequence),
        )

        with self._lock:
            recipients = [
                self._connections[cid]
                for cid in self._rooms.get(key, ())
                if cid in self._connections
            ]

        delivered = sum(1 for connection in recipients if connection.deliver(envelope))

        for relay in self._relays:
            try:
                relay(envelope)
            except Exception as e:
                logger.warning(f"Relay failed for {envelope.event} on {key}: {e}")

        logger.debug(f"Published {envelope.event} to {key} ({delivered}/{len(recipients)} members)")
        return delivered

    def get_statistics(self) -> Dict[str, int]:
        with self._lock:
            return {
                "connections": len(self._connections),
                "rooms": len(self._rooms),
                "relays": len(self._relays),
                "delivered": sum(c.delivered for c in self._connections.values()),
                "dropped": sum(c.dropped for c in self._connections.values()),
            }
