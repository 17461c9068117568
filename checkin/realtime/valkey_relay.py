"""
Cross-process event relay over Valkey Pub/Sub.

When several service processes serve the same flights, each one republishes
its room events on a Valkey channel per flight key so that viewers attached
to another process can be fanned out there. Publishing happens on a
background task fed by a bounded queue; the hub's publish path only
enqueues.
"""

import asyncio
import json
import logging
from typing import Optional, Any, Dict

import valkey
from valkey.exceptions import ValkeyError

from ..models.events import EventEnvelopeModel

logger = logging.getLogger(__name__)


class ValkeyEventRelay:
    """
    Republishes hub envelopes with Valkey PUBLISH.

    Features:
    - Channel per flight room (``<prefix>:<flight key>``)
    - Bounded queue between the hub and the publisher task
    - Connection and timeout errors are logged and the event dropped
    """

    def __init__(
        self,
        client: Any,
        channel_prefix: str = "checkin:events",
        queue_size: int = 1024
    ):
        """
        Initialize the relay.

        Args:
            client: Valkey client (anything with ``publish(channel, message)``)
            channel_prefix: Prefix for per-room channel names
            queue_size: Maximum number of envelopes waiting to be published
        """
        self.client = client
        self.channel_prefix = channel_prefix
        self.queue: "asyncio.Queue[EventEnvelopeModel]" = asyncio.Queue(maxsize=queue_size)
        self.published = 0
        self.dropped = 0
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config: Any) -> "ValkeyEventRelay":
        """Build a relay with a pooled Valkey client from service config."""
        client = valkey.Valkey(
            host=config.valkey_host,
            port=config.valkey_port,
            db=config.valkey_database,
            password=config.valkey_password,
            socket_timeout=config.valkey_socket_timeout,
            decode_responses=True,
        )
        logger.info(f"Valkey relay configured for {config.valkey_host}:{config.valkey_port}")
        return cls(client, channel_prefix=config.valkey_channel_prefix)

    def channel_for(self, room: str) -> str:
        return f"{self.channel_prefix}:{room}"

    def __call__(self, envelope: EventEnvelopeModel) -> None:
        """Hub relay hook: enqueue without blocking."""
        try:
            self.queue.put_nowait(envelope)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Valkey relay queue full, dropped {envelope.event} for {envelope.room}")

    def encode(self, envelope: EventEnvelopeModel) -> str:
        message: Dict[str, Any] = envelope.to_message()
        message["sequence"] = envelope.sequence
        message["publishedAt"] = envelope.published_at
        return json.dumps(message)

    def publish_now(self, envelope: EventEnvelopeModel) -> bool:
        """Publish one envelope synchronously; False if Valkey rejected it."""
        try:
            self.client.publish(self.channel_for(envelope.room), self.encode(envelope))
        except (ValkeyError, OSError) as e:
            self.dropped += 1
            logger.warning(f"Valkey publish failed for {envelope.room}: {e}")
            return False
        self.published += 1
        return True

    async def flush(self) -> int:
        """Publish everything currently queued; returns the number sent."""
        sent = 0
        while not self.queue.empty():
            envelope = self.queue.get_nowait()
            if await asyncio.to_thread(self.publish_now, envelope):
                sent += 1
            self.queue.task_done()
        return sent

    async def run(self) -> None:
        """Publisher loop; runs until cancelled."""
        logger.info("Valkey relay started")
        try:
            while True:
                envelope = await self.queue.get()
                await asyncio.to_thread(self.publish_now, envelope)
                self.queue.task_done()
        except asyncio.CancelledError:
            logger.info(f"Valkey relay stopped ({self.published} published, {self.dropped} dropped)")
            raise

    def start(self) -> asyncio.Task:
        """Start the publisher loop on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the publisher loop and close the client."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        close = getattr(self.client, "close", None)
        if close is not None:
            close()
