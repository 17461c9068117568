"""
Tests for the Valkey cross-process event relay.
"""

import json

import pytest
from valkey.exceptions import ConnectionError, ResponseError

from checkin.realtime.hub import SubscriptionHub
from checkin.realtime.valkey_relay import ValkeyEventRelay


class MockValkeyClient:
    """Mock Valkey client recording PUBLISH calls."""

    def __init__(self, fail: bool = False, errors=None):
        self.published = []
        self.fail = fail
        self.errors = list(errors or [])
        self.closed = False

    def publish(self, channel, message):
        if self.fail:
            raise ConnectionError("connection refused")
        if self.errors:
            raise self.errors.pop(0)
        self.published.append((channel, message))
        return 1

    def close(self):
        self.closed = True


class TestValkeyEventRelay:
    """Test republishing of hub envelopes."""

    def setup_method(self):
        self.client = MockValkeyClient()
        self.relay = ValkeyEventRelay(self.client, channel_prefix="checkin:events", queue_size=2)
        self.hub = SubscriptionHub()
        self.hub.add_relay(self.relay)

    def test_channel_per_room(self):
        assert self.relay.channel_for("AI101|2024-05-01") == "checkin:events:AI101|2024-05-01"

    @pytest.mark.asyncio
    async def test_flush_publishes_json(self):
        self.hub.publish("AI101|2024-05-01", "pax:created", {"imported": 2})

        assert await self.relay.flush() == 1

        channel, message = self.client.published[0]
        decoded = json.loads(message)
        assert channel == "checkin:events:AI101|2024-05-01"
        assert decoded["event"] == "pax:created"
        assert decoded["payload"] == {"imported": 2}
        assert decoded["sequence"] == 1

    def test_full_queue_drops(self):
        for n in range(3):
            self.hub.publish("AI101|2024-05-01", "pax:updated", {"n": n})
        assert self.relay.dropped == 1
        assert self.relay.queue.qsize() == 2

    @pytest.mark.asyncio
    async def test_connection_error_drops_event(self):
        relay = ValkeyEventRelay(MockValkeyClient(fail=True))
        self.hub.add_relay(relay)
        self.hub.publish("AI101|2024-05-01", "pax:created", {})

        assert await relay.flush() == 0
        assert relay.dropped == 1

    @pytest.mark.asyncio
    async def test_background_loop(self):
        self.relay.start()
        self.hub.publish("AI101|2024-05-01", "movement:new", {"off": "10:00"})

        await self.relay.queue.join()
        await self.relay.stop()

        assert self.relay.published == 1
        assert self.client.closed is True


class TestRelayFromConfig:
    """Test building the relay from service config."""

    def setup_method(self):
        self.hub = SubscriptionHub()

    def test_from_config(self):
        from checkin.utils.config import CheckinConfig

        relay = ValkeyEventRelay.from_config(CheckinConfig(valkey_channel_prefix="dcs"))
        assert relay.channel_for("AI101|2024-05-01") == "dcs:AI101|2024-05-01"
        relay.client.close()

    @pytest.mark.asyncio
    async def test_loop_survives_server_error(self):
        """A rejected PUBLISH drops that event and the loop keeps running."""
        client = MockValkeyClient(errors=[ResponseError("READONLY You can't write against a read only replica.")])
        relay = ValkeyEventRelay(client)
        self.hub.add_relay(relay)
        task = relay.start()

        self.hub.publish("AI101|2024-05-01", "pax:created", {})
        await relay.queue.join()
        self.hub.publish("AI101|2024-05-01", "pax:updated", {"n": 2})
        await relay.queue.join()

        assert not task.done()
        assert relay.dropped == 1
        assert relay.published == 1
        assert json.loads(client.published[0][1])["event"] == "pax:updated"
        await relay.stop()
