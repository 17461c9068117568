"""
Realtime layer: room-scoped subscription hub and cross-process relay.
"""

from .hub import Connection, SubscriptionHub
from .valkey_relay import ValkeyEventRelay

__all__ = [
    "Connection",
    "SubscriptionHub",
    "ValkeyEventRelay",
]
