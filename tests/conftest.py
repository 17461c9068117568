"""
Shared fixtures for the check-in test suite.
"""

import pytest

from checkin.realtime.hub import SubscriptionHub
from checkin.services.flights import FlightOperations
from checkin.services.lifecycle import PassengerLifecycle
from checkin.services.manifest_import import ManifestImporter
from checkin.store.record_store import RecordStore


@pytest.fixture
def store():
    return RecordStore()


@pytest.fixture
def hub():
    return SubscriptionHub()


@pytest.fixture
def flights(store, hub):
    return FlightOperations(store, hub)


@pytest.fixture
def lifecycle(store, hub):
    return PassengerLifecycle(store, hub)


@pytest.fixture
def importer(store, hub):
    return ManifestImporter(store, hub)
