"""
Service layer for the check-in system.

This module contains the publishing facades over the record store: flight
operations, passenger lifecycle, manifest import and document rendering.
"""

from .flights import FlightOperations
from .lifecycle import PassengerLifecycle, coerce_count
from .manifest_import import ManifestImporter, ManifestParseResult, parse_manifest, decode_manifest
from .documents import DocumentRegistry

__all__ = [
    'FlightOperations',
    'PassengerLifecycle',
    'coerce_count',
    'ManifestImporter',
    'ManifestParseResult',
    'parse_manifest',
    'decode_manifest',
    'DocumentRegistry',
]
