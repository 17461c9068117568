"""
Passenger manifest import from delimited text.

Each non-empty line is ``SURNAME,GIVEN[,SEAT[,PNR]]``. Lines with fewer
than two fields are skipped without being reported; only undecodable input
aborts the import, before anything is written.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Union

from ..errors import ImportDecodeError
from ..models.enums import EventName
from ..realtime.hub import SubscriptionHub
from ..store.record_store import RecordStore

logger = logging.getLogger(__name__)

LINE_SPLIT = re.compile(r"\r?\n")
MIN_FIELDS = 2


@dataclass
class ManifestParseResult:
    """Rows parsed from a manifest and the number of lines skipped."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    skipped: int = 0


def decode_manifest(raw: Union[bytes, bytearray, str]) -> str:
    """
    Decode manifest input as UTF-8 text.

    Raises:
        ImportDecodeError: If the bytes are not valid UTF-8
    """
    if isinstance(raw, str):
        return raw
    try:
        return bytes(raw).decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportDecodeError("parse failed") from e


def parse_manifest(text: str) -> ManifestParseResult:
    """Split manifest text into passenger rows."""
    result = ManifestParseResult()
    for line in LINE_SPLIT.split(text):
        if not line:
            continue
        parts = [part.strip() for part in line.split(",")]
        if len(parts) < MIN_FIELDS:
            result.skipped += 1
            continue
        result.rows.append({
            "surname": parts[0].upper(),
            "given": parts[1].upper(),
            "seat": parts[2] if len(parts) > 2 else "",
            "pnr": parts[3] if len(parts) > 3 else "",
        })
    return result


class ManifestImporter:
    """Bulk passenger producer into the record store."""

    def __init__(self, store: RecordStore, hub: SubscriptionHub):
        self.store = store
        self.hub = hub

    def import_text(
        self,
        flight_no: Optional[str],
        flight_date: Optional[str],
        raw: Union[bytes, bytearray, str]
    ) -> int:
        """
        Import a manifest into a flight, ensuring the flight first.

        Args:
            flight_no: Flight number
            flight_date: Flight date
            raw: Manifest bytes (UTF-8) or text

        Returns:
            int: Number of passengers imported

        Raises:
            ImportDecodeError: If the input cannot be decoded; nothing is imported
        """
        key = self.store.ensure_flight(flight_no, flight_date)
        parsed = parse_manifest(decode_manifest(raw))

        with self.store.lock_for(key):
            created = self.store.append_passengers(flight_no, flight_date, parsed.rows)
            self.hub.publish(key, EventName.PAX_CREATED.value, {"imported": len(created)})

        logger.info(f"Imported {len(created)} passengers into {key} ({parsed.skipped} lines skipped)")
        return len(created)
