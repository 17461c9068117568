"""
Document and label generator registry.

Boarding passes, BCBP barcodes and bag tags are produced by external
generators. The registry resolves the passenger, hands it to the generator
registered for the document kind and returns the payload untouched.
"""

import binascii
import logging
from typing import Callable, Dict, List, Optional

from ..errors import NotFoundError
from ..models.document import DocumentModel
from ..models.passenger import PassengerModel
from ..store.record_store import RecordStore

logger = logging.getLogger(__name__)

Generator = Callable[[PassengerModel], DocumentModel]

# 1x1 transparent PNG
_PLACEHOLDER_PNG = binascii.unhexlify(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000a49444154789c6360000002000100ffff03000006000557bf0000000049454e44ae426082"
)


def placeholder_boarding_pass(passenger: PassengerModel) -> DocumentModel:
    """Single-page PDF naming the passenger."""
    text = f"Boarding Pass {passenger.surname}/{passenger.given} {passenger.flight_no} SEQ {passenger.sequence_no}"
    text = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    stream = f"BT /F1 12 Tf 20 100 Td ({text}) Tj ET"
    pdf = (
        "%PDF-1.4\n"
        "1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
        "2 0 obj<</Type/Pages/Count 1/Kids[3 0 R]>>endobj\n"
        "3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 400 200]/Contents 4 0 R>>endobj\n"
        f"4 0 obj<</Length {len(stream)}>>stream\n{stream}\nendstream\nendobj\n"
        "trailer<</Root 1 0 R/Size 5>>\n%%EOF"
    )
    return DocumentModel(content=pdf.encode("latin-1", errors="replace"), content_type="application/pdf")


def placeholder_bcbp(passenger: PassengerModel) -> DocumentModel:
    """Placeholder barcode image."""
    return DocumentModel(content=_PLACEHOLDER_PNG, content_type="image/png")


class DocumentRegistry:
    """Generators indexed by document kind, resolved by passenger id."""

    def __init__(self, store: RecordStore, with_placeholders: bool = True):
        self.store = store
        self._generators: Dict[str, Generator] = {}
        if with_placeholders:
            self.register("bp.pdf", placeholder_boarding_pass)
            self.register("bcbp.png", placeholder_bcbp)

    def register(self, kind: str, generator: Generator) -> None:
        self._generators[kind] = generator

    def kinds(self) -> List[str]:
        return sorted(self._generators)

    def render(self, kind: str, passenger_id: Optional[str]) -> DocumentModel:
        """
        Produce a document for a passenger.

        Raises:
            NotFoundError: If the kind has no generator or the passenger is unknown
        """
        generator = self._generators.get(kind)
        if generator is None:
            raise NotFoundError(f"no generator for {kind}")
        _, passenger = self.store.find_passenger(passenger_id)
        document = generator(passenger)
        logger.debug(f"Rendered {kind} for passenger {passenger.id} ({len(document.content)} bytes)")
        return document
