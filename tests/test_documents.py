"""
Tests for the document generator registry.
"""

import pytest

from checkin.errors import NotFoundError
from checkin.models import DocumentModel
from checkin.services.documents import DocumentRegistry


class TestDocumentRegistry:
    """Test generator lookup and passenger resolution."""

    def test_placeholders_registered(self, store):
        assert DocumentRegistry(store).kinds() == ["bcbp.png", "bp.pdf"]
        assert DocumentRegistry(store, with_placeholders=False).kinds() == []

    def test_render_passes_passenger(self, store):
        passenger = store.add_passenger("AI101", "2024-05-01", "SHAH")
        registry = DocumentRegistry(store, with_placeholders=False)
        registry.register("bt.zpl", lambda p: DocumentModel(content=f"^XA^FD{p.surname}^XZ".encode(), content_type="application/zpl"))

        document = registry.render("bt.zpl", passenger.id)

        assert document.content == b"^XA^FDSHAH^XZ"
        assert document.content_type == "application/zpl"

    def test_boarding_pass_names_passenger(self, store):
        passenger = store.add_passenger("AI101", "2024-05-01", "O(BRIEN)", given="PAT")
        document = DocumentRegistry(store).render("bp.pdf", passenger.id)
        assert b"O\\(BRIEN\\)/PAT" in document.content

    def test_unknown_kind_or_passenger(self, store):
        registry = DocumentRegistry(store)
        with pytest.raises(NotFoundError):
            registry.render("bp.pdf", "404")
        passenger = store.add_passenger("AI101", "2024-05-01", "SHAH")
        with pytest.raises(NotFoundError):
            registry.render("label.zpl", passenger.id)
