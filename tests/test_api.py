"""
Tests for the HTTP and WebSocket transport.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from checkin.api.app import create_app
from checkin.api.routes import _stop_sender
from checkin.utils.config import CheckinConfig


@pytest.fixture
def app():
    return create_app(CheckinConfig())


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


FLIGHT = {"flightNo": "AI101", "flightDate": "2024-05-01"}


class TestFlightRoutes:
    """Test flight endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.text == "ok"

    def test_create_flight(self, client):
        response = client.post("/api/flights", json={**FLIGHT, "from": "DEL", "to": "BOM", "aircraftType": "A320"})
        body = response.json()
        assert response.status_code == 200
        assert body["ok"] is True
        assert body["flight"]["status"] == "OPEN"
        assert body["flight"]["origin"] == "DEL"
        assert body["flight"]["destination"] == "BOM"
        assert body["flight"]["aircraftType"] == "A320"

    def test_create_flight_requires_key(self, client):
        response = client.post("/api/flights", json={"flightNo": "AI101"})
        assert response.status_code == 400
        assert response.json() == {"error": "flightNo and flightDate required"}

    def test_malformed_body(self, client):
        response = client.post("/api/flights", content="not json", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_list_flights_by_date(self, client):
        client.post("/api/flights", json=FLIGHT)
        client.post("/api/flights", json={"flightNo": "AI202", "flightDate": "2024-05-02"})
        flights = client.get("/api/flights", params={"date": "2024-05-02"}).json()["flights"]
        assert [f["flightNo"] for f in flights] == ["AI202"]
        assert len(client.get("/api/flights").json()["flights"]) == 2

    def test_status_unknown_flight(self, client):
        response = client.post("/api/flights/status", json={**FLIGHT, "status": "PD"})
        assert response.status_code == 404
        assert response.json() == {"error": "flight not found"}

    def test_seat_layout(self, client):
        layout = client.get("/api/seat-layout").json()["seatLayout"]
        assert layout["biz"] == {"start": 1, "end": 4, "letters": "AC DF"}
        assert layout["eco"]["letters"] == "ABC DEF"


class TestPassengerScenario:
    """Test the passenger lifecycle end to end over HTTP."""

    def test_full_lifecycle(self, client):
        assert client.post("/api/flights", json=FLIGHT).json()["flight"]["status"] == "OPEN"

        created = client.post("/api/pax", json={**FLIGHT, "surname": "SHAH", "given": "RAJ", "seat": "12A"}).json()
        pax = created["pax"]
        assert pax["sequenceNo"] == "001"
        assert pax["status"] == "OPEN"
        assert pax["bagCount"] == 0

        pax_id = pax["id"]
        assert client.post(f"/api/pax/{pax_id}/checkin").json()["pax"]["status"] == "CHECKED"

        boarded = client.post(f"/api/pax/{pax_id}/board").json()["pax"]
        assert boarded["status"] == "BOARDED"
        assert boarded["boarded"] is True

        offloaded = client.post(f"/api/pax/{pax_id}/offload").json()["pax"]
        assert offloaded["status"] == "OPEN"
        assert offloaded["boarded"] is False
        assert offloaded["seat"] == ""

    def test_list_passengers(self, client):
        client.post("/api/pax", json={**FLIGHT, "surname": "SHAH", "ppNo": "Z1234567"})
        pax = client.get("/api/pax", params=FLIGHT).json()["pax"]
        assert [(p["surname"], p["passportNo"]) for p in pax] == [("SHAH", "Z1234567")]

    def test_list_passengers_without_params(self, client):
        assert client.get("/api/pax").json() == {"pax": []}

    def test_create_requires_surname(self, client):
        response = client.post("/api/pax", json=FLIGHT)
        assert response.status_code == 400
        assert response.json() == {"error": "flightNo, flightDate, surname required"}

    def test_check_in_blocked_in_pd(self, client):
        pax_id = client.post("/api/pax", json={**FLIGHT, "surname": "SHAH"}).json()["pax"]["id"]
        client.post("/api/flights/status", json={**FLIGHT, "status": "PD"})

        response = client.post(f"/api/pax/{pax_id}/checkin")

        assert response.status_code == 400
        assert response.json() == {"error": "Flight in PD"}
        assert client.get("/api/pax", params=FLIGHT).json()["pax"][0]["status"] == "OPEN"
        assert client.get(f"/api/pax/{pax_id}/canCheckIn").json()["allowed"] is False

    def test_unknown_passenger(self, client):
        response = client.post("/api/pax/999/board")
        assert response.status_code == 404
        assert response.json() == {"error": "not found"}

    def test_bags(self, client):
        pax_id = client.post("/api/pax", json={**FLIGHT, "surname": "SHAH"}).json()["pax"]["id"]
        body = client.post("/api/bags", json={"paxId": pax_id, "count": 2, "totalWeight": 40}).json()
        assert body["pax"]["bagCount"] == 2
        assert client.post("/api/bags", json={"paxId": pax_id, "count": "x"}).json()["pax"]["bagCount"] == 2

    def test_search_and_specials(self, client):
        client.post("/api/pax", json={**FLIGHT, "surname": "SHAH", "comment": "VIP"})
        client.post("/api/pax", json={**FLIGHT, "surname": "DOE", "isInfant": True})

        found = client.post("/api/pax/search", json={**FLIGHT, "q": "sha"}).json()["pax"]
        infants = client.get("/api/specials", params={**FLIGHT, "k": "infants"}).json()["items"]

        assert [p["surname"] for p in found] == ["SHAH"]
        assert [p["surname"] for p in infants] == ["DOE"]


class TestManifestUpload:
    """Test manifest import over HTTP."""

    def test_multipart_upload(self, client):
        response = client.post(
            "/api/pnl",
            data=FLIGHT,
            files={"file": ("pnl.csv", b"SMITH,JOHN,12A,ABC123\nDOE,JANE,14B,XYZ789", "text/csv")},
        )
        assert response.json() == {"ok": True, "imported": 2}
        pax = client.get("/api/pax", params=FLIGHT).json()["pax"]
        assert [p["given"] for p in pax] == ["JOHN", "JANE"]

    def test_json_text(self, client):
        response = client.post("/api/pnl", json={**FLIGHT, "text": "a,b\nc,d\ne"})
        assert response.json() == {"ok": True, "imported": 2}

    def test_undecodable_upload(self, client):
        response = client.post("/api/pnl", data=FLIGHT, files={"file": ("pnl.csv", b"\xff\xfe\xfd", "text/csv")})
        assert response.status_code == 400
        assert response.json() == {"error": "parse failed"}

    def test_missing_file(self, client):
        response = client.post("/api/pnl", data=FLIGHT, files={"other": ("x.txt", b"A,B", "text/plain")})
        assert response.status_code == 400


class TestLogsAndDocuments:
    """Test movement, teletype and document routes."""

    def test_movement(self, client):
        response = client.post("/api/movement", json={**FLIGHT, "off": "10:00", "remark": "pushback"})
        assert response.json()["ok"] is True
        items = client.get("/api/movement", params=FLIGHT).json()["items"]
        assert [m["remark"] for m in items] == ["pushback"]

    def test_tty(self, client):
        client.post("/api/tty", json={**FLIGHT, "kind": "LDM", "text": "LDM AI101"})
        assert client.get("/api/tty", params=FLIGHT).json()["items"][0]["text"] == "LDM AI101"

    def test_boarding_pass_pdf(self, client):
        pax_id = client.post("/api/pax", json={**FLIGHT, "surname": "SHAH"}).json()["pax"]["id"]
        response = client.get(f"/api/pax/{pax_id}/bp.pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF-1.4")

    def test_bcbp(self, client):
        pax_id = client.post("/api/pax", json={**FLIGHT, "surname": "SHAH"}).json()["pax"]["id"]
        response = client.get("/api/bcbp", params={"paxId": pax_id})
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")
        assert client.get("/api/bcbp").status_code == 400
        assert client.get("/api/pax/999/bp.pdf").status_code == 404


class TestRealtime:
    """Test the WebSocket channel."""

    def test_joined_viewer_receives_updates(self, client):
        pax_id = client.post("/api/pax", json={**FLIGHT, "surname": "SHAH"}).json()["pax"]["id"]

        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join", "flightNo": "ai101", "flightDate": "2024-05-01"})
            assert ws.receive_json() == {"event": "joined", "room": "AI101|2024-05-01"}

            client.post(f"/api/pax/{pax_id}/checkin")
            message = ws.receive_json()

        assert message["event"] == "pax:updated"
        assert message["room"] == "AI101|2024-05-01"
        assert message["payload"]["id"] == pax_id
        assert message["payload"]["status"] == "CHECKED"

    def test_join_requires_flight(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join", "flightNo": "AI101"})
            assert ws.receive_json() == {"error": "flightNo and flightDate required"}

    def test_disconnect_cleans_membership(self, app, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join", **FLIGHT})
            ws.receive_json()
        client.get("/health")
        assert app.state.services.hub.members("AI101|2024-05-01") == set()

    def test_leave_by_flight(self, app, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join", **FLIGHT})
            ws.receive_json()
            ws.send_json({"type": "leave", **FLIGHT})
            assert ws.receive_json() == {"event": "left", "room": "AI101|2024-05-01"}
            assert app.state.services.hub.members("AI101|2024-05-01") == set()


class TestSenderShutdown:
    """Test collection of the outbox pump task."""

    @pytest.mark.asyncio
    async def test_failed_sender_is_collected(self):
        """A pump that died on a closed socket is awaited without raising."""
        async def broken_pump():
            raise RuntimeError("Cannot call send once a close message has been sent")

        sender = asyncio.create_task(broken_pump())
        await asyncio.sleep(0)

        await _stop_sender(sender)

        assert sender.done()
        assert isinstance(sender.exception(), RuntimeError)

    @pytest.mark.asyncio
    async def test_running_sender_is_cancelled(self):
        sender = asyncio.create_task(asyncio.sleep(60))

        await _stop_sender(sender)

        assert sender.cancelled()
