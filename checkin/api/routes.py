"""
HTTP and WebSocket routes.

Thin translation between the transport and the service layer: parse the
request, call one operation, wrap the result as ``{"ok": true, ...}``.
Errors are turned into ``{"error": ...}`` by the handlers installed in
``checkin.api.app``.
"""

import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import APIRouter, Request, Response, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse

from ..errors import CheckinError, ValidationError
from ..models.seat import SeatLayoutModel
from ..realtime.hub import Connection
from ..store.keys import flight_key
from .schemas import (
    BagDropRequest,
    FlightStatusRequest,
    FlightUpsertRequest,
    ManifestTextRequest,
    MovementRequest,
    PassengerCreateRequest,
    PassengerSearchRequest,
    TeletypeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

SEAT_LAYOUT = SeatLayoutModel.default()


def _services(request: Request):
    return request.app.state.services


def _wire(models) -> list:
    return [m.model_dump(mode="json", by_alias=True) for m in models]


@router.get("/health", response_class=PlainTextResponse)
async def health() -> str:
    return "ok"


# Flights

@router.get("/api/flights")
async def list_flights(request: Request, date: Optional[str] = None):
    flights = _services(request).flights.list_flights(date)
    return {"flights": _wire(flights)}


@router.post("/api/flights")
async def upsert_flight(body: FlightUpsertRequest, request: Request):
    flight = _services(request).flights.upsert_flight(body.flight_no, body.flight_date, **body.detail_fields())
    return {"ok": True, "flight": flight.model_dump(mode="json", by_alias=True)}


@router.post("/api/flights/status")
async def set_flight_status(body: FlightStatusRequest, request: Request):
    flight = _services(request).flights.set_status(body.flight_no, body.flight_date, body.status)
    return {"ok": True, "flight": flight.model_dump(mode="json", by_alias=True)}


@router.get("/api/seat-layout")
async def seat_layout():
    return {"seatLayout": SEAT_LAYOUT.model_dump()}


# Passengers

@router.get("/api/pax")
async def list_passengers(request: Request, flightNo: Optional[str] = None, flightDate: Optional[str] = None):
    if not flightNo or not flightDate:
        return {"pax": []}
    passengers = _services(request).flights.get_passengers(flightNo, flightDate)
    return {"pax": _wire(list(passengers))}


@router.post("/api/pax")
async def create_passenger(body: PassengerCreateRequest, request: Request):
    passenger = _services(request).flights.create_passenger(
        body.flight_no, body.flight_date, body.surname, **body.passenger_fields()
    )
    return {"ok": True, "pax": passenger.to_wire()}


@router.post("/api/pax/search")
async def search_passengers(body: PassengerSearchRequest, request: Request):
    passengers = _services(request).flights.search_passengers(body.flight_no, body.flight_date, body.q)
    return {"pax": _wire(passengers)}


@router.get("/api/pax/{passenger_id}/canCheckIn")
async def can_check_in(passenger_id: str, request: Request):
    eligibility = _services(request).lifecycle.can_check_in(passenger_id)
    return eligibility.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.post("/api/pax/{passenger_id}/checkin")
async def check_in(passenger_id: str, request: Request):
    passenger = _services(request).lifecycle.check_in(passenger_id)
    return {"ok": True, "pax": passenger.to_wire()}


@router.post("/api/pax/{passenger_id}/board")
async def board(passenger_id: str, request: Request):
    passenger = _services(request).lifecycle.board(passenger_id)
    return {"ok": True, "pax": passenger.to_wire()}


@router.post("/api/pax/{passenger_id}/offload")
async def offload(passenger_id: str, request: Request):
    passenger = _services(request).lifecycle.offload(passenger_id)
    return {"ok": True, "pax": passenger.to_wire()}


@router.post("/api/bags")
async def add_bags(body: BagDropRequest, request: Request):
    passenger = _services(request).lifecycle.add_bags(
        None if body.pax_id is None else str(body.pax_id),
        body.count,
        body.total_weight,
        body.manual_tag,
    )
    return {"ok": True, "pax": passenger.to_wire()}


# Manifest import

@router.post("/api/pnl")
async def import_manifest(request: Request):
    """Import a manifest from a multipart ``file`` upload or a JSON ``text`` body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("file")
        if upload is None or isinstance(upload, str):
            raise ValidationError("file required")
        raw = await upload.read()
        flight_no, flight_date = form.get("flightNo"), form.get("flightDate")
    else:
        try:
            body = ManifestTextRequest.model_validate(await request.json())
        except ValueError as e:
            raise ValidationError("invalid request") from e
        if body.text is None:
            raise ValidationError("text required")
        raw, flight_no, flight_date = body.text, body.flight_no, body.flight_date

    imported = _services(request).importer.import_text(flight_no, flight_date, raw)
    return {"ok": True, "imported": imported}


# Specials, TTY and movements

@router.get("/api/specials")
async def specials(request: Request, flightNo: Optional[str] = None, flightDate: Optional[str] = None, k: Optional[str] = None):
    items = _services(request).flights.specials(flightNo, flightDate, k)
    return {"items": _wire(items)}


@router.get("/api/tty")
async def list_tty(request: Request, flightNo: Optional[str] = None, flightDate: Optional[str] = None):
    return {"items": _wire(_services(request).flights.list_tty(flightNo, flightDate))}


@router.post("/api/tty")
async def receive_tty(body: TeletypeRequest, request: Request):
    message = _services(request).flights.receive_tty(body.flight_no, body.flight_date, body.text, kind=body.kind)
    return {"ok": True, "message": message.model_dump(mode="json", by_alias=True)}


@router.get("/api/movement")
async def list_movements(request: Request, flightNo: Optional[str] = None, flightDate: Optional[str] = None):
    return {"items": _wire(_services(request).flights.list_movements(flightNo, flightDate))}


@router.post("/api/movement")
async def record_movement(body: MovementRequest, request: Request):
    record = _services(request).flights.record_movement(
        body.flight_no, body.flight_date, off=body.off, atd=body.atd, ata=body.ata, remark=body.remark
    )
    return {"ok": True, "movement": record.model_dump(mode="json", by_alias=True)}


# Documents

@router.get("/api/pax/{passenger_id}/bp.pdf")
async def boarding_pass(passenger_id: str, request: Request):
    document = _services(request).documents.render("bp.pdf", passenger_id)
    return Response(content=document.content, media_type=document.content_type)


@router.get("/api/bcbp")
async def bcbp(request: Request, paxId: Optional[str] = None):
    if not paxId:
        raise ValidationError("paxId required")
    document = _services(request).documents.render("bcbp.png", paxId)
    return Response(content=document.content, media_type=document.content_type)


# Realtime

async def _pump(websocket: WebSocket, connection: Connection) -> None:
    """Forward a connection's outbox to its socket until cancelled."""
    while True:
        envelope = await connection.receive()
        await websocket.send_json(envelope.to_message())


async def _stop_sender(sender: asyncio.Task) -> None:
    """Cancel the outbox pump and collect its result, including a send failure."""
    sender.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await sender


@router.websocket("/ws")
async def realtime(websocket: WebSocket):
    """
    Realtime channel.

    Clients send ``{"type": "join", "flightNo": ..., "flightDate": ...}``
    (or ``"leave"``) and receive ``{"event", "room", "payload"}`` messages
    for every room they joined.
    """
    hub = websocket.app.state.services.hub
    await websocket.accept()
    connection = hub.connect()
    sender = asyncio.create_task(_pump(websocket, connection))

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"error": "invalid message"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"error": "invalid message"})
                continue
            kind = str(message.get("type", "join")).lower()
            try:
                if kind == "join":
                    room = hub.join(connection, message.get("flightNo"), message.get("flightDate"))
                    await websocket.send_json({"event": "joined", "room": room})
                elif kind == "leave":
                    room = message.get("room")
                    if not room:
                        room = flight_key(message.get("flightNo"), message.get("flightDate"))
                    hub.leave(connection, room)
                    await websocket.send_json({"event": "left", "room": room})
                else:
                    await websocket.send_json({"error": f"unknown message type: {kind}"})
            except CheckinError as e:
                await websocket.send_json(e.to_dict())
    except WebSocketDisconnect:
        logger.debug(f"Realtime client {connection.id} disconnected")
    finally:
        hub.disconnect(connection)
        await _stop_sender(sender)
