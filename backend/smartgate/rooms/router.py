"""Room reservation REST API router.

Endpoints:
    GET  /api/register - Generate and reserve a room ID from a display name
    POST /api/reserve  - Reserve (or re-reserve) a caller-chosen room ID

These are the only call sites allowed to create rooms.
"""
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from smartgate.config import get_config

from .naming import make_room_id, slugify_name
from .schemas import RegisterRoomResponse, ReserveRoomRequest, ReserveRoomResponse
from .store import RoomStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["rooms"])


def get_store(request: Request) -> RoomStore:
    return request.app.state.room_store  # type: ignore[attr-defined]


@router.get("/register", response_model=RegisterRoomResponse)
async def register_room(
    name: Optional[str] = Query(None, description="Display name to derive the room ID from"),
    store: RoomStore = Depends(get_store),
) -> RegisterRoomResponse:
    """Generate a short, reusable room ID (e.g. ``leslie-214``) and reserve it.

    Example:
        GET /api/register?name=Leslie
    """
    base = slugify_name(name)
    room_id = make_room_id(
        base,
        exists=lambda candidate: candidate in store,
        attempts=get_config().rooms.id_attempts,
    )
    store.create_or_get(room_id)
    logger.info(f"Room created & reserved: {room_id}")
    return RegisterRoomResponse(roomId=room_id, name=base)


@router.post("/reserve", response_model=ReserveRoomResponse)
async def reserve_room(
    body: Optional[ReserveRoomRequest] = None,
    store: RoomStore = Depends(get_store),
) -> Union[ReserveRoomResponse, JSONResponse]:
    """Reserve an existing room ID. Idempotent.

    Returns:
        ``{"ok": true, "roomId": ...}``, or 400 when roomId is missing.
    """
    room_id = ((body.roomId if body else None) or "").strip()
    if not room_id:
        return JSONResponse({"error": "roomId required"}, status_code=400)

    store.create_or_get(room_id)
    logger.info(f"Room reserved: {room_id}")
    return ReserveRoomResponse(roomId=room_id)
