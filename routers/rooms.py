from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import RoomDetailsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Read-only view of a live room.

    Returns:
    - room_id: Room identifier chosen by the host
    - has_joiner: Whether a joiner has attached to the room
    - is_full: Whether the room can take no further joiner
    - age_seconds: Seconds since the room was hosted
    - idle_seconds: Seconds since the last routed signaling message

    Connection ids are never exposed.
    """
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"Room details request for {room_id} from {client_host}")

    registry = request.app.state.registry
    room = registry.lookup(room_id)
    if room is None:
        logger.debug(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(
        room_id=room.room_id,
        has_joiner=room.joiner is not None,
        is_full=room.is_full,
        age_seconds=registry.seconds_since(room.created_at),
        idle_seconds=registry.seconds_since(room.last_activity),
    )
