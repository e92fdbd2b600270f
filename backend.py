import time
from typing import Callable, Dict, List, Optional

from events import ROOM_FULL_MESSAGE, ROOM_NOT_FOUND_MESSAGE
from logging_config import get_logger

logger = get_logger(__name__)


class RoomError(Exception):
    """Client-facing room setup failure; `message` is sent back as an `error` event."""

    message = "Room error"

    def __init__(self, room_id: str):
        super().__init__(f"{self.message}: {room_id}")
        self.room_id = room_id


class RoomNotFound(RoomError):
    message = ROOM_NOT_FOUND_MESSAGE


class RoomFull(RoomError):
    message = ROOM_FULL_MESSAGE


class Room:
    def __init__(self, room_id: str, host: str, now: float):
        self.room_id = room_id
        self.host = host
        self.joiner: Optional[str] = None
        self.created_at = now
        self.last_activity = now

    @property
    def is_full(self) -> bool:
        return self.joiner is not None

    def participants(self) -> List[str]:
        """Connection ids currently holding a role, host first."""
        return [conn_id for conn_id in (self.host, self.joiner) if conn_id is not None]

    def peer_of(self, connection_id: str) -> Optional[str]:
        """The other role's connection id, or None if `connection_id` holds no role here."""
        if connection_id == self.host:
            return self.joiner
        if connection_id == self.joiner:
            return self.host
        return None

    def __repr__(self):
        return f"Room(room_id={self.room_id!r}, host={self.host!r}, joiner={self.joiner!r})"


class RoomRegistry:
    """In-memory map of room id -> Room.

    Not thread-safe: every call is expected to come from the one event loop
    that owns the registry, and none of them await.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._rooms: Dict[str, Room] = {}
        self._clock = clock
        logger.debug("Initialized in-memory RoomRegistry")

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms

    def create_room(self, room_id: str, host_id: str) -> Optional[Room]:
        """Insert a fresh room, replacing any room with the same id. Returns the replaced room."""
        previous = self._rooms.get(room_id)
        self._rooms[room_id] = Room(room_id, host_id, self._clock())
        if previous is not None:
            logger.info(f"Room {room_id} re-hosted by {host_id}, replacing {previous}")
        else:
            logger.info(f"Room {room_id} created by host {host_id}")
        return previous

    def join_room(self, room_id: str, joiner_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            logger.debug(f"Join by {joiner_id} failed: room {room_id} not found")
            raise RoomNotFound(room_id)
        if room.is_full:
            logger.debug(f"Join by {joiner_id} failed: room {room_id} is full")
            raise RoomFull(room_id)
        room.joiner = joiner_id
        room.last_activity = self._clock()
        logger.info(f"Joiner {joiner_id} joined room {room_id}")
        return room

    def lookup(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def touch(self, room_id: str):
        room = self._rooms.get(room_id)
        if room is not None:
            room.last_activity = self._clock()

    def remove_participant(self, connection_id: str) -> List[Room]:
        """Delete every room the connection holds a role in and return them as they were."""
        removed = []
        for room_id, room in list(self._rooms.items()):
            if room.host == connection_id or room.joiner == connection_id:
                del self._rooms[room_id]
                removed.append(room)
                logger.info(f"Room {room_id} deleted after {connection_id} disconnected")
        return removed

    def expire_idle(self, max_idle: float) -> List[Room]:
        """Delete and return rooms with no activity for more than `max_idle` seconds."""
        now = self._clock()
        expired = []
        for room_id, room in list(self._rooms.items()):
            if now - room.last_activity > max_idle:
                del self._rooms[room_id]
                expired.append(room)
                logger.info(f"Room {room_id} expired after {now - room.last_activity:.0f}s idle")
        return expired

    def seconds_since(self, timestamp: float) -> float:
        return self._clock() - timestamp
