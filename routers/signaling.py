"""Signaling event handlers.

Every handler takes ``(registry, sender_id, payload)`` and returns the list of
``OutboundMessage`` the transport should deliver. Handlers never do I/O, so
they run to completion inside one event-loop step and can be tested without
a socket.
"""
from typing import Any, Callable, Dict, List

from pydantic import ValidationError

from backend import RoomError, RoomRegistry
from events import (
    ANSWER,
    DISCONNECT,
    ERROR,
    HOST,
    HOST_READY,
    ICE_CANDIDATE,
    JOIN,
    JOIN_SUCCESS,
    JOINER_CONNECTED,
    OFFER,
    PEER_DISCONNECTED,
)
from logging_config import get_logger
from schemas.rooms import AnswerPayload, IceCandidatePayload, OfferPayload, OutboundMessage

logger = get_logger(__name__)

Handler = Callable[[RoomRegistry, str, Any], List[OutboundMessage]]


def handle_host(registry: RoomRegistry, sender_id: str, room_id: Any) -> List[OutboundMessage]:
    if not isinstance(room_id, str):
        logger.debug(f"Ignoring host from {sender_id}: room id {room_id!r} is not a string")
        return []

    replaced = registry.create_room(room_id, sender_id)
    outbound = [OutboundMessage(target=sender_id, event=HOST_READY)]
    if replaced is not None:
        # previous occupants lost the room without disconnecting; tell them
        for conn_id in replaced.participants():
            if conn_id != sender_id:
                outbound.append(OutboundMessage(target=conn_id, event=PEER_DISCONNECTED))
    return outbound


def handle_join(registry: RoomRegistry, sender_id: str, room_id: Any) -> List[OutboundMessage]:
    if not isinstance(room_id, str):
        logger.debug(f"Ignoring join from {sender_id}: room id {room_id!r} is not a string")
        return []

    try:
        room = registry.join_room(room_id, sender_id)
    except RoomError as e:
        logger.info(f"Join rejected for {sender_id} on room {room_id}: {e.message}")
        return [OutboundMessage(target=sender_id, event=ERROR, data=e.message)]

    return [
        OutboundMessage(target=room.host, event=JOINER_CONNECTED),
        OutboundMessage(target=sender_id, event=JOIN_SUCCESS),
    ]


def handle_offer(registry: RoomRegistry, sender_id: str, payload: Any) -> List[OutboundMessage]:
    try:
        offer = OfferPayload.model_validate(payload)
    except ValidationError:
        logger.debug(f"Ignoring malformed offer from {sender_id}")
        return []

    room = registry.lookup(offer.roomId)
    if room is None or room.joiner is None:
        logger.debug(f"Offer from {sender_id} dropped: room {offer.roomId} has no joiner")
        return []

    registry.touch(offer.roomId)
    return [OutboundMessage(target=room.joiner, event=OFFER, data=offer.offer)]


def handle_answer(registry: RoomRegistry, sender_id: str, payload: Any) -> List[OutboundMessage]:
    try:
        answer = AnswerPayload.model_validate(payload)
    except ValidationError:
        logger.debug(f"Ignoring malformed answer from {sender_id}")
        return []

    room = registry.lookup(answer.roomId)
    if room is None:
        logger.debug(f"Answer from {sender_id} dropped: room {answer.roomId} not found")
        return []

    registry.touch(answer.roomId)
    return [OutboundMessage(target=room.host, event=ANSWER, data=answer.answer)]


def handle_ice_candidate(registry: RoomRegistry, sender_id: str, payload: Any) -> List[OutboundMessage]:
    try:
        ice = IceCandidatePayload.model_validate(payload)
    except ValidationError:
        logger.debug(f"Ignoring malformed ice-candidate from {sender_id}")
        return []

    room = registry.lookup(ice.roomId)
    if room is None:
        return []

    peer = room.peer_of(sender_id)
    if peer is None:
        logger.debug(f"ICE candidate from {sender_id} dropped: no peer in room {ice.roomId}")
        return []

    registry.touch(ice.roomId)
    return [OutboundMessage(target=peer, event=ICE_CANDIDATE, data=ice.candidate)]


def handle_disconnect(registry: RoomRegistry, sender_id: str, payload: Any = None) -> List[OutboundMessage]:
    outbound = []
    for room in registry.remove_participant(sender_id):
        # the sender is included; its socket is already gone so the send is a no-op
        for conn_id in room.participants():
            outbound.append(OutboundMessage(target=conn_id, event=PEER_DISCONNECTED))
    return outbound


def expire_idle_rooms(registry: RoomRegistry, max_idle: float) -> List[OutboundMessage]:
    outbound = []
    for room in registry.expire_idle(max_idle):
        for conn_id in room.participants():
            outbound.append(OutboundMessage(target=conn_id, event=PEER_DISCONNECTED))
    return outbound


HANDLERS: Dict[str, Handler] = {
    HOST: handle_host,
    JOIN: handle_join,
    OFFER: handle_offer,
    ANSWER: handle_answer,
    ICE_CANDIDATE: handle_ice_candidate,
    DISCONNECT: handle_disconnect,
}


def dispatch(registry: RoomRegistry, sender_id: str, event: str, payload: Any = None) -> List[OutboundMessage]:
    handler = HANDLERS.get(event)
    if handler is None:
        logger.debug(f"Ignoring unknown event {event!r} from {sender_id}")
        return []
    return handler(registry, sender_id, payload)
