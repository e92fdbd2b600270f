from pydantic import BaseModel, ConfigDict
from typing import Any


class InboundFrame(BaseModel):
    event: str
    data: Any = None


class OutboundMessage(BaseModel):
    target: str
    event: str
    data: Any = None

    def frame(self) -> dict:
        """Wire envelope sent to `target`."""
        return {"event": self.event, "data": self.data}


class RoomPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    roomId: str


class OfferPayload(RoomPayload):
    offer: Any = None


class AnswerPayload(RoomPayload):
    answer: Any = None


class IceCandidatePayload(RoomPayload):
    candidate: Any = None


class RoomDetailsResponse(BaseModel):
    room_id: str
    has_joiner: bool
    is_full: bool
    age_seconds: float
    idle_seconds: float
