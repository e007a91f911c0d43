"""
Event protocol for the game socket.

Every frame is a JSON object with a "type" tag and a "payload" whose shape
depends on the tag. Known tags parse into a closed set of event variants;
anything else becomes an UnknownEvent so newer servers never break older
clients.
"""

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from shared.enums import EventType, GameStatus
from shared.models import (
    Auction, DiceRoll, Participant, RouletteSpin, SpecialDiceRoll, Trade,
    Transaction,
)


class ProtocolError(Exception):
    """Raised when a frame cannot be turned into an event."""

    def __init__(self, message: str, event_type: Optional[EventType] = None):
        super().__init__(message)
        # Set when the tag was recognised but the payload was not
        self.event_type = event_type


# =============================================================================
# Payloads that are not plain entities
# =============================================================================

class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class GameStatusPayload(_Payload):
    id: str
    status: GameStatus


class MarketPayload(_Payload):
    game_id: str


class TurnPayload(_Payload):
    game_id: str
    current_turn_user_id: str


class PropertyPayload(_Payload):
    game_id: str
    property_id: Optional[str] = None
    participant_id: Optional[str] = None


# =============================================================================
# Event variants
# =============================================================================

class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class TransactionCreated(_Event):
    type: Literal["TransactionCreated"]
    payload: Transaction


class DiceRolled(_Event):
    type: Literal["DiceRolled"]
    payload: DiceRoll


class RouletteSpun(_Event):
    type: Literal["RouletteSpun"]
    payload: RouletteSpin


class SpecialDiceRolled(_Event):
    type: Literal["SpecialDiceRolled"]
    payload: SpecialDiceRoll


class ParticipantUpdated(_Event):
    type: Literal["ParticipantUpdated"]
    payload: Participant


class MarketUpdated(_Event):
    type: Literal["MarketUpdated"]
    payload: MarketPayload


class TurnUpdated(_Event):
    type: Literal["TurnUpdated"]
    payload: TurnPayload


class GameUpdated(_Event):
    type: Literal["GameUpdated"]
    payload: GameStatusPayload


class AuctionUpdated(_Event):
    type: Literal["AuctionUpdated"]
    payload: Auction


class TradeUpdated(_Event):
    type: Literal["TradeUpdated"]
    payload: Trade


class PropertyUpdated(_Event):
    type: Literal["PropertyUpdated"]
    payload: PropertyPayload


class UnknownEvent(_Event):
    """An event whose tag this client does not know about."""
    type: str
    payload: Any = None


KnownEvent = Annotated[
    Union[
        TransactionCreated,
        DiceRolled,
        RouletteSpun,
        SpecialDiceRolled,
        ParticipantUpdated,
        MarketUpdated,
        TurnUpdated,
        GameUpdated,
        AuctionUpdated,
        TradeUpdated,
        PropertyUpdated,
    ],
    Field(discriminator="type"),
]

GameEvent = Union[
    TransactionCreated, DiceRolled, RouletteSpun, SpecialDiceRolled,
    ParticipantUpdated, MarketUpdated, TurnUpdated, GameUpdated,
    AuctionUpdated, TradeUpdated, PropertyUpdated, UnknownEvent,
]

_known_adapter: TypeAdapter = TypeAdapter(KnownEvent)
_KNOWN_TAGS = {event_type.value: event_type for event_type in EventType}


def event_type_of(event: GameEvent) -> Optional[EventType]:
    """Return the EventType of a parsed event, or None if it is unknown."""
    return _KNOWN_TAGS.get(event.type)


def parse_event_dict(raw: Any) -> GameEvent:
    """Turn a decoded frame into an event variant."""
    if not isinstance(raw, dict):
        raise ProtocolError(f"Frame is not an object: {type(raw).__name__}")

    tag = raw.get("type")
    if not isinstance(tag, str):
        raise ProtocolError("Frame has no string 'type' field")

    event_type = _KNOWN_TAGS.get(tag)
    if event_type is None:
        return UnknownEvent(type=tag, payload=raw.get("payload"))

    try:
        return _known_adapter.validate_python(
            {"type": tag, "payload": raw.get("payload")}
        )
    except ValidationError as e:
        raise ProtocolError(
            f"Invalid {tag} payload: {e.error_count()} error(s)",
            event_type=event_type,
        ) from e


def parse_event(text: str | bytes) -> GameEvent:
    """
    Parse a UTF-8 JSON text frame into an event variant.

    Raises:
        ProtocolError: malformed JSON, missing tag, or a payload that does
            not match the schema of its (known) tag.
    """
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProtocolError(f"Frame is not valid JSON: {e}") from e
    return parse_event_dict(raw)
