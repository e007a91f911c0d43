"""
Server-owned entities as seen by the client.

Every model here is a read-only view of a server row. The client never
commits a balance, position or ownership change locally; it only replaces
these views with fresh server responses.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from shared.constants import (
    BOARD_SIZE, MARKET_SLOTS, MAX_HOTELS_PER_PROPERTY, MAX_HOUSES_PER_PROPERTY,
)
from shared.enums import (
    AuctionStatus, CardEffect, CardType, GameStatus, TradeStatus
)


_SQL_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}\s")


def parse_server_date(value: Any) -> Any:
    """
    Normalise the backend's SQL-style timestamps to ISO 8601.

    "2026-01-04 22:30:58.641961 +00:00" becomes
    "2026-01-04T22:30:58.641961+00:00"; a missing offset is taken as UTC.
    Anything else is left for pydantic to parse.
    """
    if not isinstance(value, str) or not _SQL_TIMESTAMP.match(value):
        return value
    parts = value.split(" ")
    iso = f"{parts[0]}T{parts[1]}"
    iso += parts[2] if len(parts) > 2 and parts[2] else "Z"
    return iso


def to_money(value: Any) -> Any:
    """
    Coerce the backend's BigDecimal encoding to Decimal without rounding.

    Strings and ints convert exactly; floats go through their shortest repr
    so 0.1 stays 0.1. Anything unparseable is left for pydantic to reject.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except InvalidOperation:
            return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


def unwrap_id_list(value: Any) -> Any:
    """Accept either a plain id list or the server's {"0": [...]} wrapper."""
    if value is None:
        return []
    if isinstance(value, dict):
        return value.get("0", value.get(0, []))
    return value


Money = Annotated[Decimal, BeforeValidator(to_money)]
ServerDatetime = Annotated[datetime, BeforeValidator(parse_server_date)]
IdList = Annotated[list[str], BeforeValidator(unwrap_id_list)]


class ServerModel(BaseModel):
    """Base for all server entities."""
    model_config = ConfigDict(extra="ignore", frozen=True)


class User(ServerModel):
    id: str
    username: str
    first_name: str = ""
    last_name: str = ""


class GameSession(ServerModel):
    id: str
    code: str = ""
    host_user_id: Optional[str] = None
    name: str = ""
    status: GameStatus = GameStatus.WAITING
    created_at: Optional[ServerDatetime] = None
    ended_at: Optional[ServerDatetime] = None
    jackpot_balance: Money = 0
    current_turn_user_id: Optional[str] = None
    turn_order: list[str] = Field(default_factory=list)

    @property
    def is_over(self) -> bool:
        return self.status in (GameStatus.FINISHED, GameStatus.CANCELLED)


class Participant(ServerModel):
    id: str
    user_id: str
    game_id: str
    balance: Money = 0
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    position: int = 0

    @field_validator("position", mode="before")
    @classmethod
    def _wrap_position(cls, value: Any) -> Any:
        if isinstance(value, int):
            return value % BOARD_SIZE
        return value

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.username


class Transaction(ServerModel):
    """
    A transfer between two parties.

    A null participant id stands for the Bank. Exactly one side may be the
    Bank; both null, or both the same participant, is not a valid transfer.
    """
    id: str
    game_id: str
    from_participant_id: Optional[str] = None
    to_participant_id: Optional[str] = None
    amount: Money
    description: Optional[str] = None
    created_at: Optional[ServerDatetime] = None

    @property
    def is_bank_payout(self) -> bool:
        return self.from_participant_id is None and self.to_participant_id is not None

    @property
    def is_bank_receipt(self) -> bool:
        return self.from_participant_id is not None and self.to_participant_id is None

    @property
    def involves_bank(self) -> bool:
        return self.from_participant_id is None or self.to_participant_id is None

    def involves(self, participant_id: str) -> bool:
        return participant_id in (self.from_participant_id, self.to_participant_id)


class DiceRoll(ServerModel):
    id: str
    game_id: str
    user_id: str
    dice_count: int
    dice_sides: int
    results: list[int]
    total: int
    created_at: Optional[ServerDatetime] = None

    @property
    def is_double(self) -> bool:
        return len(self.results) > 1 and all(r == self.results[0] for r in self.results)


class DiceHistoryItem(ServerModel):
    roll: DiceRoll
    user_name: str = ""


class RouletteSpin(ServerModel):
    id: str
    game_id: str
    user_id: str
    result_label: str
    result_value: int
    result_type: str
    created_at: Optional[ServerDatetime] = None
    first_name: str = ""
    last_name: str = ""


class SpecialDiceRoll(ServerModel):
    id: str
    game_id: str
    user_id: str
    die_name: str
    die_id: str
    face_label: str
    face_value: Optional[int] = None
    face_action: Optional[str] = None
    created_at: Optional[ServerDatetime] = None
    first_name: str = ""
    last_name: str = ""


class Card(ServerModel):
    id: str
    name: str
    card_type: CardType
    color: CardEffect
    description: str = ""
    cost: Optional[Money] = None


class ParticipantCard(ServerModel):
    id: str
    participant_id: str
    card: Card


class MarketSlot(ServerModel):
    slot_index: int = Field(ge=0, lt=MARKET_SLOTS)
    card: Optional[Card] = None


class Property(ServerModel):
    """Static reference data for a purchasable board space."""
    id: str
    name: str
    group_color: str
    price: Money
    rent_base: Money = 0
    rent_house_1: Optional[Money] = None
    rent_house_2: Optional[Money] = None
    rent_house_3: Optional[Money] = None
    rent_house_4: Optional[Money] = None
    rent_hotel: Optional[Money] = None
    mortgage_value: Money = 0
    unmortgage_cost: Money = 0
    house_cost: Optional[Money] = None
    hotel_cost: Optional[Money] = None
    board_position: Optional[int] = None


class ParticipantProperty(ServerModel):
    """Per-game ownership record of a Property."""
    id: str
    game_id: str
    participant_id: str
    property_id: str
    is_mortgaged: bool = False
    house_count: int = Field(default=0, ge=0, le=MAX_HOUSES_PER_PROPERTY)
    hotel_count: int = Field(default=0, ge=0, le=MAX_HOTELS_PER_PROPERTY)
    property_name: Optional[str] = None
    group_color: Optional[str] = None

    @property
    def has_buildings(self) -> bool:
        return self.house_count > 0 or self.hotel_count > 0


class Auction(ServerModel):
    id: str
    game_id: str
    property_id: str
    current_bid: Money = 0
    highest_bidder_id: Optional[str] = None
    status: AuctionStatus = AuctionStatus.ACTIVE
    created_at: Optional[ServerDatetime] = None
    ends_at: Optional[ServerDatetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == AuctionStatus.ACTIVE


class Trade(ServerModel):
    id: str
    game_id: str
    initiator_id: str
    target_id: str
    offer_cash: Money = 0
    request_cash: Money = 0
    offer_properties: IdList = Field(default_factory=list)
    request_properties: IdList = Field(default_factory=list)
    offer_cards: IdList = Field(default_factory=list)
    request_cards: IdList = Field(default_factory=list)
    status: TradeStatus = TradeStatus.PENDING
    created_at: Optional[ServerDatetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != TradeStatus.PENDING
