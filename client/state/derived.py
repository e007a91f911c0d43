"""
Values derived from server read views.

All functions are pure: the same inputs always give the same result, and
nothing here is ever written back to the server.
"""

from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from shared.constants import (
    BOARD_SIZE, BOARD_SPACES, INITIAL_BANK_BALANCE, MAX_HOUSES_PER_PROPERTY,
)
from shared.models import ParticipantProperty, Property, Transaction


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(tx: Transaction) -> datetime:
    if tx.created_at is None:
        return _EPOCH
    if tx.created_at.tzinfo is None:
        return tx.created_at.replace(tzinfo=timezone.utc)
    return tx.created_at


def bank_balance(
    transactions: Iterable[Transaction],
    initial: int = INITIAL_BANK_BALANCE,
) -> Decimal:
    """
    Fold the transaction log into the Bank's balance.

    The Bank pays out when a transaction has no sender and receives when it
    has no recipient. Rows with neither or both sides set are not bank
    transfers and do not move the balance.
    """
    balance = Decimal(initial)
    for tx in transactions:
        if tx.is_bank_payout:
            balance -= tx.amount
        elif tx.is_bank_receipt:
            balance += tx.amount
    return balance


def bank_logs(transactions: Iterable[Transaction], limit: int = 3) -> list[Transaction]:
    """Most recent transactions involving the Bank, newest first."""
    involving = [tx for tx in transactions if tx.involves_bank]
    involving.sort(key=_created_key, reverse=True)
    return involving[:limit]


def participant_flows(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Net amount each participant received minus paid across the log."""
    flows: dict[str, Decimal] = defaultdict(Decimal)
    for tx in transactions:
        if tx.from_participant_id is not None:
            flows[tx.from_participant_id] -= tx.amount
        if tx.to_participant_id is not None:
            flows[tx.to_participant_id] += tx.amount
    return dict(flows)


def is_double(results: Sequence[int]) -> bool:
    """True when more than one die was rolled and all show the same face."""
    return len(results) > 1 and all(r == results[0] for r in results)


def space_name(position: int) -> str:
    """Board-space label for a position, wrapping around the board."""
    index = position % BOARD_SIZE
    for space_index, name, _ in BOARD_SPACES:
        if space_index == index:
            return name
    return f"Square {position}"


# =============================================================================
# Building hints
#
# The server decides whether a build is legal. These only mirror the rules
# so the UI can grey out actions that would certainly be refused.
# =============================================================================

def owns_monopoly(
    participant_id: str,
    group_color: str,
    properties: Iterable[Property],
    ownership: Iterable[ParticipantProperty],
) -> bool:
    """True when the participant owns every property of a color group."""
    group_ids = {p.id for p in properties if p.group_color == group_color}
    if not group_ids:
        return False
    owned = {
        o.property_id for o in ownership
        if o.participant_id == participant_id
    }
    return group_ids <= owned


def can_build(
    holding: ParticipantProperty,
    properties: Sequence[Property],
    ownership: Sequence[ParticipantProperty],
) -> bool:
    """Whether building one more house or a hotel on a holding looks allowed."""
    if holding.is_mortgaged or next_building(holding) is None:
        return False

    prop = next((p for p in properties if p.id == holding.property_id), None)
    if prop is None or prop.house_cost is None:
        return False

    if not owns_monopoly(holding.participant_id, prop.group_color, properties, ownership):
        return False

    group_ids = {p.id for p in properties if p.group_color == prop.group_color}
    group_holdings = [o for o in ownership if o.property_id in group_ids]
    return not any(o.is_mortgaged for o in group_holdings)


def next_building(holding: ParticipantProperty) -> Optional[str]:
    """Next building type for a holding, or None once a hotel stands."""
    if holding.hotel_count > 0:
        return None
    if holding.house_count < MAX_HOUSES_PER_PROPERTY:
        return "house"
    return "hotel"


# =============================================================================
# Formatting
# =============================================================================

def format_currency(amount: int | Decimal) -> str:
    """Currency string, e.g. -$1,250 or $20,380.01; cents only when present."""
    value = Decimal(amount)
    sign = "-" if value < 0 else ""
    if value == value.to_integral_value():
        return f"{sign}${int(abs(value)):,}"
    return f"{sign}${abs(value):,.2f}"


def format_elapsed(start: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Elapsed session time as H:MM:SS; 0:00:00 before the session starts."""
    if start is None:
        return "0:00:00"
    if now is None:
        now = datetime.now(timezone.utc)
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - start).total_seconds()))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"
