"""
Cached reads and server-confirmed mutations for one game.

Reads go through the QueryCache so a view is only refetched after it was
invalidated. Mutations wait for the server's answer and then invalidate the
views they affect; no cached value is ever patched in place.
"""

from typing import Optional

from client.network.api import ApiClient
from client.state.cache import QueryCache
from shared.enums import QueryKey
from shared.models import (
    Auction, DiceHistoryItem, DiceRoll, GameSession, MarketSlot, Participant,
    ParticipantProperty, RouletteSpin, SpecialDiceRoll, Trade, Transaction,
)


class GameQueries:
    """Read views and actions for a single game session."""

    def __init__(self, api: ApiClient, cache: QueryCache, game_id: str):
        self._api = api
        self._cache = cache
        self._game_id = game_id

    @property
    def game_id(self) -> str:
        return self._game_id

    def _invalidate(self, *keys: QueryKey) -> None:
        for key in keys:
            self._cache.invalidate(key, self._game_id)

    # =========================================================================
    # Reads
    # =========================================================================

    async def game(self) -> GameSession:
        return await self._cache.fetch(
            QueryKey.GAME, self._game_id, lambda: self._api.get_game(self._game_id)
        )

    async def participants(self) -> list[Participant]:
        return await self._cache.fetch(
            QueryKey.PARTICIPANTS, self._game_id,
            lambda: self._api.get_participants(self._game_id),
        )

    async def transactions(self) -> list[Transaction]:
        return await self._cache.fetch(
            QueryKey.TRANSACTIONS, self._game_id,
            lambda: self._api.get_transactions(self._game_id),
        )

    async def dice_rolls(self) -> list[DiceHistoryItem]:
        return await self._cache.fetch(
            QueryKey.DICE_ROLLS, self._game_id,
            lambda: self._api.get_dice_history(self._game_id),
        )

    async def roulette_history(self) -> list[RouletteSpin]:
        return await self._cache.fetch(
            QueryKey.ROULETTE_HISTORY, self._game_id,
            lambda: self._api.get_roulette_history(self._game_id),
        )

    async def special_dice_history(self) -> list[SpecialDiceRoll]:
        return await self._cache.fetch(
            QueryKey.SPECIAL_DICE_HISTORY, self._game_id,
            lambda: self._api.get_special_dice_history(self._game_id),
        )

    async def market(self) -> list[MarketSlot]:
        return await self._cache.fetch(
            QueryKey.BOVEDA_MARKET, self._game_id,
            lambda: self._api.get_market(self._game_id),
        )

    async def active_auction(self) -> Optional[Auction]:
        return await self._cache.fetch(
            QueryKey.ACTIVE_AUCTION, self._game_id,
            lambda: self._api.get_active_auction(self._game_id),
        )

    async def game_properties(self) -> list[ParticipantProperty]:
        return await self._cache.fetch(
            QueryKey.GAME_PROPERTIES, self._game_id,
            lambda: self._api.get_game_properties(self._game_id),
        )

    async def trades(self) -> list[Trade]:
        return await self._cache.fetch(
            QueryKey.TRADES, self._game_id,
            lambda: self._api.get_trades(self._game_id),
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    async def transfer(
        self,
        amount: int,
        from_participant_id: Optional[str],
        to_participant_id: Optional[str],
        description: Optional[str] = None,
    ) -> Transaction:
        tx = await self._api.transfer(
            self._game_id, amount, from_participant_id, to_participant_id, description
        )
        self._invalidate(QueryKey.TRANSACTIONS, QueryKey.PARTICIPANTS)
        return tx

    async def undo_transaction(self, transaction_id: str) -> None:
        await self._api.undo_transaction(self._game_id, transaction_id)
        self._invalidate(QueryKey.TRANSACTIONS, QueryKey.PARTICIPANTS)

    async def roll_dice(self, count: int = 2, sides: int = 6, auto_salary: bool = False) -> DiceRoll:
        roll = await self._api.roll_dice(self._game_id, sides, count, auto_salary)
        self._invalidate(QueryKey.DICE_ROLLS)
        return roll

    async def end_turn(self) -> None:
        await self._api.end_turn(self._game_id)
        self._invalidate(QueryKey.GAME, QueryKey.PARTICIPANTS)

    async def update_position(self, user_id: str, position: int) -> None:
        await self._api.update_position(self._game_id, user_id, position)
        self._invalidate(QueryKey.PARTICIPANTS)

    async def accept_trade(self, trade_id: str, user_id: str) -> Trade:
        trade = await self._api.accept_trade(self._game_id, trade_id, user_id)
        self._invalidate(QueryKey.TRADES, QueryKey.GAME_PROPERTIES, QueryKey.PARTICIPANTS)
        return trade

    async def reject_trade(self, trade_id: str, user_id: str) -> Trade:
        trade = await self._api.reject_trade(self._game_id, trade_id, user_id)
        self._invalidate(QueryKey.TRADES)
        return trade

    async def end_auction(self, auction_id: str) -> Auction:
        auction = await self._api.end_auction(self._game_id, auction_id)
        self._invalidate(
            QueryKey.GAME_PROPERTIES, QueryKey.PARTICIPANTS, QueryKey.ACTIVE_AUCTION
        )
        return auction

    async def property_action(self, action: str, property_id: str, user_id: str) -> None:
        """Run buy/mortgage/unmortgage/build/sell-building on a property."""
        handlers = {
            "buy": self._api.buy_property,
            "mortgage": self._api.mortgage_property,
            "unmortgage": self._api.unmortgage_property,
            "build": self._api.build,
            "sell-building": self._api.sell_building,
        }
        if action not in handlers:
            raise ValueError(f"Unknown property action: {action}")
        await handlers[action](self._game_id, property_id, user_id)
        self._invalidate(QueryKey.GAME_PROPERTIES, QueryKey.PARTICIPANTS)
