"""
REST client for the game server.

Every mutation goes through here and waits for the server's answer; nothing
is applied locally first. Requests carry the session's bearer token, and a
401 from any endpoint ends the session. No request is retried.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from client.config import ClientSettings, settings as default_settings
from client.session import SessionContext
from shared.enums import CardType, GameStatus
from shared.models import (
    Auction, DiceHistoryItem, DiceRoll, GameSession, MarketSlot, Participant,
    ParticipantCard, ParticipantProperty, Property, RouletteSpin,
    SpecialDiceRoll, Trade, Transaction, User,
)


logger = logging.getLogger(__name__)


GENERIC_ERROR = "Something went wrong, please try again"


class ApiError(Exception):
    """A request failed; message is fit to show to the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SessionExpiredError(ApiError):
    """The server rejected the session token."""


class InvalidTransferError(ValueError):
    """A transfer that could never be a valid transaction."""


class BearerAuth(httpx.Auth):
    """Attach the session token and end the session on 401."""

    def __init__(self, session: SessionContext):
        self._session = session

    def auth_flow(self, request: httpx.Request):
        token = self._session.token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        response = yield request
        if response.status_code == 401:
            self._session.expire()


def error_message(response: httpx.Response) -> str:
    """Server-provided error text when present, else a generic message."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    elif isinstance(body, str) and body:
        return body

    text = response.text.strip()
    return text or GENERIC_ERROR


def validate_transfer(
    amount: int,
    from_participant_id: Optional[str],
    to_participant_id: Optional[str],
) -> None:
    """Reject transfers the server should never be asked to create."""
    if amount <= 0:
        raise InvalidTransferError("Amount must be positive")
    if from_participant_id is None and to_participant_id is None:
        raise InvalidTransferError("The Bank cannot pay itself")
    if from_participant_id is not None and from_participant_id == to_participant_id:
        raise InvalidTransferError("A player cannot pay themselves")


class ApiClient:
    """Async client for the game server's REST surface."""

    def __init__(
        self,
        session: SessionContext,
        config: Optional[ClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        cfg = config or default_settings
        self._session = session
        self._client = httpx.AsyncClient(
            base_url=cfg.api_url,
            auth=BearerAuth(session),
            headers={"Content-Type": "application/json"},
            timeout=cfg.request_timeout,
            transport=transport,
        )

    @property
    def session(self) -> SessionContext:
        return self._session

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        """Send a request and return the decoded JSON body (None if empty)."""
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(f"Could not reach the server: {e}") from e

        if response.status_code == 401:
            raise SessionExpiredError("Your session has expired, please log in again", 401)
        if response.is_error:
            message = error_message(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _parse(model: Any, data: Any) -> Any:
        try:
            return TypeAdapter(model).validate_python(data)
        except ValidationError as e:
            logger.error(f"Unexpected response shape for {model}: {e}")
            raise ApiError(GENERIC_ERROR) from e

    # =========================================================================
    # Users
    # =========================================================================

    async def login(self, username: str, password: str) -> User:
        """Log in, store the token, and load the profile."""
        data = await self._request(
            "POST", "/users/login", {"username": username, "password": password}
        )
        token = (data or {}).get("token")
        if not token:
            raise ApiError("Login failed")
        self._session.login(None, token)
        return await self.get_profile()

    async def register(
        self, username: str, password: str, first_name: str, last_name: str
    ) -> User:
        data = await self._request("POST", "/users/register", {
            "username": username,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
        })
        return self._parse(User, data)

    async def get_profile(self) -> User:
        user = self._parse(User, await self._request("GET", "/users/profile"))
        self._session.set_profile(user)
        return user

    async def logout(self) -> None:
        try:
            await self._request("POST", "/users/logout")
        finally:
            self._session.logout()

    async def get_hosted_games(self) -> list[GameSession]:
        return self._parse(list[GameSession], await self._request("GET", "/users/games/hosted"))

    async def get_played_games(self) -> list[GameSession]:
        return self._parse(list[GameSession], await self._request("GET", "/users/games/played"))

    # =========================================================================
    # Game sessions
    # =========================================================================

    async def create_game(self) -> GameSession:
        return self._parse(GameSession, await self._request("POST", "/games", {}))

    async def get_game(self, game_id: str) -> GameSession:
        return self._parse(GameSession, await self._request("GET", f"/games/{game_id}"))

    async def update_game(
        self,
        game_id: str,
        name: Optional[str] = None,
        status: Optional[GameStatus] = None,
        initiative_rolls: Optional[dict[str, int]] = None,
    ) -> GameSession:
        body: dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if status is not None:
            body["status"] = GameStatus(status).value
        if initiative_rolls is not None:
            body["initiative_rolls"] = initiative_rolls
        return self._parse(GameSession, await self._request("PUT", f"/games/{game_id}", body))

    async def delete_game(self, game_id: str) -> None:
        await self._request("DELETE", f"/games/{game_id}")

    async def join_game(self, code: str) -> Participant:
        return self._parse(Participant, await self._request("POST", "/games/join", {"code": code}))

    async def leave_game(self, game_id: str) -> None:
        await self._request("POST", f"/games/{game_id}/leave")

    async def end_turn(self, game_id: str) -> Any:
        return await self._request("POST", f"/games/{game_id}/end-turn")

    async def get_participants(self, game_id: str) -> list[Participant]:
        data = await self._request("GET", f"/games/{game_id}/participants")
        return self._parse(list[Participant], data)

    async def update_position(self, game_id: str, user_id: str, position: int) -> Any:
        return await self._request(
            "PUT", f"/games/{game_id}/participants",
            {"user_id": user_id, "position": position},
        )

    # =========================================================================
    # Transactions
    # =========================================================================

    async def get_transactions(self, game_id: str) -> list[Transaction]:
        data = await self._request("GET", f"/games/{game_id}/transactions")
        return self._parse(list[Transaction], data)

    async def transfer(
        self,
        game_id: str,
        amount: int,
        from_participant_id: Optional[str] = None,
        to_participant_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        """
        Move money between two parties; a None id is the Bank.

        Raises:
            InvalidTransferError: before sending, for a transfer that could
                never be valid (bank to bank, self-payment, non-positive).
        """
        validate_transfer(amount, from_participant_id, to_participant_id)
        data = await self._request("POST", f"/games/{game_id}/transactions", {
            "from_participant_id": from_participant_id,
            "to_participant_id": to_participant_id,
            "amount": amount,
            "description": description,
        })
        return self._parse(Transaction, data)

    async def undo_transaction(self, game_id: str, transaction_id: str) -> None:
        """Ask the server to reverse a transaction."""
        await self._request("DELETE", f"/games/{game_id}/transactions/{transaction_id}")

    async def claim_jackpot(self, game_id: str) -> Any:
        return await self._request("POST", f"/games/{game_id}/jackpot/claim")

    # =========================================================================
    # Dice, roulette, special dice
    # =========================================================================

    async def roll_dice(
        self, game_id: str, sides: int = 6, count: int = 2, auto_salary: bool = False
    ) -> DiceRoll:
        data = await self._request("POST", f"/games/{game_id}/roll", {
            "sides": sides, "count": count, "auto_salary": auto_salary,
        })
        return self._parse(DiceRoll, data)

    async def get_dice_history(self, game_id: str) -> list[DiceHistoryItem]:
        data = await self._request("GET", f"/games/{game_id}/rolls")
        return self._parse(list[DiceHistoryItem], data)

    async def record_roulette_spin(
        self, game_id: str, result_label: str, result_value: int, result_type: str
    ) -> RouletteSpin:
        data = await self._request("POST", f"/games/{game_id}/roulette", {
            "result_label": result_label,
            "result_value": result_value,
            "result_type": result_type,
        })
        return self._parse(RouletteSpin, data)

    async def get_roulette_history(self, game_id: str) -> list[RouletteSpin]:
        data = await self._request("GET", f"/games/{game_id}/roulette")
        return self._parse(list[RouletteSpin], data)

    async def record_special_dice_roll(
        self,
        game_id: str,
        die_name: str,
        die_id: str,
        face_label: str,
        face_value: Optional[int] = None,
        face_action: Optional[str] = None,
    ) -> SpecialDiceRoll:
        data = await self._request("POST", f"/games/{game_id}/special-dice", {
            "die_name": die_name,
            "die_id": die_id,
            "face_label": face_label,
            "face_value": face_value,
            "face_action": face_action,
        })
        return self._parse(SpecialDiceRoll, data)

    async def get_special_dice_history(self, game_id: str) -> list[SpecialDiceRoll]:
        data = await self._request("GET", f"/games/{game_id}/special-dice")
        return self._parse(list[SpecialDiceRoll], data)

    # =========================================================================
    # Properties
    # =========================================================================

    async def get_properties(self) -> list[Property]:
        return self._parse(list[Property], await self._request("GET", "/properties"))

    async def get_game_properties(self, game_id: str) -> list[ParticipantProperty]:
        data = await self._request("GET", f"/games/{game_id}/properties")
        return self._parse(list[ParticipantProperty], data)

    async def _property_action(
        self, game_id: str, property_id: str, action: str, user_id: str
    ) -> Any:
        return await self._request(
            "POST", f"/games/{game_id}/properties/{property_id}/{action}",
            {"user_id": user_id},
        )

    async def buy_property(self, game_id: str, property_id: str, user_id: str) -> Any:
        return await self._property_action(game_id, property_id, "buy", user_id)

    async def mortgage_property(self, game_id: str, property_id: str, user_id: str) -> Any:
        return await self._property_action(game_id, property_id, "mortgage", user_id)

    async def unmortgage_property(self, game_id: str, property_id: str, user_id: str) -> Any:
        return await self._property_action(game_id, property_id, "unmortgage", user_id)

    async def build(self, game_id: str, property_id: str, user_id: str) -> Any:
        return await self._property_action(game_id, property_id, "build", user_id)

    async def sell_building(self, game_id: str, property_id: str, user_id: str) -> Any:
        return await self._property_action(game_id, property_id, "sell-building", user_id)

    # =========================================================================
    # Auctions
    # =========================================================================

    async def get_active_auction(self, game_id: str) -> Optional[Auction]:
        data = await self._request("GET", f"/games/{game_id}/auctions")
        return self._parse(Optional[Auction], data)

    async def start_auction(self, game_id: str, property_id: str) -> Auction:
        data = await self._request(
            "POST", f"/games/{game_id}/auctions", {"property_id": property_id}
        )
        return self._parse(Auction, data)

    async def place_bid(self, game_id: str, auction_id: str, user_id: str, amount: int) -> Auction:
        data = await self._request(
            "POST", f"/games/{game_id}/auctions/{auction_id}/bid",
            {"bidder_user_id": user_id, "amount": amount},
        )
        return self._parse(Auction, data)

    async def end_auction(self, game_id: str, auction_id: str) -> Auction:
        data = await self._request("POST", f"/games/{game_id}/auctions/{auction_id}/end")
        return self._parse(Auction, data)

    # =========================================================================
    # Trades
    # =========================================================================

    async def get_trades(self, game_id: str) -> list[Trade]:
        return self._parse(list[Trade], await self._request("GET", f"/games/{game_id}/trades"))

    async def create_trade(
        self,
        game_id: str,
        initiator_id: str,
        target_id: str,
        offer_cash: int = 0,
        request_cash: int = 0,
        offer_properties: Optional[list[str]] = None,
        request_properties: Optional[list[str]] = None,
        offer_cards: Optional[list[str]] = None,
        request_cards: Optional[list[str]] = None,
    ) -> Trade:
        data = await self._request("POST", f"/games/{game_id}/trades", {
            "initiator_id": initiator_id,
            "target_id": target_id,
            "offer_cash": offer_cash,
            "request_cash": request_cash,
            "offer_properties": offer_properties or [],
            "request_properties": request_properties or [],
            "offer_cards": offer_cards or [],
            "request_cards": request_cards or [],
        })
        return self._parse(Trade, data)

    async def accept_trade(self, game_id: str, trade_id: str, user_id: str) -> Trade:
        data = await self._request(
            "POST", f"/games/{game_id}/trades/{trade_id}/accept", {"user_id": user_id}
        )
        return self._parse(Trade, data)

    async def reject_trade(self, game_id: str, trade_id: str, user_id: str) -> Trade:
        data = await self._request(
            "POST", f"/games/{game_id}/trades/{trade_id}/reject", {"user_id": user_id}
        )
        return self._parse(Trade, data)

    # =========================================================================
    # Cards and market
    # =========================================================================

    async def draw_card(self, game_id: str, card_type: CardType) -> Any:
        return await self._request(
            "POST", f"/games/{game_id}/cards/draw",
            {"card_type": CardType(card_type).value},
        )

    async def get_inventory(self, game_id: str) -> list[ParticipantCard]:
        data = await self._request("GET", f"/games/{game_id}/cards/inventory")
        return self._parse(list[ParticipantCard], data)

    async def get_all_inventories(self, game_id: str) -> Any:
        return await self._request("GET", f"/games/{game_id}/cards/all-inventories")

    async def use_card(self, game_id: str, inventory_id: str) -> Any:
        return await self._request(
            "POST", f"/games/{game_id}/cards/use", {"inventory_id": inventory_id}
        )

    async def discard_card(self, game_id: str, inventory_id: str) -> None:
        await self._request("DELETE", f"/games/{game_id}/cards/inventory/{inventory_id}")

    async def get_market(self, game_id: str) -> list[MarketSlot]:
        data = await self._request("GET", f"/games/{game_id}/cards/market")
        return self._parse(list[MarketSlot], data)

    async def buy_market_card(self, game_id: str, slot_index: int) -> Any:
        return await self._request(
            "POST", f"/games/{game_id}/cards/market/buy", {"slot_index": slot_index}
        )

    async def exchange_market_card(self, game_id: str, slot_index: int) -> Any:
        return await self._request(
            "POST", f"/games/{game_id}/cards/market/exchange", {"slot_index": slot_index}
        )

    async def special_action(
        self,
        game_id: str,
        action: str,
        target_inventory_id: str,
        my_card_id: Optional[str] = None,
    ) -> Any:
        return await self._request("POST", f"/games/{game_id}/cards/special-action", {
            "action": action,
            "target_inventory_id": target_inventory_id,
            "my_card_id": my_card_id,
        })
