"""
Enumerations used throughout the client.
"""
from enum import Enum


class GameStatus(str, Enum):
    """Lifecycle of a game session."""
    WAITING = "WAITING"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"


class AuctionStatus(str, Enum):
    """Status of a property auction."""
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class TradeStatus(str, Enum):
    """Status of a trade offer."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class CardType(str, Enum):
    """Decks a card can be drawn from."""
    ARCA = "arca"
    FORTUNA = "fortuna"
    BONIFICACION = "bonificacion"
    BOVEDA = "boveda"


class CardEffect(str, Enum):
    """Color-coded effect class of a card."""
    PASSIVE = "yellow"
    INSTANT = "red"
    WIN_CONDITION = "green"


class EventType(str, Enum):
    """Event tags pushed by the server over the game socket."""
    TRANSACTION_CREATED = "TransactionCreated"
    DICE_ROLLED = "DiceRolled"
    ROULETTE_SPUN = "RouletteSpun"
    SPECIAL_DICE_ROLLED = "SpecialDiceRolled"
    PARTICIPANT_UPDATED = "ParticipantUpdated"
    MARKET_UPDATED = "MarketUpdated"
    TURN_UPDATED = "TurnUpdated"
    GAME_UPDATED = "GameUpdated"
    AUCTION_UPDATED = "AuctionUpdated"
    TRADE_UPDATED = "TradeUpdated"
    PROPERTY_UPDATED = "PropertyUpdated"


class QueryKey(str, Enum):
    """Names of the game-scoped cached read views."""
    GAME = "game"
    PARTICIPANTS = "participants"
    TRANSACTIONS = "transactions"
    DICE_ROLLS = "dice_rolls"
    ROULETTE_HISTORY = "roulette-history"
    SPECIAL_DICE_HISTORY = "special-dice-history"
    BOVEDA_MARKET = "boveda-market"
    ACTIVE_AUCTION = "active-auction"
    GAME_PROPERTIES = "gameProperties"
    TRADES = "trades"


class SoundCue(str, Enum):
    """Audio cues the client can play."""
    DICE = "dice"
    NOTIFICATION = "notification"
    YOUR_TURN = "turn"
    CASH = "cash"


class ToastLevel(str, Enum):
    """Severity of a transient notification."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
