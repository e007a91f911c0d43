"""
Turn and notification coordinator.

Consumes dispatched events together with snapshots of the current
participants and trades, and turns them into UI intents: toasts, sound
cues, the displayed auction, the incoming-trade prompt, and the "results
already viewed" flag. Which entity ids have already been observed lives
here too, so notification side effects never depend on render order.
"""

import logging
from typing import Iterable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from client.state.cache import QueryCache
from client.state.derived import space_name
from shared.enums import GameStatus, QueryKey, SoundCue, ToastLevel, TradeStatus
from shared.models import Auction, Participant, Trade, Transaction
from shared.protocol import (
    AuctionUpdated, DiceRolled, GameEvent, GameUpdated, ParticipantUpdated,
    TradeUpdated, TransactionCreated, TurnUpdated,
)


logger = logging.getLogger(__name__)


class TurnNotificationCoordinator(QObject):
    """
    State machine over the incoming event stream.

    Signals:
    - toast_requested(text, level): show a one-shot notification
    - sound_requested(cue): play a SoundCue
    - auction_changed(auction or None): displayed auction changed
    - incoming_trade_changed(trade or None): incoming trade prompt changed
    - results_reset(): the end-of-game screen must be shown again
    """

    toast_requested = pyqtSignal(str, str)
    sound_requested = pyqtSignal(str)
    auction_changed = pyqtSignal(object)
    incoming_trade_changed = pyqtSignal(object)
    results_reset = pyqtSignal()

    def __init__(self, cache: QueryCache, game_id: str, local_user_id: str, parent=None):
        super().__init__(parent)

        self._cache = cache
        self._game_id = game_id
        self._local_user_id = local_user_id

        self._participants: dict[str, Participant] = {}
        self._trades: dict[str, Trade] = {}

        self._auction: Optional[Auction] = None
        self._incoming_trade: Optional[Trade] = None
        self._has_viewed_results = False

        # Previously observed ids, so cues fire once per entity
        self._seen_transactions: set[str] = set()
        self._announced_trades: set[str] = set()

    # =========================================================================
    # Snapshots and state
    # =========================================================================

    @property
    def displayed_auction(self) -> Optional[Auction]:
        return self._auction

    @property
    def incoming_trade(self) -> Optional[Trade]:
        return self._incoming_trade

    @property
    def has_viewed_results(self) -> bool:
        return self._has_viewed_results

    @property
    def local_participant(self) -> Optional[Participant]:
        return next(
            (p for p in self._participants.values() if p.user_id == self._local_user_id),
            None,
        )

    def mark_results_viewed(self) -> None:
        self._has_viewed_results = True

    def set_participants(self, participants: Iterable[Participant]) -> None:
        self._participants = {p.id: p for p in participants}

    def set_trades(self, trades: Iterable[Trade]) -> None:
        """Replace the trades snapshot; an unseen pending trade for us becomes the prompt."""
        self._trades = {t.id: t for t in trades}
        if self._incoming_trade is None:
            pending = next(
                (t for t in self._trades.values()
                 if t.status == TradeStatus.PENDING
                 and self._is_local(t.target_id)
                 and t.id not in self._announced_trades),
                None,
            )
            if pending is not None:
                self._announced_trades.add(pending.id)
                self._set_incoming_trade(pending)

    def set_auction(self, auction: Optional[Auction]) -> None:
        """Seed the displayed auction from the active-auction read view."""
        self._set_auction(auction if auction is not None and auction.is_active else None)

    def prime_transactions(self, transactions: Iterable[Transaction]) -> None:
        """Record already-known transactions so they never trigger a cue."""
        self._seen_transactions.update(tx.id for tx in transactions)

    def dismiss_incoming_trade(self) -> None:
        self._set_incoming_trade(None)

    def _set_auction(self, auction: Optional[Auction]) -> None:
        if auction != self._auction:
            self._auction = auction
            self.auction_changed.emit(auction)

    def _set_incoming_trade(self, trade: Optional[Trade]) -> None:
        if trade != self._incoming_trade:
            self._incoming_trade = trade
            self.incoming_trade_changed.emit(trade)

    def _is_local(self, participant_or_user_id: str) -> bool:
        if participant_or_user_id == self._local_user_id:
            return True
        me = self.local_participant
        return me is not None and me.id == participant_or_user_id

    def _name_for_user(self, user_id: str) -> str:
        for participant in self._participants.values():
            if participant.user_id == user_id and participant.display_name:
                return participant.display_name
        return "Another player"

    def _toast(self, text: str, level: ToastLevel = ToastLevel.INFO) -> None:
        self.toast_requested.emit(text, level.value)

    def _invalidate_ownership(self) -> None:
        self._cache.invalidate(QueryKey.GAME_PROPERTIES, self._game_id)
        self._cache.invalidate(QueryKey.PARTICIPANTS, self._game_id)

    # =========================================================================
    # Event handling
    # =========================================================================

    def handle_event(self, event: GameEvent) -> None:
        """Apply one dispatched event."""
        if isinstance(event, ParticipantUpdated):
            self._on_participant_updated(event.payload)
        elif isinstance(event, AuctionUpdated):
            self._on_auction_updated(event.payload)
        elif isinstance(event, TradeUpdated):
            self._on_trade_updated(event.payload)
        elif isinstance(event, TurnUpdated):
            self._on_turn_updated(event.payload.current_turn_user_id)
        elif isinstance(event, GameUpdated):
            if event.payload.status == GameStatus.FINISHED:
                self._has_viewed_results = False
                self.results_reset.emit()
        elif isinstance(event, TransactionCreated):
            self._on_transaction_created(event.payload)
        elif isinstance(event, DiceRolled):
            roll = event.payload
            if roll.is_double and roll.user_id == self._local_user_id:
                self._toast("Doubles! You may roll again.", ToastLevel.SUCCESS)

    def _on_participant_updated(self, participant: Participant) -> None:
        known = self._participants.get(participant.id)
        if known is not None and not participant.display_name:
            # Keep the names from the snapshot when the event omits them
            participant = known.model_copy(
                update={"position": participant.position, "balance": participant.balance}
            )
        self._participants[participant.id] = participant
        name = participant.display_name or "A player"
        self._toast(f"{name} moved to {space_name(participant.position)}")

    def _on_auction_updated(self, auction: Auction) -> None:
        if auction.is_active:
            self._set_auction(auction)
        else:
            self._set_auction(None)
            self._invalidate_ownership()

    def _on_trade_updated(self, trade: Trade) -> None:
        self._trades[trade.id] = trade

        if trade.status == TradeStatus.PENDING:
            if self._is_local(trade.target_id) and trade.id not in self._announced_trades:
                self._announced_trades.add(trade.id)
                self._set_incoming_trade(trade)
                self.sound_requested.emit(SoundCue.NOTIFICATION.value)
            return

        if self._incoming_trade is not None and self._incoming_trade.id == trade.id:
            self._set_incoming_trade(None)

        if trade.status == TradeStatus.ACCEPTED:
            self._invalidate_ownership()

    def _on_turn_updated(self, user_id: str) -> None:
        if user_id == self._local_user_id:
            self.sound_requested.emit(SoundCue.YOUR_TURN.value)
        else:
            self._toast(f"It's {self._name_for_user(user_id)}'s turn")

    def _on_transaction_created(self, tx: Transaction) -> None:
        if tx.id in self._seen_transactions:
            return
        self._seen_transactions.add(tx.id)

        me = self.local_participant
        if me is not None and tx.involves(me.id):
            self.sound_requested.emit(SoundCue.CASH.value)
