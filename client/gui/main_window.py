"""
Main application window.

Shows one game session and coordinates between the event stream, the
cached read views and the UI widgets.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from PyQt6.QtWidgets import (
    QHBoxLayout, QLabel, QMainWindow, QMessageBox, QPushButton, QVBoxLayout, QWidget
)
from PyQt6.QtCore import QTimer

from client.config import ClientSettings, settings as default_settings
from client.gui.sound import SoundPlayer
from client.gui.styles import MAIN_STYLESHEET, TOAST_DURATION_MS
from client.gui.widgets import EventLog, ParticipantList
from client.network import ApiClient, ApiError, ConnectionState, GameEventStream
from client.network.client import Connector
from client.session import SessionContext
from client.state import QueryCache, TurnNotificationCoordinator
from client.state.derived import bank_balance, format_currency, format_elapsed
from client.state.queries import GameQueries
from shared.enums import QueryKey, SoundCue
from shared.models import Trade


logger = logging.getLogger(__name__)


CONNECTION_LABELS = {
    ConnectionState.CONNECTING: "Connecting...",
    ConnectionState.OPEN: "Live",
    ConnectionState.BACKOFF: "Reconnecting...",
    ConnectionState.CLOSED: "Offline",
}


class GameWindow(QMainWindow):
    """
    Main window for a single game session.

    Cached views are refetched only after the cache marks them stale, so
    every number on screen is the last server answer.
    """

    def __init__(
        self,
        game_id: str,
        session: SessionContext,
        config: Optional[ClientSettings] = None,
        api: Optional[ApiClient] = None,
        connector: Optional[Connector] = None,
    ):
        super().__init__()

        self._settings = config or default_settings
        self._game_id = game_id
        self._session = session

        self.setWindowTitle(f"Monopoly - Game {game_id}")
        self.setMinimumSize(self._settings.window_width, self._settings.window_height)
        self.setStyleSheet(MAIN_STYLESHEET)

        # Shared state
        self._cache = QueryCache(self)
        self._api = api or ApiClient(session, self._settings)
        self._queries = GameQueries(self._api, self._cache, game_id)

        # Event stream and notifications
        self._stream = GameEventStream(
            self._cache, self._settings, connector=connector, parent=self
        )
        self._coordinator = TurnNotificationCoordinator(
            self._cache, game_id, session.user_id or "", self
        )
        self._sound = SoundPlayer(self._settings.sounds_dir, parent=self)

        # State
        self._started_at: Optional[datetime] = None
        self._current_turn_user_id: Optional[str] = None
        self._game_finished = False
        self._refreshing: set[str] = set()
        self._refresh_again: set[str] = set()

        self._setup_ui()
        self._connect_stream_signals()
        self._connect_coordinator_signals()
        self._cache.invalidated.connect(self._on_invalidated)
        session.add_unauthorized_callback(self._on_session_expired)

        # Session clock
        self._clock = QTimer(self)
        self._clock.setInterval(1000)
        self._clock.timeout.connect(self._tick)
        self._clock.start()

    def _setup_ui(self) -> None:
        """Set up the main UI."""
        central = QWidget()
        central.setObjectName("centralWidget")
        self.setCentralWidget(central)

        layout = QVBoxLayout(central)

        # Header: connection, bank, clock
        header = QHBoxLayout()
        self._connection_label = QLabel(CONNECTION_LABELS[ConnectionState.CLOSED])
        self._connection_label.setObjectName("connectionLabel")
        header.addWidget(self._connection_label)
        header.addStretch()

        self._bank_label = QLabel(f"Bank: {format_currency(self._settings.initial_bank_balance)}")
        self._bank_label.setObjectName("bankLabel")
        header.addWidget(self._bank_label)
        header.addStretch()

        self._clock_label = QLabel(format_elapsed(None))
        header.addWidget(self._clock_label)
        layout.addLayout(header)

        # Body: players and log
        body = QHBoxLayout()
        self._participants = ParticipantList()
        body.addWidget(self._participants, 1)

        self._log = EventLog()
        body.addWidget(self._log, 2)
        layout.addLayout(body)

        # Actions
        actions = QHBoxLayout()
        self._roll_btn = QPushButton("🎲 Roll Dice")
        self._roll_btn.clicked.connect(self._on_roll_dice)
        actions.addWidget(self._roll_btn)

        self._end_turn_btn = QPushButton("End Turn")
        self._end_turn_btn.clicked.connect(self._on_end_turn)
        actions.addWidget(self._end_turn_btn)
        actions.addStretch()
        layout.addLayout(actions)

        self._update_action_buttons()

    def _connect_stream_signals(self) -> None:
        """Connect event stream signals."""
        self._stream.connection_changed.connect(self._on_connection_changed)
        self._stream.event_received.connect(self._log.add_game_event)
        self._stream.resynced.connect(self._on_resynced)
        self._stream.error_occurred.connect(self._on_error)
        self._stream.set_handler(self._coordinator.handle_event)

    def _connect_coordinator_signals(self) -> None:
        """Connect notification coordinator signals."""
        self._coordinator.toast_requested.connect(self._show_toast)
        self._coordinator.sound_requested.connect(self._sound.play)
        self._coordinator.incoming_trade_changed.connect(self._on_incoming_trade)
        self._coordinator.auction_changed.connect(self._on_auction_changed)
        self._coordinator.results_reset.connect(self._on_results_reset)

    @property
    def cache(self) -> QueryCache:
        return self._cache

    @property
    def coordinator(self) -> TurnNotificationCoordinator:
        return self._coordinator

    # =========================================================================
    # Startup
    # =========================================================================

    async def start(self) -> None:
        """Load the initial views and open the event stream."""
        self._log.add_system_message(f"Joining game {self._game_id}")
        try:
            if self._session.user is None and self._session.is_authenticated:
                self._session.set_profile(await self._api.get_profile())
                self._rebind_coordinator()

            self._coordinator.prime_transactions(await self._queries.transactions())
            for key in (
                QueryKey.GAME, QueryKey.PARTICIPANTS, QueryKey.TRANSACTIONS,
                QueryKey.TRADES, QueryKey.ACTIVE_AUCTION,
            ):
                await self._refresh(key)
        except ApiError as e:
            self._on_error(e.message)

        await self._stream.open(self._game_id)

    def _rebind_coordinator(self) -> None:
        """Recreate the coordinator once the local user is known."""
        coordinator = TurnNotificationCoordinator(
            self._cache, self._game_id, self._session.user_id or "", self
        )
        self._coordinator.deleteLater()
        self._coordinator = coordinator
        self._connect_coordinator_signals()
        self._stream.set_handler(coordinator.handle_event)

    # =========================================================================
    # Cache refresh
    # =========================================================================

    def _on_invalidated(self, key: str, game_id: str) -> None:
        """A view went stale: refetch it if this window shows it."""
        if game_id != self._game_id:
            return
        if key in self._refreshing:
            self._refresh_again.add(key)
            return
        self._run_async(self._refresh(QueryKey(key)))

    async def _refresh(self, key: QueryKey) -> None:
        self._refreshing.add(key.value)
        try:
            if key == QueryKey.GAME:
                game = await self._queries.game()
                self._started_at = game.created_at
                self._current_turn_user_id = game.current_turn_user_id
                self._game_finished = game.is_over
                self._update_action_buttons()
                self._refresh_participant_view()

            elif key == QueryKey.PARTICIPANTS:
                self._coordinator.set_participants(await self._queries.participants())
                self._refresh_participant_view()

            elif key == QueryKey.TRANSACTIONS:
                transactions = await self._queries.transactions()
                balance = bank_balance(transactions, self._settings.initial_bank_balance)
                self._bank_label.setText(f"Bank: {format_currency(balance)}")

            elif key == QueryKey.TRADES:
                self._coordinator.set_trades(await self._queries.trades())

            elif key == QueryKey.ACTIVE_AUCTION:
                self._coordinator.set_auction(await self._queries.active_auction())
        except ApiError as e:
            logger.warning(f"Failed to refresh {key.value}: {e.message}")
            self._show_toast(e.message, "error")
        finally:
            self._refreshing.discard(key.value)

        if key.value in self._refresh_again:
            self._refresh_again.discard(key.value)
            await self._refresh(key)

    def _refresh_participant_view(self) -> None:
        participants = self._cache.get(QueryKey.PARTICIPANTS, self._game_id)
        if participants is None:
            return
        self._participants.update_participants(
            participants, self._current_turn_user_id, self._session.user_id
        )

    # =========================================================================
    # Event stream handlers
    # =========================================================================

    def _on_connection_changed(self, state: ConnectionState) -> None:
        """Handle connection state changes."""
        self._connection_label.setText(CONNECTION_LABELS[state])
        if state == ConnectionState.OPEN:
            self._log.add_system_message("Connected to game updates")
        elif state == ConnectionState.BACKOFF:
            self._log.add_system_message("Connection lost, retrying...")

    def _on_resynced(self, game_id: str) -> None:
        self._log.add_system_message("Reconnected, refreshing game state")

    def _on_error(self, message: str) -> None:
        """Handle errors."""
        self._log.add_error_message(message)
        self._show_toast(message, "error")

    def _on_session_expired(self) -> None:
        QMessageBox.warning(self, "Session Expired", "Please sign in again.")
        self.close()

    # =========================================================================
    # Coordinator handlers
    # =========================================================================

    def _show_toast(self, text: str, level: str) -> None:
        self.statusBar().showMessage(text, TOAST_DURATION_MS)
        self._log.add_toast(text, level)

    def _on_auction_changed(self, auction) -> None:
        if auction is not None:
            self._show_toast(
                f"Auction running, current bid {format_currency(auction.current_bid)}", "info"
            )

    def _on_incoming_trade(self, trade: Optional[Trade]) -> None:
        if trade is None:
            return
        offer = []
        if trade.offer_cash:
            offer.append(format_currency(trade.offer_cash))
        if trade.offer_properties:
            offer.append(f"{len(trade.offer_properties)} properties")
        if trade.offer_cards:
            offer.append(f"{len(trade.offer_cards)} cards")
        summary = ", ".join(offer) or "nothing"

        reply = QMessageBox.question(
            self,
            "Trade Offer",
            f"You have been offered {summary}. Accept?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        self._coordinator.dismiss_incoming_trade()
        user_id = self._session.user_id or ""
        if reply == QMessageBox.StandardButton.Yes:
            self._run_async(self._answer_trade(self._queries.accept_trade(trade.id, user_id)))
        else:
            self._run_async(self._answer_trade(self._queries.reject_trade(trade.id, user_id)))

    async def _answer_trade(self, request) -> None:
        try:
            trade = await request
        except ApiError as e:
            self._on_error(e.message)
            return
        self._show_toast(f"Trade {trade.status.value.lower()}", "success")

    def _on_results_reset(self) -> None:
        """The game finished: show the final standings once."""
        self._game_finished = True
        self._update_action_buttons()
        if self._coordinator.has_viewed_results:
            return
        self._coordinator.mark_results_viewed()

        participants = self._cache.get(QueryKey.PARTICIPANTS, self._game_id) or []
        ranked = sorted(participants, key=lambda p: p.balance, reverse=True)
        lines = [
            f"{i}. {p.display_name or p.user_id}: {format_currency(p.balance)}"
            for i, p in enumerate(ranked, 1)
        ]
        QMessageBox.information(self, "Game Over", "\n".join(lines) or "The game has ended.")

    # =========================================================================
    # Actions
    # =========================================================================

    def _update_action_buttons(self) -> None:
        my_turn = (
            not self._game_finished
            and self._session.user_id is not None
            and self._current_turn_user_id == self._session.user_id
        )
        self._roll_btn.setEnabled(my_turn)
        self._end_turn_btn.setEnabled(my_turn)

    def _on_roll_dice(self) -> None:
        self._sound.play(SoundCue.DICE.value)
        self._run_async(self._roll_dice())

    async def _roll_dice(self) -> None:
        try:
            await self._queries.roll_dice()
        except ApiError as e:
            self._on_error(e.message)

    def _on_end_turn(self) -> None:
        self._run_async(self._end_turn())

    async def _end_turn(self) -> None:
        try:
            await self._queries.end_turn()
        except ApiError as e:
            self._on_error(e.message)

    # =========================================================================
    # Utility methods
    # =========================================================================

    def _tick(self) -> None:
        self._clock_label.setText(format_elapsed(self._started_at))

    def _run_async(self, coro) -> None:
        """Run a coroutine in the event loop."""
        asyncio.ensure_future(coro)

    async def shutdown(self) -> None:
        await self._stream.close()
        await self._api.close()

    def closeEvent(self, event) -> None:
        """Handle window close."""
        self._clock.stop()
        self._run_async(self.shutdown())
        event.accept()
