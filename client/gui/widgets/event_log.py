"""
Event log widget.

Shows game events and messages in a scrolling log.
"""

from datetime import datetime
from PyQt6.QtWidgets import QWidget, QVBoxLayout, QLabel, QTextEdit
from PyQt6.QtGui import QFont, QTextCursor

from client.gui.styles import TOAST_COLORS
from client.state.derived import format_currency, space_name
from shared.protocol import (
    AuctionUpdated, DiceRolled, GameEvent, GameUpdated, MarketUpdated,
    ParticipantUpdated, PropertyUpdated, RouletteSpun, SpecialDiceRolled,
    TradeUpdated, TransactionCreated, TurnUpdated, UnknownEvent,
)


def describe_event(event: GameEvent) -> tuple[str, str]:
    """Log line and color for a dispatched event."""
    text = ""
    color = "#ECF0F1"

    if isinstance(event, TransactionCreated):
        tx = event.payload
        text = f"💸 {format_currency(tx.amount)}"
        if tx.description:
            text += f" - {tx.description}"
        if tx.is_bank_payout:
            color = "#E67E22"
        elif tx.is_bank_receipt:
            color = "#27AE60"

    elif isinstance(event, DiceRolled):
        roll = event.payload
        faces = " + ".join(str(r) for r in roll.results)
        text = f"🎲 Rolled {faces} = {roll.total}"
        if roll.is_double:
            text += " (DOUBLES!)"
            color = "#F1C40F"

    elif isinstance(event, RouletteSpun):
        spin = event.payload
        text = f"🎡 Roulette: {spin.result_label}"
        color = "#9B59B6"

    elif isinstance(event, SpecialDiceRolled):
        roll = event.payload
        text = f"🎲 {roll.die_name}: {roll.face_label}"
        color = "#9B59B6"

    elif isinstance(event, ParticipantUpdated):
        participant = event.payload
        name = participant.display_name or "A player"
        text = f"➡️ {name} is on {space_name(participant.position)}"

    elif isinstance(event, MarketUpdated):
        text = "🃏 Bóveda market restocked"
        color = "#F39C12"

    elif isinstance(event, TurnUpdated):
        text = "🔄 Turn changed"
        color = "#3498DB"

    elif isinstance(event, GameUpdated):
        text = f"🎮 Game is now {event.payload.status.value.lower()}"
        color = "#27AE60"

    elif isinstance(event, AuctionUpdated):
        auction = event.payload
        if auction.is_active:
            text = f"🔨 Auction bid at {format_currency(auction.current_bid)}"
        else:
            text = "🔨 Auction closed"
        color = "#F39C12"

    elif isinstance(event, TradeUpdated):
        text = f"🤝 Trade {event.payload.status.value.lower()}"
        color = "#1ABC9C"

    elif isinstance(event, PropertyUpdated):
        text = "🏠 Property ownership changed"
        color = "#9B59B6"

    elif isinstance(event, UnknownEvent):
        text = f"📩 {event.type}"
        color = "#7F8C8D"

    return text, color


class EventLog(QWidget):
    """Scrolling log of game events."""

    def __init__(self, parent=None):
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        # Title
        title = QLabel("Game Log")
        title.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        title.setStyleSheet("color: white;")
        layout.addWidget(title)

        # Log text area
        self._log = QTextEdit()
        self._log.setReadOnly(True)
        self._log.setFont(QFont("Consolas", 9))
        self._log.setStyleSheet("""
            QTextEdit {
                background-color: #1A252F;
                color: #ECF0F1;
                border: 1px solid #34495E;
                border-radius: 4px;
            }
        """)
        layout.addWidget(self._log)

    def add_message(self, text: str, color: str = "#ECF0F1") -> None:
        """Add a message to the log."""
        timestamp = datetime.now().strftime("%H:%M:%S")
        html = f'<span style="color: #7F8C8D;">[{timestamp}]</span> '
        html += f'<span style="color: {color};">{text}</span><br>'

        self._log.moveCursor(QTextCursor.MoveOperation.End)
        self._log.insertHtml(html)
        self._log.moveCursor(QTextCursor.MoveOperation.End)

    def add_system_message(self, text: str) -> None:
        """Add a system message."""
        self.add_message(f"⚙️ {text}", "#3498DB")

    def add_error_message(self, text: str) -> None:
        """Add an error message."""
        self.add_message(f"❌ {text}", "#E74C3C")

    def add_toast(self, text: str, level: str) -> None:
        self.add_message(text, TOAST_COLORS.get(level, "#ECF0F1"))

    def add_game_event(self, event: GameEvent) -> None:
        """Add a dispatched game event."""
        text, color = describe_event(event)
        if text:
            self.add_message(text, color)

    def clear(self) -> None:
        """Clear the log."""
        self._log.clear()
