"""
Participant list widget.

Shows every participant's balance and board space, marking whose turn it is.
"""

from typing import Iterable, Optional

from PyQt6.QtWidgets import QGroupBox, QListWidget, QListWidgetItem, QVBoxLayout
from PyQt6.QtGui import QColor, QFont

from client.state.derived import format_currency, space_name
from shared.models import Participant


class ParticipantList(QGroupBox):
    """Balances and positions of all participants."""

    def __init__(self, parent=None):
        super().__init__("Players", parent)

        layout = QVBoxLayout(self)
        self._list = QListWidget()
        layout.addWidget(self._list)

    def update_participants(
        self,
        participants: Iterable[Participant],
        current_turn_user_id: Optional[str] = None,
        local_user_id: Optional[str] = None,
    ) -> None:
        self._list.clear()
        for participant in participants:
            name = participant.display_name or participant.user_id
            if participant.user_id == local_user_id:
                name += " (You)"
            text = (
                f"{name}   {format_currency(participant.balance)}   "
                f"{space_name(participant.position)}"
            )
            item = QListWidgetItem(text)
            if participant.user_id == current_turn_user_id:
                font = QFont()
                font.setBold(True)
                item.setFont(font)
                item.setForeground(QColor("#F1C40F"))
            self._list.addItem(item)

    def count(self) -> int:
        return self._list.count()
