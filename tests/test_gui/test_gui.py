"""
Tests for the GUI widgets, rendered offscreen.

Run from project root: python -m pytest tests/test_gui -v
Or run directly: python tests/test_gui/test_gui.py
"""

import asyncio
import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

import httpx

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from client.config import ClientSettings
from client.gui.main_window import GameWindow
from client.gui.sound import SoundPlayer
from client.gui.widgets import EventLog, ParticipantList
from client.gui.widgets.event_log import describe_event
from client.network import ApiClient
from client.session import SessionContext
from shared.enums import QueryKey, SoundCue
from shared.models import Participant, User
from shared.protocol import parse_event


app = QApplication.instance() or QApplication(sys.argv)


def event(event_type: str, payload):
    return parse_event(json.dumps({"type": event_type, "payload": payload}))


class TestDescribeEvent(unittest.TestCase):
    """Log lines for dispatched events."""

    def test_double_roll_highlighted(self):
        text, color = describe_event(event("DiceRolled", {
            "id": "r1", "game_id": "g1", "user_id": "u1",
            "dice_count": 2, "dice_sides": 6, "results": [6, 6], "total": 12,
        }))
        self.assertIn("6 + 6 = 12", text)
        self.assertIn("DOUBLES", text)
        self.assertEqual(color, "#F1C40F")

    def test_transaction_amount_formatted(self):
        text, _ = describe_event(event("TransactionCreated", {
            "id": "t1", "game_id": "g1", "to_participant_id": "p1",
            "amount": 1500, "description": "Salary",
        }))
        self.assertIn("$1,500", text)
        self.assertIn("Salary", text)

    def test_unknown_event_named(self):
        text, _ = describe_event(event("Fireworks", None))
        self.assertIn("Fireworks", text)


class TestWidgets(unittest.TestCase):

    def test_event_log_accepts_events(self):
        log = EventLog()
        log.add_game_event(event("GameUpdated", {"id": "g1", "status": "ACTIVE"}))
        log.add_toast("It's Ana's turn", "info")
        log.add_error_message("Lost connection")
        self.assertIn("Game is now active", log._log.toPlainText())
        self.assertIn("Lost connection", log._log.toPlainText())

    def test_participant_list(self):
        panel = ParticipantList()
        panel.update_participants(
            [
                Participant(id="p1", user_id="u1", game_id="g1", username="me", balance=1500),
                Participant(id="p2", user_id="u2", game_id="g1", username="ana", balance=900),
            ],
            current_turn_user_id="u2",
            local_user_id="u1",
        )
        self.assertEqual(panel.count(), 2)


class TestSoundPlayer(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_missing_file_is_silent(self):
        player = SoundPlayer(Path(self.temp_dir.name))
        player.play(SoundCue.CASH.value)
        self.assertEqual(player.path_for("cash"), Path(self.temp_dir.name) / "cash.wav")

    def test_unknown_cue_logged(self):
        player = SoundPlayer(Path(self.temp_dir.name))
        with self.assertLogs("client.gui.sound", level="WARNING"):
            player.play("kazoo")

    def test_disabled_player_skips(self):
        player = SoundPlayer(Path(self.temp_dir.name), enabled=False)
        player.play("kazoo")
        self.assertFalse(player.enabled)


GAME_ID = "game-1"


class FakeSocket:
    """Socket that yields its frames and then stays open until closed."""

    def __init__(self, frames=()):
        self.frames = list(frames)
        self.closed = False
        self._closed_event = asyncio.Event()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for raw in self.frames:
            yield raw
        await self._closed_event.wait()

    async def close(self):
        self.closed = True
        self._closed_event.set()


class FakeConnector:
    """Hands out one scripted socket per connection."""

    def __init__(self, *frame_lists):
        self.frame_lists = list(frame_lists)
        self.sockets = []

    async def __call__(self, url, **kwargs):
        frames = self.frame_lists.pop(0) if self.frame_lists else ()
        socket = FakeSocket(frames)
        self.sockets.append(socket)
        return socket


class TestGameWindow(unittest.IsolatedAsyncioTestCase):
    """GameWindow against a mock REST server and a fake event socket."""

    async def asyncSetUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.settings = ClientSettings(
            api_url="http://game.test", sounds_dir=Path(self.temp_dir.name)
        )
        self.session = SessionContext(token="secret", user=User(id="u1", username="me"))
        self.api = ApiClient(
            self.session, self.settings, transport=httpx.MockTransport(self.handle)
        )
        self.transaction_pages = [[]]
        self.transaction_requests = 0
        self.on_transactions = None
        self.window = None

    async def asyncTearDown(self):
        if self.window is not None:
            await self.window.shutdown()
            self.window.deleteLater()
        else:
            await self.api.close()
        self.temp_dir.cleanup()

    def handle(self, request: httpx.Request) -> httpx.Response:
        base = f"/games/{GAME_ID}"
        path = request.url.path
        if path == base:
            return httpx.Response(200, json={"id": GAME_ID, "status": "ACTIVE"})
        if path == f"{base}/participants":
            return httpx.Response(200, json=[
                {"id": "p1", "user_id": "u1", "game_id": GAME_ID, "username": "me", "balance": "1500.00"},
            ])
        if path == f"{base}/transactions":
            self.transaction_requests += 1
            page = self.transaction_pages.pop(0) if len(self.transaction_pages) > 1 else self.transaction_pages[0]
            if self.on_transactions is not None:
                callback, self.on_transactions = self.on_transactions, None
                callback()
            return httpx.Response(200, json=page)
        if path == f"{base}/trades":
            return httpx.Response(200, json=[])
        if path == f"{base}/auctions":
            return httpx.Response(204)
        return httpx.Response(404, json={"message": "Not found"})

    def make_window(self, *frame_lists) -> GameWindow:
        self.window = GameWindow(
            GAME_ID, self.session, config=self.settings, api=self.api,
            connector=FakeConnector(*frame_lists),
        )
        return self.window

    async def wait_for(self, predicate, rounds: int = 500) -> None:
        for _ in range(rounds):
            if predicate():
                return
            await asyncio.sleep(0)
        self.fail("condition not reached")

    def bank_text(self) -> str:
        return self.window._bank_label.text()

    async def test_transaction_event_refreshes_bank_balance(self):
        payout = {"id": "t1", "game_id": GAME_ID, "to_participant_id": "p1", "amount": "199.99"}
        self.transaction_pages = [[], [payout]]
        created = json.dumps({"type": "TransactionCreated", "payload": payout})
        window = self.make_window([created])

        await window.start()
        await self.wait_for(lambda: self.bank_text() == "Bank: $20,380.01")

        self.assertEqual(self.transaction_requests, 2)
        self.assertEqual(window._connection_label.text(), "Live")

    async def test_invalidation_during_refresh_runs_it_again(self):
        payout = {"id": "t1", "game_id": GAME_ID, "to_participant_id": "p1", "amount": 200}
        window = self.make_window()
        await window.start()
        self.assertEqual(self.bank_text(), "Bank: $20,580")
        self.assertEqual(self.transaction_requests, 1)

        # The payout lands while the refetch is still waiting on the old page
        self.transaction_pages = [[], [payout]]
        self.on_transactions = lambda: window.cache.invalidate(QueryKey.TRANSACTIONS, GAME_ID)
        window.cache.invalidate(QueryKey.TRANSACTIONS, GAME_ID)

        await self.wait_for(lambda: self.bank_text() == "Bank: $20,380")
        self.assertEqual(self.transaction_requests, 3)
        self.assertFalse(window.cache.is_stale(QueryKey.TRANSACTIONS, GAME_ID))


def run_tests():
    """Run all GUI tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for test_class in [TestDescribeEvent, TestWidgets, TestSoundPlayer, TestGameWindow]:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_tests()
    sys.exit(0 if success else 1)
