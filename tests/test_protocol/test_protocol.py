"""
Tests for the event protocol and the server entity models.

Run with: python3 tests/test_protocol/test_protocol.py
"""

import json
import sys
import unittest
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from shared.enums import EventType, GameStatus, TradeStatus
from shared.models import GameSession, Participant, Trade, Transaction, parse_server_date, to_money
from shared.protocol import (
    DiceRolled,
    GameUpdated,
    ProtocolError,
    TransactionCreated,
    UnknownEvent,
    event_type_of,
    parse_event,
)


def frame(event_type: str, payload) -> str:
    return json.dumps({"type": event_type, "payload": payload})


class TestParseEvent(unittest.TestCase):
    """Frames to event variants."""

    def test_transaction_created(self):
        event = parse_event(frame("TransactionCreated", {
            "id": "t1",
            "game_id": "g1",
            "from_participant_id": None,
            "to_participant_id": "p1",
            "amount": "200.00",
            "created_at": "2026-01-04 22:30:58.641961 +00:00",
        }))

        self.assertIsInstance(event, TransactionCreated)
        self.assertEqual(event_type_of(event), EventType.TRANSACTION_CREATED)
        self.assertEqual(event.payload.amount, 200)
        self.assertTrue(event.payload.is_bank_payout)
        self.assertEqual(event.payload.created_at.utcoffset(), timedelta(0))
        self.assertEqual(event.payload.created_at.microsecond, 641961)

    def test_dice_rolled(self):
        event = parse_event(frame("DiceRolled", {
            "id": "r1", "game_id": "g1", "user_id": "u1",
            "dice_count": 2, "dice_sides": 6, "results": [3, 3], "total": 6,
        }))
        self.assertIsInstance(event, DiceRolled)
        self.assertTrue(event.payload.is_double)

    def test_game_updated(self):
        event = parse_event(frame("GameUpdated", {"id": "g1", "status": "FINISHED"}))
        self.assertIsInstance(event, GameUpdated)
        self.assertEqual(event.payload.status, GameStatus.FINISHED)

    def test_unknown_type_is_kept(self):
        event = parse_event(frame("ConfettiLaunched", {"color": "gold"}))
        self.assertIsInstance(event, UnknownEvent)
        self.assertEqual(event.type, "ConfettiLaunched")
        self.assertEqual(event.payload, {"color": "gold"})
        self.assertIsNone(event_type_of(event))

    def test_extra_payload_fields_ignored(self):
        event = parse_event(frame("GameUpdated", {"id": "g1", "status": "ACTIVE", "extra": 1}))
        self.assertEqual(event.payload.status, GameStatus.ACTIVE)

    def test_bytes_frame(self):
        raw = frame("GameUpdated", {"id": "g1", "status": "PAUSED"}).encode("utf-8")
        self.assertIsInstance(parse_event(raw), GameUpdated)


class TestProtocolErrors(unittest.TestCase):
    """Frames that cannot become events."""

    def test_bad_json(self):
        with self.assertRaises(ProtocolError) as ctx:
            parse_event("{not json")
        self.assertIsNone(ctx.exception.event_type)

    def test_not_an_object(self):
        with self.assertRaises(ProtocolError):
            parse_event("[1, 2, 3]")

    def test_missing_type(self):
        with self.assertRaises(ProtocolError) as ctx:
            parse_event(json.dumps({"payload": {}}))
        self.assertIsNone(ctx.exception.event_type)

    def test_invalid_payload_keeps_type(self):
        with self.assertRaises(ProtocolError) as ctx:
            parse_event(frame("DiceRolled", {"id": "r1"}))
        self.assertEqual(ctx.exception.event_type, EventType.DICE_ROLLED)


class TestModels(unittest.TestCase):
    """Coercions applied to server rows."""

    def test_money_from_decimal_string(self):
        self.assertEqual(to_money("1500.00"), 1500)
        self.assertEqual(to_money(12.0), 12)
        self.assertEqual(to_money(7), 7)

    def test_money_keeps_cents(self):
        self.assertEqual(to_money("0.50"), Decimal("0.50"))
        self.assertEqual(to_money(0.1), Decimal("0.1"))
        tx = Transaction(id="t1", game_id="g1", to_participant_id="p1", amount="199.99")
        self.assertEqual(tx.amount, Decimal("199.99"))

    def test_cancelled_game_is_over(self):
        event = parse_event(frame("GameUpdated", {"id": "g1", "status": "CANCELLED"}))
        self.assertIsInstance(event, GameUpdated)
        self.assertEqual(event.payload.status, GameStatus.CANCELLED)
        self.assertTrue(GameSession(id="g1", status="CANCELLED").is_over)
        self.assertFalse(GameSession(id="g1", status="ACTIVE").is_over)

    def test_server_date_without_offset_is_utc(self):
        self.assertEqual(parse_server_date("2026-01-04 10:00:00"), "2026-01-04T10:00:00Z")
        self.assertEqual(parse_server_date("2026-01-04T10:00:00Z"), "2026-01-04T10:00:00Z")

    def test_position_wraps_board(self):
        p = Participant(id="p1", user_id="u1", game_id="g1", position=42)
        self.assertEqual(p.position, 2)

    def test_display_name(self):
        named = Participant(id="p1", user_id="u1", game_id="g1", first_name="Ana", last_name="Ruiz")
        self.assertEqual(named.display_name, "Ana Ruiz")
        bare = Participant(id="p2", user_id="u2", game_id="g1", username="ana")
        self.assertEqual(bare.display_name, "ana")

    def test_trade_id_lists_unwrap(self):
        trade = Trade.model_validate({
            "id": "tr1", "game_id": "g1", "initiator_id": "p1", "target_id": "p2",
            "offer_properties": {"0": ["prop-a", "prop-b"]},
            "request_properties": None,
            "status": "PENDING",
        })
        self.assertEqual(trade.offer_properties, ["prop-a", "prop-b"])
        self.assertEqual(trade.request_properties, [])
        self.assertEqual(trade.status, TradeStatus.PENDING)
        self.assertFalse(trade.is_terminal)

    def test_transaction_sides(self):
        receipt = Transaction(id="t1", game_id="g1", from_participant_id="p1", amount=50)
        self.assertTrue(receipt.is_bank_receipt)
        self.assertTrue(receipt.involves("p1"))
        self.assertFalse(receipt.involves("p2"))

        between = Transaction(
            id="t2", game_id="g1", from_participant_id="p1", to_participant_id="p2", amount=5
        )
        self.assertFalse(between.involves_bank)


def run_tests():
    """Run all protocol tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    test_classes = [
        TestParseEvent,
        TestProtocolErrors,
        TestModels,
    ]

    for test_class in test_classes:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_tests()
    sys.exit(0 if success else 1)
