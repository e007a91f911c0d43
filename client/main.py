"""
Monopoly companion client entry point.

Opens the window for one game session with async support for network
operations.
"""

import sys
import asyncio
import argparse
import logging

from PyQt6.QtWidgets import QApplication

import qasync

from client.gui import GameWindow
from client.config import settings
from client.session import SessionContext
from shared.models import User


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Monopoly companion client")
    parser.add_argument("game_id", help="Game session to open")
    parser.add_argument("--token", help="Bearer token; defaults to the saved session")
    parser.add_argument("--user-id", help="Local user id when no profile is saved")
    return parser.parse_args(argv)


def build_session(args: argparse.Namespace) -> SessionContext:
    """Restore the saved session and apply command-line overrides."""
    session = SessionContext.load(settings.session_file)
    if args.token:
        session.login(session.user, args.token)
    if args.user_id and session.user is None:
        session.set_profile(User(id=args.user_id, username=args.user_id))
    return session


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(settings.log_level)

    session = build_session(args)
    if not session.is_authenticated:
        logging.getLogger(__name__).error("No saved session; pass --token")
        return 1

    # Create Qt application
    app = QApplication(sys.argv)
    app.setApplicationName("Monopoly")
    app.setOrganizationName("Monopoly")

    # Set up async event loop with Qt
    loop = qasync.QEventLoop(app)
    asyncio.set_event_loop(loop)

    # Create and show main window
    window = GameWindow(args.game_id, session)
    window.show()
    asyncio.ensure_future(window.start())

    # Run the event loop
    with loop:
        try:
            loop.run_forever()
        except KeyboardInterrupt:
            pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
