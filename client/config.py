"""
Client configuration settings.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from shared.constants import INITIAL_BANK_BALANCE

load_dotenv()


@dataclass
class ClientSettings:
    """Client configuration."""

    # REST API base; the event stream URL is derived from it
    api_url: str = "http://localhost:8080"
    request_timeout: float = 10.0

    # Event stream keepalive
    ping_interval: float = 30.0
    ping_timeout: float = 10.0

    # Reconnection settings (0 attempts = retry forever)
    reconnect_attempts: int = 0
    reconnect_base_delay: float = 1.0
    reconnect_max_delay: float = 30.0
    reconnect_jitter: float = 0.5

    # Game economy
    initial_bank_balance: int = INITIAL_BANK_BALANCE

    # Local files
    session_file: Path = Path.home() / ".monopoly" / "session.json"
    sounds_dir: Path = Path(__file__).parent / "sounds"

    # UI settings
    window_width: int = 960
    window_height: int = 640
    log_level: str = "INFO"


def load_settings() -> ClientSettings:
    """Load settings from environment variables."""
    defaults = ClientSettings()
    return ClientSettings(
        api_url=os.getenv("MONOPOLY_API_URL", defaults.api_url),
        request_timeout=float(os.getenv("MONOPOLY_REQUEST_TIMEOUT", defaults.request_timeout)),
        ping_interval=float(os.getenv("MONOPOLY_PING_INTERVAL", defaults.ping_interval)),
        ping_timeout=float(os.getenv("MONOPOLY_PING_TIMEOUT", defaults.ping_timeout)),
        reconnect_attempts=int(os.getenv("MONOPOLY_RECONNECT_ATTEMPTS", defaults.reconnect_attempts)),
        reconnect_base_delay=float(os.getenv("MONOPOLY_RECONNECT_BASE_DELAY", defaults.reconnect_base_delay)),
        reconnect_max_delay=float(os.getenv("MONOPOLY_RECONNECT_MAX_DELAY", defaults.reconnect_max_delay)),
        reconnect_jitter=float(os.getenv("MONOPOLY_RECONNECT_JITTER", defaults.reconnect_jitter)),
        initial_bank_balance=int(os.getenv("MONOPOLY_INITIAL_BANK_BALANCE", defaults.initial_bank_balance)),
        session_file=Path(os.getenv("MONOPOLY_SESSION_FILE", defaults.session_file)),
        sounds_dir=Path(os.getenv("MONOPOLY_SOUNDS_DIR", defaults.sounds_dir)),
        window_width=int(os.getenv("MONOPOLY_WINDOW_WIDTH", defaults.window_width)),
        window_height=int(os.getenv("MONOPOLY_WINDOW_HEIGHT", defaults.window_height)),
        log_level=os.getenv("MONOPOLY_LOG_LEVEL", defaults.log_level),
    )


settings = load_settings()
