"""
WebSocket client for a game's event stream.

Keeps exactly one live socket per observed game, reconnects with
exponential backoff, and feeds every frame to the event dispatcher.
Uses Qt signals to communicate with the GUI thread.
"""

import asyncio
import logging
import random
import re
from enum import Enum, auto
from typing import Any, Awaitable, Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

import websockets

from client.config import ClientSettings, settings as default_settings
from client.network.dispatcher import EventDispatcher, EventHandler
from client.state.cache import QueryCache


logger = logging.getLogger(__name__)


Connector = Callable[..., Awaitable[Any]]


class ConnectionState(Enum):
    """Connection state."""
    CONNECTING = auto()
    OPEN = auto()
    BACKOFF = auto()
    CLOSED = auto()


def stream_url(api_url: str, game_id: str) -> str:
    """Event stream URL for a game: http(s)://host -> ws(s)://host/ws?game_id=..."""
    base = re.sub(r"^http", "ws", api_url.rstrip("/"))
    return f"{base}/ws?game_id={game_id}"


class GameEventStream(QObject):
    """
    Live event stream for one game at a time.

    Emits Qt signals for GUI updates:
    - connection_changed: Connection state changed
    - event_received: A parsed event was dispatched
    - resynced: Reconnected after a drop; every cached view was flushed
    - error_occurred: Error happened
    """

    # Qt Signals
    connection_changed = pyqtSignal(ConnectionState)
    event_received = pyqtSignal(object)
    resynced = pyqtSignal(str)
    error_occurred = pyqtSignal(str)

    def __init__(
        self,
        cache: QueryCache,
        config: Optional[ClientSettings] = None,
        connector: Optional[Connector] = None,
        parent=None,
    ):
        super().__init__(parent)

        self._cache = cache
        self._settings = config or default_settings
        self._connector = connector or websockets.connect

        self._state = ConnectionState.CLOSED
        self._game_id: Optional[str] = None
        self._handler: Optional[EventHandler] = None

        self._websocket: Any = None
        self._run_task: Optional[asyncio.Task] = None
        # Serializes open/close so a reopen never races a pending close
        self._lifecycle_lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def game_id(self) -> Optional[str]:
        return self._game_id

    @property
    def is_open(self) -> bool:
        return self._state == ConnectionState.OPEN

    def _set_state(self, state: ConnectionState) -> None:
        """Update connection state and emit signal."""
        if self._state != state:
            self._state = state
            self.connection_changed.emit(state)

    def set_handler(self, handler: Optional[EventHandler]) -> None:
        """Replace the forwarded handler; the socket is left alone."""
        self._handler = handler

    def _forward(self, event) -> None:
        # Read at dispatch time so handler swaps apply to the next frame
        if self._handler is not None:
            self._handler(event)
        self.event_received.emit(event)

    async def open(self, game_id: str) -> None:
        """
        Start streaming events for a game.

        Reopening the game already being streamed is a no-op; switching to
        another game closes the previous socket before the new one opens.
        """
        async with self._lifecycle_lock:
            if game_id == self._game_id and self._run_task and not self._run_task.done():
                return

            await self._shutdown()

            dispatcher = EventDispatcher(self._cache, game_id)
            self._game_id = game_id
            self._run_task = asyncio.create_task(self._run(game_id, dispatcher))

    async def close(self) -> None:
        """Stop streaming and close the socket."""
        async with self._lifecycle_lock:
            await self._shutdown()

    async def _shutdown(self) -> None:
        task, self._run_task = self._run_task, None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.exception(f"Event stream task failed: {e}")

        await self._close_socket()

        if self._game_id is not None:
            logger.info(f"Event stream for game {self._game_id} closed")
        self._game_id = None
        self._set_state(ConnectionState.CLOSED)

    async def _close_socket(self) -> None:
        websocket, self._websocket = self._websocket, None
        if websocket is not None:
            try:
                await websocket.close()
            except Exception as e:
                logger.warning(f"Error closing socket: {e}")

    def backoff_delay(self, attempt: int) -> float:
        """Exponential delay with random jitter for a retry attempt (0-based)."""
        cfg = self._settings
        delay = min(cfg.reconnect_max_delay, cfg.reconnect_base_delay * (2 ** attempt))
        return delay + random.uniform(0, delay * cfg.reconnect_jitter)

    async def _run(self, game_id: str, dispatcher: EventDispatcher) -> None:
        """Connect, read, and reconnect until closed or out of attempts."""
        url = stream_url(self._settings.api_url, game_id)
        attempt = 0
        connected_before = False

        while True:
            self._set_state(ConnectionState.CONNECTING)
            logger.info(f"Connecting to event stream: {url}")

            try:
                self._websocket = await self._connector(
                    url,
                    ping_interval=self._settings.ping_interval,
                    ping_timeout=self._settings.ping_timeout,
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Event stream connection failed: {e}")
            else:
                self._set_state(ConnectionState.OPEN)
                logger.info(f"Event stream connected for game {game_id}")
                attempt = 0

                if connected_before:
                    dispatcher.resync()
                    self.resynced.emit(game_id)
                connected_before = True

                await self._receive_loop(dispatcher)
                await self._close_socket()
                logger.info(f"Event stream for game {game_id} disconnected")

            limit = self._settings.reconnect_attempts
            if limit and attempt >= limit:
                logger.error(f"Giving up on event stream after {attempt} attempts")
                self._set_state(ConnectionState.CLOSED)
                self.error_occurred.emit("Lost connection to game updates")
                return

            delay = self.backoff_delay(attempt)
            attempt += 1
            self._set_state(ConnectionState.BACKOFF)
            logger.info(f"Reconnecting in {delay:.1f}s (attempt {attempt})")
            await asyncio.sleep(delay)

    async def _receive_loop(self, dispatcher: EventDispatcher) -> None:
        """Read frames until the socket closes."""
        try:
            async for raw_message in self._websocket:
                dispatcher.dispatch(raw_message, self._forward)
        except websockets.ConnectionClosed as e:
            logger.info(f"Connection closed by server: {e}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Receive loop error: {e}")
