"""
Event dispatcher for the game socket.

Turns inbound frames into typed events, marks the cached read views each
event makes stale, then forwards the event to the caller's handler. The
server is the sole writer; every event names exactly which local views can
no longer be trusted.
"""

import logging
from typing import Callable, Optional

from client.state.cache import QueryCache
from shared.enums import EventType, QueryKey
from shared.protocol import GameEvent, ProtocolError, event_type_of, parse_event


logger = logging.getLogger(__name__)


EventHandler = Callable[[GameEvent], None]


INVALIDATIONS: dict[EventType, tuple[QueryKey, ...]] = {
    EventType.TRANSACTION_CREATED: (
        QueryKey.TRANSACTIONS, QueryKey.PARTICIPANTS, QueryKey.GAME,
    ),
    EventType.DICE_ROLLED: (QueryKey.DICE_ROLLS,),
    EventType.ROULETTE_SPUN: (QueryKey.ROULETTE_HISTORY,),
    EventType.SPECIAL_DICE_ROLLED: (QueryKey.SPECIAL_DICE_HISTORY,),
    EventType.PARTICIPANT_UPDATED: (QueryKey.PARTICIPANTS,),
    EventType.MARKET_UPDATED: (QueryKey.BOVEDA_MARKET,),
    EventType.TURN_UPDATED: (QueryKey.GAME, QueryKey.PARTICIPANTS),
    EventType.GAME_UPDATED: (QueryKey.GAME,),
    EventType.AUCTION_UPDATED: (QueryKey.ACTIVE_AUCTION, QueryKey.GAME_PROPERTIES),
    EventType.TRADE_UPDATED: (QueryKey.TRADES,),
    EventType.PROPERTY_UPDATED: (QueryKey.GAME_PROPERTIES,),
}


class EventDispatcher:
    """
    Maps event tags to cache invalidations and forwards events.

    dispatch() is synchronous on purpose: the invalidations and the
    handler's UI updates for one event finish before the next frame is
    read, so two events never interleave.
    """

    def __init__(self, cache: QueryCache, game_id: str):
        self._cache = cache
        self._game_id = game_id

    @property
    def game_id(self) -> str:
        return self._game_id

    def invalidate_for(self, event_type: EventType) -> None:
        """Mark stale every read view an event of this type affects."""
        for key in INVALIDATIONS.get(event_type, ()):
            self._cache.invalidate(key, self._game_id)

    def dispatch(
        self,
        raw: str | bytes,
        handler: Optional[EventHandler] = None,
    ) -> Optional[GameEvent]:
        """
        Handle one inbound frame.

        Returns:
            The parsed event, or None if the frame was dropped.
        """
        try:
            event = parse_event(raw)
        except ProtocolError as e:
            logger.error(f"Dropping frame: {e}")
            if e.event_type is not None:
                # Stale is always safe even when the payload is unreadable
                self.invalidate_for(e.event_type)
            return None

        event_type = event_type_of(event)
        if event_type is None:
            logger.debug(f"Unrecognised event type {event.type!r}, forwarding only")
        else:
            self.invalidate_for(event_type)

        if handler is not None:
            try:
                handler(event)
            except Exception as e:
                logger.exception(f"Event handler failed for {event.type}: {e}")

        return event

    def resync(self) -> None:
        """Mark every read view of the game stale after missed events."""
        logger.info(f"Resyncing all cached views for game {self._game_id}")
        self._cache.invalidate_game(self._game_id)
