"""
Client-side state: the read-through cache, derived values, and the
turn/notification coordinator.
"""

from client.state.cache import QueryCache
from client.state.coordinator import TurnNotificationCoordinator
from client.state.derived import (
    bank_balance,
    bank_logs,
    can_build,
    is_double,
    owns_monopoly,
    participant_flows,
    space_name,
)


__all__ = [
    "QueryCache",
    "TurnNotificationCoordinator",
    "bank_balance",
    "bank_logs",
    "can_build",
    "is_double",
    "owns_monopoly",
    "participant_flows",
    "space_name",
]
