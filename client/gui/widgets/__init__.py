"""
GUI widgets for the companion client.
"""

from .event_log import EventLog
from .participant_list import ParticipantList

__all__ = [
    "EventLog",
    "ParticipantList",
]
