"""Data storage layer."""

from app.storage.event_log import (
    EventLog,
    read_snapshot,
    registration_summary,
)
from app.storage import cache

__all__ = [
    "EventLog",
    "read_snapshot",
    "registration_summary",
    "cache",
]
