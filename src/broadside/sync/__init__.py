"""Persistence and cross-instance synchronisation of the authoritative game state."""

from __future__ import annotations

from .channel import Subscription, SyncChannel
from .schema import GameSnapshot
from .store import FileStateStore, MemoryStateStore, StateStore

__all__ = [
    "FileStateStore",
    "GameSnapshot",
    "MemoryStateStore",
    "StateStore",
    "Subscription",
    "SyncChannel",
]
