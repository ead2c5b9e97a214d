"""Change notification and reconciliation across display instances."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import ValidationError

from broadside.telemetry import get_meter, get_tracer

from .schema import GameSnapshot
from .store import StateStore

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.sync.channel")
meter = get_meter("broadside.sync.channel")

PUBLISH_COUNTER = meter.create_counter(
    "broadside_sync_publishes",
    unit="1",
    description="Full-state writes to the shared slot",
)

LOAD_COUNTER = meter.create_counter(
    "broadside_sync_loads",
    unit="1",
    description="Reads of the shared slot, by outcome",
)

ChangeListener = Callable[[], None]


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class Subscription:
    id: int


class SyncChannel:
    """Publishes snapshots to a store and tells subscribers to reload.

    Notifications carry no payload. They fire on a local publish, on a
    storage-change signal from another instance sharing the store object, and
    from :meth:`poll` when the stored revision moved since it was last seen.
    How often to poll is left to the caller.
    """

    def __init__(self, store: StateStore, clock: Callable[[], int] = _wall_clock_ms) -> None:
        self.store = store
        self._clock = clock
        self._next_id = 1
        self._subscribers: dict[int, ChangeListener] = {}
        self._last_update = 0
        self._seen_revision = store.revision()
        store.listen(self._on_store_signal)

    @property
    def last_update(self) -> int:
        """Highest ``lastUpdate`` this channel has written or loaded."""
        return self._last_update

    def subscribe(self, listener: ChangeListener) -> Subscription:
        sub_id = self._next_id
        self._next_id += 1
        self._subscribers[sub_id] = listener
        return Subscription(sub_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscribers.pop(subscription.id, None)

    def close(self) -> None:
        self._subscribers.clear()
        self.store.unlisten(self._on_store_signal)

    def publish(self, snapshot: GameSnapshot) -> GameSnapshot:
        """Stamp, write and announce a full snapshot."""
        with tracer.start_as_current_span("sync.publish") as span:
            stamp = max(self._clock(), self._last_update + 1)
            stamped = snapshot.model_copy(update={"last_update": stamp})
            self.store.write(stamped.to_json(), origin=self)
            self._last_update = stamp
            self._seen_revision = self.store.revision()
            span.set_attribute("sync.last_update", stamp)
            PUBLISH_COUNTER.add(1)
            logger.debug(
                "state_published",
                extra={"last_update": stamp, "game_state": stamped.game_state},
            )
        self._notify()
        return stamped

    def load(self) -> GameSnapshot | None:
        """Read the slot; a missing or malformed payload counts as no state."""
        with tracer.start_as_current_span("sync.load") as span:
            try:
                raw = self.store.read()
            except UnicodeDecodeError as exc:
                logger.warning("state_malformed", extra={"error": str(exc)})
                span.set_attribute("sync.outcome", "malformed")
                LOAD_COUNTER.add(1, attributes={"outcome": "malformed"})
                return None
            except OSError:
                logger.exception("state_read_failed")
                LOAD_COUNTER.add(1, attributes={"outcome": "error"})
                return None
            if raw is None:
                span.set_attribute("sync.outcome", "empty")
                LOAD_COUNTER.add(1, attributes={"outcome": "empty"})
                return None
            try:
                snapshot = GameSnapshot.from_json(raw)
            except ValidationError as exc:
                logger.warning("state_malformed", extra={"errors": exc.error_count()})
                span.set_attribute("sync.outcome", "malformed")
                LOAD_COUNTER.add(1, attributes={"outcome": "malformed"})
                return None
            self._last_update = max(self._last_update, snapshot.last_update)
            span.set_attribute("sync.outcome", "loaded")
            span.set_attribute("sync.last_update", snapshot.last_update)
            LOAD_COUNTER.add(1, attributes={"outcome": "loaded"})
            return snapshot

    def poll(self) -> bool:
        """Notify subscribers if the slot changed since last seen."""
        revision = self.store.revision()
        if revision == self._seen_revision:
            return False
        self._seen_revision = revision
        logger.debug("state_change_polled", extra={"revision": str(revision)})
        self._notify()
        return True

    def _on_store_signal(self, origin: object | None) -> None:
        if origin is self:
            return
        self._seen_revision = self.store.revision()
        self._notify()

    def _notify(self) -> None:
        for listener in tuple(self._subscribers.values()):
            listener()
