"""Shared key-value slots holding the serialized authoritative state."""

from __future__ import annotations

import hashlib
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable
from pathlib import Path

logger = logging.getLogger(__name__)

StoreListener = Callable[[object | None], None]


class StateStore(ABC):
    """One persisted slot. Writes replace the whole payload (last write wins).

    Listeners registered with :meth:`listen` receive the storage-change signal
    for writes made through this store object, tagged with the writer's origin.
    """

    def __init__(self) -> None:
        self._listeners: list[StoreListener] = []

    @abstractmethod
    def read(self) -> str | None:
        """Return the stored payload, or None when the slot is empty."""

    @abstractmethod
    def _write(self, payload: str) -> None: ...

    @abstractmethod
    def revision(self) -> Hashable | None:
        """Cheap change marker; differs whenever the payload was rewritten."""

    def write(self, payload: str, origin: object | None = None) -> None:
        self._write(payload)
        for listener in tuple(self._listeners):
            listener(origin)

    def listen(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def unlisten(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


class MemoryStateStore(StateStore):
    """In-process slot shared by several game instances."""

    def __init__(self, payload: str | None = None) -> None:
        super().__init__()
        self._payload = payload
        self._revision = 0 if payload is None else 1

    def read(self) -> str | None:
        return self._payload

    def _write(self, payload: str) -> None:
        self._payload = payload
        self._revision += 1

    def revision(self) -> int:
        return self._revision

    def clear(self) -> None:
        self._payload = None
        self._revision += 1


class FileStateStore(StateStore):
    """JSON file slot; separate processes see each other's writes by polling."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__()
        self.path = Path(path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            logger.exception("state_write_failed", extra={"path": str(self.path)})
            tmp_path.unlink(missing_ok=True)
            raise

    def revision(self) -> tuple[int, str] | None:
        """``(mtime_ns, sha256 of the contents)``, or None when the file is missing."""
        try:
            stat = self.path.stat()
            digest = hashlib.sha256(self.path.read_bytes()).hexdigest()
        except FileNotFoundError:
            return None
        return stat.st_mtime_ns, digest
