from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Protocol


class PinStore(Protocol):
    """
    Document store for user map pins.

    The redlining query paths never touch this; it only backs the pin endpoints.
    """

    def add_document(self, owner_id: str, doc_id: str, data: dict[str, Any]) -> None: ...

    def get_all_pins(self) -> list[dict[str, Any]]: ...

    def clear_user(self, owner_id: str) -> None: ...


@dataclass
class InMemoryPinStore(PinStore):
    """
    Process-local pin store (not persisted; pins are gone on restart).

    Pins are keyed by doc id, so re-adding an id overwrites the previous pin.
    """

    _pins: dict[str, dict[str, Any]] = field(default_factory=dict, repr=False)
    _owners: dict[str, str] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def add_document(self, owner_id: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._pins[doc_id] = dict(data)
            self._owners[doc_id] = owner_id

    def get_all_pins(self) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(p) for p in self._pins.values()]

    def clear_user(self, owner_id: str) -> None:
        with self._lock:
            doomed = [pid for pid, owner in self._owners.items() if owner == owner_id]
            for pid in doomed:
                self._pins.pop(pid, None)
                self._owners.pop(pid, None)
