"""
agrotelemetry/connectivity/sources.py
─────────────────────────────────────
In-process event sources following the transport subscription contract:

  source.subscribe(callback) -> unsubscribe

StateSource   replays its current value to each new subscriber and only
              notifies on change (transport reachability).
StreamSource  forwards every pushed value, duplicates included (heartbeats).
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class EventSource(Protocol):
    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe: ...


class StreamSource:
    """Fan-out of every pushed value to the current subscribers."""

    def __init__(self, name: str = "stream"):
        self.name = name
        self._lock = threading.Lock()
        self._subscribers: list[Callable[[Any], None]] = []

    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def push(self, value: Any) -> None:
        with self._lock:
            targets = list(self._subscribers)
        for callback in targets:
            callback(value)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


class StateSource(StreamSource):
    """A stream that holds a current value."""

    def __init__(self, initial: Any = None, name: str = "state"):
        super().__init__(name=name)
        self._value = initial

    @property
    def value(self) -> Any:
        return self._value

    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe:
        unsubscribe = super().subscribe(callback)
        callback(self._value)
        return unsubscribe

    def push(self, value: Any) -> None:
        with self._lock:
            if value == self._value:
                return
            self._value = value
        logger.debug("%s changed to %r", self.name, value)
        super().push(value)
