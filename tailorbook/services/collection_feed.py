from __future__ import annotations

import logging
from typing import Callable, Generic, List, Sequence, TypeVar

T = TypeVar("T")

Listener = Callable[[List[T]], None]

logger = logging.getLogger(__name__)


class CollectionFeed(Generic[T]):
    """Delivers whole-collection snapshots to subscribers.

    Listeners always receive the complete list; nothing is diffed or merged.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: List[Listener] = []

    @property
    def name(self) -> str:
        return self._name

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, snapshot: Sequence[T]) -> None:
        records = list(snapshot)
        logger.debug("Publishing %d %s to %d listener(s)", len(records), self._name, len(self._listeners))
        for listener in list(self._listeners):
            listener(list(records))

    def clear(self) -> None:
        self._listeners.clear()
