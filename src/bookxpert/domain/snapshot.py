"""Observable in-memory catalogue snapshot."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .item import CatalogueItem

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[tuple[CatalogueItem, ...]], None]


@dataclass
class Subscription:
    """Handle returned by ``CatalogueSnapshot.subscribe``."""

    _snapshot: CatalogueSnapshot
    _token: int
    active: bool = field(default=True)

    def cancel(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        if self.active:
            self._snapshot._unsubscribe(self._token)
            self.active = False


class CatalogueSnapshot:
    """The last known good list of catalogue items.

    Every change replaces the whole tuple and emits it to all subscribers,
    so observers never see a partial mix of old and new items. Only the
    catalogue repository produces new values; everyone else subscribes.
    """

    def __init__(self, items: Iterable[CatalogueItem] = ()):
        self._items: tuple[CatalogueItem, ...] = tuple(items)
        self._subscribers: dict[int, SnapshotCallback] = {}
        self._tokens = itertools.count()

    @property
    def items(self) -> tuple[CatalogueItem, ...]:
        """Current snapshot value."""
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> CatalogueItem | None:
        """Find an item by id in the current snapshot."""
        return next((item for item in self._items if item.id == item_id), None)

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """Register a callback; it is called at once with the current value."""
        token = next(self._tokens)
        self._subscribers[token] = callback
        self._notify_one(callback)
        return Subscription(self, token)

    def _unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def publish(self, items: Iterable[CatalogueItem]) -> None:
        """Replace the whole snapshot."""
        self._items = tuple(items)
        self._notify()

    def replace(self, item: CatalogueItem) -> bool:
        """Replace the item with the same id, keeping its position."""
        for index, existing in enumerate(self._items):
            if existing.id == item.id:
                self.publish(self._items[:index] + (item,) + self._items[index + 1 :])
                return True
        return False

    def remove(self, item_id: str) -> bool:
        """Remove every item with the given id."""
        remaining = tuple(item for item in self._items if item.id != item_id)
        if len(remaining) == len(self._items):
            return False
        self.publish(remaining)
        return True

    def clear(self) -> None:
        """Publish an empty snapshot."""
        self.publish(())

    def _notify(self) -> None:
        for callback in list(self._subscribers.values()):
            self._notify_one(callback)

    def _notify_one(self, callback: SnapshotCallback) -> None:
        try:
            callback(self._items)
        except Exception:
            logger.exception("Snapshot subscriber raised; continuing with others")
