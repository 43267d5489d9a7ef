# Overview: In-process change feed so clients can learn that a collection changed.

"""
Change feed.

One ChangeFeed per application (created by create_app, stored in
app.extensions["change_feed"]). Services publish the collection name after
a successful commit; subscribers get the name and the new revision only,
never a diff, and re-read whatever they need. Polling clients use the
revision counters exposed by GET /api/system/changes.
"""

from __future__ import annotations

import threading

from blinker import Signal
from flask import current_app


COLLECTIONS = (
    "products",
    "stock_movements",
    "regions",
    "logistics_partners",
    "orders",
    "leads",
    "carts",
    "users",
)


class ChangeFeed:
    def __init__(self):
        self.collection_changed = Signal("collection_changed")
        self._revisions = {name: 0 for name in COLLECTIONS}
        self._lock = threading.Lock()

    def subscribe(self, callback):
        """
        Register callback(sender, collection=..., revision=...).

        Returns a zero-argument callable that unsubscribes it.
        """
        self.collection_changed.connect(callback, weak=False)

        def _unsubscribe():
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback) -> None:
        self.collection_changed.disconnect(callback)

    def revision(self, collection: str) -> int:
        with self._lock:
            return self._revisions.get(collection, 0)

    def revisions(self) -> dict[str, int]:
        with self._lock:
            return dict(self._revisions)

    def publish(self, collection: str) -> int:
        with self._lock:
            rev = self._revisions.get(collection, 0) + 1
            self._revisions[collection] = rev

        # Subscriber failures are logged only; the write is already committed
        for receiver in list(self.collection_changed.receivers_for(self)):
            try:
                receiver(self, collection=collection, revision=rev)
            except Exception:
                current_app.logger.exception("Change feed subscriber failed for %s", collection)
        return rev


def publish_change(*collections: str) -> None:
    """Publish on the current app's feed. Call only after commit."""
    feed = current_app.extensions["change_feed"]
    for name in collections:
        feed.publish(name)
