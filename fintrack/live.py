"""Snapshot channels connecting the store to the report pipeline.

The store publishes a :class:`Snapshot` of a user's collection after every
write.  Consumers subscribe with a callable and receive the current
snapshot immediately, then each new one.  :class:`LiveReport` is the
standard consumer: it rebuilds the report for every snapshot and keeps only
the newest result.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

from .aggregation import InsightThresholds
from .filters import Clock
from .reports import Report, build_report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Full contents of one collection at a point in time.

    A failed read is delivered as an empty snapshot carrying the error.
    """
    records: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


Listener = Callable[[Snapshot], Any]


class Subscription:
    """Handle returned by ``subscribe``; call :meth:`unsubscribe` to stop delivery."""

    def __init__(self, channel: Optional['SnapshotChannel'] = None, listener: Optional[Listener] = None):
        self._channel = channel
        self._listener = listener
        self._active = channel is not None and listener is not None

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._channel._remove(self)

    def _deliver(self, snapshot: Snapshot) -> None:
        if self._active:
            self._listener(snapshot)


class SnapshotChannel:
    """Fan-out of snapshots to the current subscribers.

    ``on_empty`` is called with the channel after its last subscriber leaves.
    """

    def __init__(self, name: str = 'snapshots', on_empty: Optional[Callable[['SnapshotChannel'], Any]] = None):
        self.name = name
        self._on_empty = on_empty
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self, listener: Listener, initial: Optional[Snapshot] = None) -> Subscription:
        """Register ``listener``; ``initial`` is delivered to it straight away."""
        subscription = self._register(listener)
        if initial is not None:
            subscription._deliver(initial)
        return subscription

    def publish(self, snapshot: Snapshot) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        logger.debug("Publishing %d records on %s to %d subscribers",
                     len(snapshot.records), self.name, len(subscriptions))
        for subscription in subscriptions:
            subscription._deliver(snapshot)

    def _register(self, listener: Listener) -> Subscription:
        subscription = Subscription(self, listener)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
            empty = not self._subscriptions
        if empty and self._on_empty is not None:
            self._on_empty(self)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)


_channels: Dict[Hashable, SnapshotChannel] = {}
_channels_lock = threading.Lock()


def _drop_if_empty(key: Hashable, channel: SnapshotChannel) -> None:
    with _channels_lock:
        if _channels.get(key) is channel and not len(channel):
            del _channels[key]
            logger.debug("Dropped idle channel %s", channel.name)


def subscribe_channel(key: Hashable, listener: Listener, initial: Optional[Snapshot] = None) -> Subscription:
    """Subscribe to the process-wide channel for ``key``, creating it on first use.

    Store handles are rebuilt on every Streamlit rerun; sharing channels by
    key lets a write from one handle reach subscribers of another.  A channel
    leaves the registry once its last subscriber unsubscribes.
    """
    with _channels_lock:
        channel = _channels.get(key)
        if channel is None:
            channel = SnapshotChannel(name=str(key), on_empty=lambda idle: _drop_if_empty(key, idle))
            _channels[key] = channel
        subscription = channel._register(listener)
    if initial is not None:
        subscription._deliver(initial)
    return subscription


def publish_channel(key: Hashable, snapshot: Snapshot) -> None:
    """Publish to the channel for ``key``; a key nobody listens to is skipped."""
    with _channels_lock:
        channel = _channels.get(key)
    if channel is not None:
        channel.publish(snapshot)


class LiveReport:
    """Rebuilds a :class:`Report` for every snapshot it receives.

    A snapshot arriving while an earlier one is still being processed
    supersedes it: the earlier result is dropped and only the newest report
    is kept and handed to ``on_report``.
    """

    def __init__(
        self,
        range_spec: Any = 'all',
        categories: Optional[Sequence[Any]] = None,
        clock: Optional[Clock] = None,
        thresholds: Optional[InsightThresholds] = None,
        on_report: Optional[Callable[[Report], Any]] = None,
    ):
        self.range_spec = range_spec
        self.categories = categories
        self.clock = clock
        self.thresholds = thresholds
        self.on_report = on_report
        self.report: Optional[Report] = None
        self.error: Optional[Exception] = None
        self._snapshot = Snapshot()
        self._generation = 0
        self._lock = threading.Lock()

    def __call__(self, snapshot: Snapshot) -> Optional[Report]:
        return self.push(snapshot)

    def push(self, snapshot: Snapshot) -> Optional[Report]:
        """Recompute for ``snapshot``; returns ``None`` when a newer push won."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._snapshot = snapshot

        report = build_report(
            snapshot.records,
            self.range_spec,
            categories=self.categories,
            clock=self.clock,
            thresholds=self.thresholds,
        )

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale report for generation %d", generation)
                return None
            self.report = report
            self.error = snapshot.error

        if self.on_report is not None:
            self.on_report(report)
        return report

    def update(self, range_spec: Any = None, categories: Optional[Sequence[Any]] = None) -> Optional[Report]:
        """Change the range or category list and recompute from the last snapshot."""
        if range_spec is not None:
            self.range_spec = range_spec
        if categories is not None:
            self.categories = categories
        return self.push(self._snapshot)
