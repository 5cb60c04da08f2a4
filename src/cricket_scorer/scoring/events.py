"""Commit notifications for innings subscribers."""

import threading
from collections import defaultdict
from typing import Callable, Dict, List

from loguru import logger

from ..schemas import InningsSnapshot

SnapshotCallback = Callable[[InningsSnapshot], None]


class Subscription:
    """Handle returned by ``SnapshotBus.subscribe``."""
    
    def __init__(self, bus: "SnapshotBus", innings_id: int, callback: SnapshotCallback):
        self._bus = bus
        self.innings_id = innings_id
        self.callback = callback
        self.active = True
    
    def cancel(self) -> None:
        if self.active:
            self._bus._remove(self)
            self.active = False


class SnapshotBus:
    """In-process fan-out of innings snapshots, delivered after commit."""
    
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[int, List[Subscription]] = defaultdict(list)
    
    def subscribe(self, innings_id: int, callback: SnapshotCallback) -> Subscription:
        subscription = Subscription(self, innings_id, callback)
        with self._lock:
            self._subscribers[innings_id].append(subscription)
        return subscription
    
    def publish(self, snapshot: InningsSnapshot) -> int:
        """Deliver a snapshot; returns the number of subscribers reached.
        
        A failing subscriber is logged and skipped. Delivery is not part of
        the commit, which has already happened.
        """
        with self._lock:
            targets = list(self._subscribers.get(snapshot.innings.id, ()))
        
        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(snapshot)
                delivered += 1
            except Exception:
                logger.exception(f"Subscriber for innings {snapshot.innings.id} failed")
        return delivered
    
    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.innings_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
