"""
Event Bus: in-process event distribution for decoupled observers.

Each owner (a trade options state machine, an order gateway) creates its own
bus; there is no module-level registry. Subscribers receive a Subscription
handle and cancel it with ``subscription.unsubscribe()``.

Features:
- Priority-based handler execution
- Optional per-subscription filter
- Error isolation (one handler failure doesn't stop others)
- Bounded event history for debugging
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Coroutine, Dict, List, Optional, Union

log = logging.getLogger("synthetics")


class EventType(Enum):
    """
    Event types supported by the event bus.

    Naming convention: NOUN_VERB for state changes.
    """
    TRADE_OPTIONS_CHANGED = auto()   # New trade options snapshot persisted
    TRADE_OPTIONS_CORRECTED = auto() # Reconciliation replaced stale selections
    PRICES_UPDATED = auto()          # New price snapshot fetched
    ORDER_SIMULATED = auto()         # Dry run passed
    ORDER_SUBMITTED = auto()         # Multicall handed to the signer
    ORDER_REJECTED = auto()          # Simulation revert
    ORDER_CANCELLED = auto()         # Signer rejected the request
    ORDER_FAILED = auto()            # Unexpected failure


@dataclass
class Event:
    """Event container: type, payload and creation time."""
    type: EventType
    data: Dict[str, Any]
    timestamp_ms: int = field(default_factory=lambda: int(time.time() * 1000))
    source: Optional[str] = None

    def __str__(self) -> str:
        return f"Event({self.type.name}, ts={self.timestamp_ms}, source={self.source})"


Handler = Union[
    Callable[[Event], Coroutine[Any, Any, None]],
    Callable[[Event], None],
]


@dataclass(eq=False)
class Subscription:
    """Handle returned by EventBus.subscribe; owned by the subscriber."""
    handler: Handler
    event_type: Optional[EventType] = None  # None = all events
    priority: int = 0  # Higher = called first
    filter_fn: Optional[Callable[[Event], bool]] = None
    name: Optional[str] = None
    bus: Optional["EventBus"] = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self.bus is not None

    def unsubscribe(self) -> bool:
        if self.bus is None:
            return False
        removed = self.bus.unsubscribe(self)
        self.bus = None
        return removed


class EventBus:
    """
    Synchronous dispatch with optional async handlers.

    Usage:
        bus = EventBus()
        sub = bus.subscribe(EventType.TRADE_OPTIONS_CHANGED, on_change)
        bus.emit(EventType.TRADE_OPTIONS_CHANGED, snapshot=config)
        sub.unsubscribe()

    Sync handlers run inline in ``emit``. Coroutine handlers are scheduled
    on the running loop when ``emit`` is used, or awaited by ``emit_async``.
    """

    DEFAULT_HISTORY_SIZE = 200

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._subscribers: List[Subscription] = []
        self._history_size = history_size
        self._history: List[Event] = []
        self._pending: set = set()
        self._stats = {
            "events_published": 0,
            "handler_errors": 0,
        }

    # ------------------------------------------------------------------
    # Subscription Management
    # ------------------------------------------------------------------

    def subscribe(
        self,
        event_type: Optional[EventType],
        handler: Handler,
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None,
        name: Optional[str] = None,
    ) -> Subscription:
        """
        Subscribe to one event type, or to every event with ``event_type=None``.

        Returns:
            Subscription handle (call ``unsubscribe()`` to stop receiving)
        """
        sub = Subscription(
            handler=handler,
            event_type=event_type,
            priority=priority,
            filter_fn=filter_fn,
            name=name or getattr(handler, "__name__", None),
            bus=self,
        )
        # Stable insert sorted by priority (descending)
        insert_idx = len(self._subscribers)
        for i, existing in enumerate(self._subscribers):
            if existing.priority < priority:
                insert_idx = i
                break
        self._subscribers.insert(insert_idx, sub)
        log.debug(
            "event_bus_subscribe type=%s handler=%s priority=%s",
            event_type.name if event_type else "*", sub.name, priority,
        )
        return sub

    def unsubscribe(self, subscription: Subscription) -> bool:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)
            return True
        return False

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def _matching(self, event: Event) -> List[Subscription]:
        out = []
        for sub in list(self._subscribers):
            if sub.event_type is not None and sub.event_type != event.type:
                continue
            if sub.filter_fn and not sub.filter_fn(event):
                continue
            out.append(sub)
        return out

    def _record(self, event: Event) -> None:
        self._stats["events_published"] += 1
        if self._history_size > 0:
            self._history.append(event)
            if len(self._history) > self._history_size:
                self._history.pop(0)

    def _handler_error(self, event: Event, sub: Subscription, exc: BaseException) -> None:
        self._stats["handler_errors"] += 1
        log.warning(
            "event_bus_handler_error type=%s handler=%s error=%s",
            event.type.name, sub.name or "unknown", exc,
        )

    def publish(self, event: Event) -> int:
        """Dispatch to matching subscribers. Returns the number of handlers invoked."""
        self._record(event)
        invoked = 0
        for sub in self._matching(event):
            try:
                result = sub.handler(event)
                if asyncio.iscoroutine(result):
                    self._schedule(result, event, sub)
                invoked += 1
            except Exception as exc:
                self._handler_error(event, sub, exc)
        return invoked

    def _schedule(self, coro: Coroutine, event: Event, sub: Subscription) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            log.warning("event_bus_async_handler_without_loop handler=%s", sub.name)
            return
        task = loop.create_task(coro)
        self._pending.add(task)

        def _done(t: asyncio.Task) -> None:
            self._pending.discard(t)
            if not t.cancelled() and t.exception() is not None:
                self._handler_error(event, sub, t.exception())

        task.add_done_callback(_done)

    async def publish_async(self, event: Event) -> int:
        """Dispatch and await coroutine handlers in priority order."""
        self._record(event)
        invoked = 0
        for sub in self._matching(event):
            try:
                result = sub.handler(event)
                if asyncio.iscoroutine(result):
                    await result
                invoked += 1
            except Exception as exc:
                self._handler_error(event, sub, exc)
        return invoked

    def emit(self, event_type: EventType, source: Optional[str] = None, **data: Any) -> int:
        return self.publish(Event(type=event_type, data=data, source=source))

    async def emit_async(self, event_type: EventType, source: Optional[str] = None, **data: Any) -> int:
        return await self.publish_async(Event(type=event_type, data=data, source=source))

    # ------------------------------------------------------------------
    # Query Methods
    # ------------------------------------------------------------------

    def get_history(self, event_type: Optional[EventType] = None, limit: int = 100) -> List[Event]:
        events = self._history
        if event_type:
            events = [e for e in events if e.type == event_type]
        return events[-limit:]

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "history_size": len(self._history),
            "subscriber_count": len(self._subscribers),
        }

    def get_subscriber_count(self, event_type: Optional[EventType] = None) -> int:
        if event_type is None:
            return len(self._subscribers)
        return sum(1 for s in self._subscribers if s.event_type in (None, event_type))
