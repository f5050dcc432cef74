"""Event bus abstraction and in-memory implementation.

Design goals
------------
1.  **Type-routed dispatching**: subscribers register for a concrete
    ``DomainEvent`` subclass.  When an event is published the bus routes
    it to every handler whose registered type matches ``type(event)``.
2.  **Two dispatch modes**: ``Dispatch.INLINE`` handlers are awaited by
    the publisher.  ``Dispatch.ASYNC`` handlers are queued for a pool of
    worker tasks; the publisher never waits for them.
3.  **Failure isolation**: a handler failure is logged, counted and
    dead-lettered.  It is never raised back to the publisher and never
    stops the remaining handlers.

This module provides:

*  ``IEventBus``: the protocol (interface).
*  ``InMemoryEventBus``: in-process implementation.
*  ``DeadLetter``: record of a failed delivery.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from chempionat_bot.core.enums import Dispatch
from chempionat_bot.domain.events import DomainEvent

logger = logging.getLogger(__name__)

# Type alias for async event handlers.
EventHandler = Callable[[DomainEvent], Awaitable[None]]

# Optional observer for handler failures: ``(event, exc)``.
ErrorCallback = Callable[[DomainEvent, Exception], None]


@dataclass(frozen=True)
class DeadLetter:
    """Record of a handler failure."""

    event: DomainEvent
    handler: str
    error: str
    timestamp: float = field(default_factory=time.monotonic)


@dataclass(frozen=True)
class _Subscription:
    handler: EventHandler
    name: str
    dispatch: Dispatch


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventBus(Protocol):
    """Publish/subscribe bus for ``DomainEvent`` types."""

    async def publish(self, event: DomainEvent) -> None:
        """Deliver *event* to all handlers registered for its type."""
        ...

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
        *,
        dispatch: Dispatch = Dispatch.INLINE,
        name: str | None = None,
    ) -> None:
        """Register *handler* for events of exactly *event_type*."""
        ...

    async def start(self) -> None: ...
    async def stop(self) -> None: ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class InMemoryEventBus:
    """In-process event bus backed by an ``asyncio.Queue`` worker pool.

    Parameters
    ----------
    workers
        Number of worker tasks consuming ``Dispatch.ASYNC`` deliveries.
    history_size
        Most recent published events kept for inspection.  ``0`` (the
        default) keeps none, so a fact is dropped once its handlers finish.
    dead_letter_size
        Most recent handler failures kept in ``dead_letters``.
    on_handler_error
        Optional callback ``(event, exc)`` invoked when a handler raises.
        Useful for external metrics/alerting.
    """

    def __init__(
        self,
        *,
        workers: int = 2,
        history_size: int = 0,
        dead_letter_size: int = 100,
        on_handler_error: ErrorCallback | None = None,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if history_size < 0 or dead_letter_size < 0:
            raise ValueError("history_size and dead_letter_size must be >= 0")
        self._handlers: dict[
            type[DomainEvent], list[_Subscription]
        ] = defaultdict(list)
        self._history: deque[DomainEvent] = deque(maxlen=history_size)
        self._error_counts: dict[str, int] = defaultdict(int)
        self._dead_letters: deque[DeadLetter] = deque(
            maxlen=dead_letter_size,
        )
        self._messages_processed: int = 0
        self._on_handler_error = on_handler_error

        self._worker_count = workers
        self._queue: asyncio.Queue[tuple[_Subscription, DomainEvent]] | None = None
        self._workers: list[asyncio.Task[None]] = []
        self._running = False

    # -- Lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Spawn the worker pool for async deliveries."""
        if self._running:
            return
        queue = self._ensure_queue()
        self._workers = [
            asyncio.create_task(self._worker(queue), name=f"event-bus-worker-{i}")
            for i in range(self._worker_count)
        ]
        self._running = True
        logger.debug("Event bus started with %d workers", self._worker_count)

    async def stop(self) -> None:
        """Finish queued async deliveries, then stop the workers."""
        if not self._running:
            return
        await self.drain()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._running = False
        logger.debug("Event bus stopped")

    @property
    def running(self) -> bool:
        return self._running

    # -- Core API ----------------------------------------------------------

    async def publish(self, event: DomainEvent) -> None:
        """Publish *event* to all subscribed handlers.

        Inline handlers are awaited in registration order.  Async handlers
        are queued and this call returns without waiting for them.
        """
        self._history.append(event)

        for sub in list(self._handlers.get(type(event), [])):
            if sub.dispatch is Dispatch.ASYNC:
                self._ensure_queue().put_nowait((sub, event))
            else:
                await self._deliver(sub, event)

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
        *,
        dispatch: Dispatch = Dispatch.INLINE,
        name: str | None = None,
    ) -> None:
        """Register *handler* for *event_type*."""
        label = name or getattr(handler, "__qualname__", repr(handler))
        self._handlers[event_type].append(
            _Subscription(handler=handler, name=label, dispatch=dispatch)
        )

    async def drain(self) -> None:
        """Wait until every queued async delivery has been handled."""
        if self._queue is None:
            return
        if not self._running and not self._queue.empty():
            raise RuntimeError("Cannot drain: event bus workers are not running")
        await self._queue.join()

    # -- Internals ---------------------------------------------------------

    def _ensure_queue(self) -> asyncio.Queue[tuple[_Subscription, DomainEvent]]:
        # Created lazily so the queue binds to the running loop.
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue

    async def _worker(
        self, queue: asyncio.Queue[tuple[_Subscription, DomainEvent]],
    ) -> None:
        while True:
            sub, event = await queue.get()
            try:
                await self._deliver(sub, event)
            finally:
                queue.task_done()

    async def _deliver(self, sub: _Subscription, event: DomainEvent) -> None:
        try:
            await sub.handler(event)
            self._messages_processed += 1
        except Exception as exc:
            key = type(event).__name__
            self._error_counts[key] += 1
            self._dead_letters.append(
                DeadLetter(event=event, handler=sub.name, error=str(exc))
            )
            logger.exception(
                "Handler error on %s handler=%s: %s", key, sub.name, exc,
            )

            if self._on_handler_error is not None:
                try:
                    self._on_handler_error(event, exc)
                except Exception:
                    logger.warning(
                        "on_handler_error callback failed",
                        exc_info=True,
                    )

    # -- Observability -----------------------------------------------------

    def get_history(
        self,
        event_type: type[DomainEvent] | None = None,
    ) -> list[DomainEvent]:
        """Return the retained published events, optionally filtered."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if type(e) is event_type]

    def clear_history(self) -> None:
        """Clear the event history (testing helper)."""
        self._history.clear()

    def get_error_counts(self) -> dict[str, int]:
        return dict(self._error_counts)

    @property
    def dead_letters(self) -> list[DeadLetter]:
        return list(self._dead_letters)

    def clear_dead_letters(self) -> list[DeadLetter]:
        """Drain and return dead letters."""
        drained = list(self._dead_letters)
        self._dead_letters.clear()
        return drained

    @property
    def messages_processed(self) -> int:
        return self._messages_processed

    @property
    def pending(self) -> int:
        """Async deliveries queued but not yet handled."""
        if self._queue is None:
            return 0
        return self._queue.qsize()
