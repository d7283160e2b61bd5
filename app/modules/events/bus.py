import asyncio
import logging
from typing import Any, Awaitable, Callable, Literal

from app.modules.events.catalog import Event, EventName

log = logging.getLogger("events.bus")

Handler = Callable[[Event], Awaitable[Any]]

class EventBus:
    """In-process publish point for domain events.

    Handlers subscribe either to specific event names or, with no names, to
    every name in the catalog. Events are handled one at a time in the order
    they were emitted.

    mode="settle": ``emit`` awaits every handler before returning.
    mode="detached": ``emit`` only enqueues; a single worker task started by
    ``start()`` drains the queue in FIFO order.
    """

    def __init__(self, mode: Literal["settle", "detached"] = "settle", queue_maxsize: int = 1000):
        self.mode = mode
        self._handlers: dict[EventName, list[Handler]] = {name: [] for name in EventName}
        self._lock = asyncio.Lock()
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=queue_maxsize)
        self._worker: asyncio.Task | None = None

    def subscribe(self, handler: Handler, *names: EventName) -> None:
        for name in names or tuple(EventName):
            self._handlers[EventName(name)].append(handler)

    def handlers_for(self, name: EventName) -> list[Handler]:
        return list(self._handlers[EventName(name)])

    async def emit(self, name: EventName, data: Any = None) -> Event:
        event = Event(name=name, data=data)
        if self.mode == "detached":
            try:
                self._queue.put_nowait(event)
            except asyncio.QueueFull:
                log.warning("Event queue full; dropping %s", event.name.value)
            return event
        async with self._lock:
            await self._run_handlers(event)
        return event

    async def _run_handlers(self, event: Event) -> None:
        for handler in self.handlers_for(event.name):
            try:
                await handler(event)
            except Exception:  # noqa
                log.exception("Handler %r failed for %s", handler, event.name.value)

    async def _drain(self) -> None:
        log.info("Event bus worker started")
        try:
            while True:
                event = await self._queue.get()
                try:
                    await self._run_handlers(event)
                finally:
                    self._queue.task_done()
        except asyncio.CancelledError:
            log.info("Event bus worker cancelled; %d event(s) left unhandled", self._queue.qsize())
            raise

    def start(self) -> None:
        if self.mode == "detached" and self._worker is None:
            self._worker = asyncio.create_task(self._drain())

    async def join(self) -> None:
        """Wait until every queued event has been handled (detached mode)."""
        await self._queue.join()

    async def stop(self) -> None:
        task, self._worker = self._worker, None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
