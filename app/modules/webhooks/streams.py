import asyncio
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import AsyncIterator

log = logging.getLogger("webhooks.streams")

CONNECTED_FRAME = ": connected\n\n"
HEARTBEAT_FRAME = ": heartbeat\n\n"

def data_frame(body: bytes | str) -> str:
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return f"data: {body}\n\n"

class StreamClosed(Exception):
    pass

class StreamConnection:
    """One live admin SSE client.

    Frames are buffered in a bounded queue and drained by the response
    generator, so a slow client never blocks the dispatcher.
    """

    def __init__(self, user_id: int, max_pending: int = 100):
        self.id = uuid.uuid4().hex
        self.user_id = user_id
        self.connected_at = datetime.now(timezone.utc)
        self.closed = False
        self.dropped = 0
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=max_pending)

    def write(self, frame: str) -> None:
        if self.closed:
            raise StreamClosed(self.id)
        self._queue.put_nowait(frame)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._queue.put_nowait(None)  # wake the reader
        except asyncio.QueueFull:
            pass

    async def frames(self, heartbeat_seconds: float = 30.0) -> AsyncIterator[str]:
        yield CONNECTED_FRAME
        while not self.closed:
            try:
                frame = await asyncio.wait_for(self._queue.get(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield HEARTBEAT_FRAME
                continue
            if frame is None:
                break
            yield frame

class StreamManager:
    """Set of connected admin streams, safe to mutate while a broadcast iterates."""

    def __init__(self, max_pending: int = 100):
        self.max_pending = max_pending
        self._lock = threading.Lock()
        self._connections: dict[str, StreamConnection] = {}

    def open(self, user_id: int) -> StreamConnection:
        conn = StreamConnection(user_id, max_pending=self.max_pending)
        self.add(conn)
        return conn

    def add(self, conn: StreamConnection) -> None:
        with self._lock:
            self._connections[conn.id] = conn
            total = len(self._connections)
        log.info("Stream client %s connected (user %s). Total clients: %d", conn.id, conn.user_id, total)

    def remove(self, conn: StreamConnection) -> None:
        with self._lock:
            removed = self._connections.pop(conn.id, None)
            total = len(self._connections)
        conn.close()
        if removed is not None:
            log.info("Stream client %s disconnected. Total clients: %d", conn.id, total)

    def connections(self) -> list[StreamConnection]:
        with self._lock:
            return list(self._connections.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, conn: StreamConnection) -> bool:
        with self._lock:
            return conn.id in self._connections

    def broadcast(self, frame: str) -> int:
        """Queue ``frame`` on every connection; returns how many accepted it."""
        sent = 0
        for conn in self.connections():
            try:
                conn.write(frame)
                sent += 1
            except asyncio.QueueFull:
                conn.dropped += 1
                log.warning("Stream client %s is not keeping up; frame dropped (%d so far)", conn.id, conn.dropped)
            except Exception as ex:  # noqa
                log.error("Failed to send stream frame to %s: %s", conn.id, ex)
        return sent

    def close_all(self) -> None:
        for conn in self.connections():
            self.remove(conn)
