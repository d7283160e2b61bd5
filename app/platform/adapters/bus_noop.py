import logging
from app.platform.ports.event_bus import EventBusPort

log = logging.getLogger("bus.noop")

class NoopEventBus(EventBusPort):
    """Default sink: envelopes are only counted and logged."""

    def __init__(self):
        self.published = 0

    async def publish(self, topic: str, key: str, value: dict, headers: dict | None = None) -> str | None:
        self.published += 1
        log.debug("[NOOP BUS] %s %s (%d so far)", topic, key, self.published)
        return None

    async def close(self) -> None:
        log.debug("[NOOP BUS] closed after %d envelope(s)", self.published)
