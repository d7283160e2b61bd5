import logging
from app.modules.events.catalog import Event
from app.platform.ports.event_bus import EventBusPort

log = logging.getLogger("events.relay")

class EventRelay:
    """Mirrors every domain event onto the configured out-of-process bus."""

    def __init__(self, port: EventBusPort, topic: str = "templatehub.events"):
        self.port = port
        self.topic = topic

    async def handle(self, event: Event) -> None:
        try:
            await self.port.publish(
                topic=self.topic,
                key=event.name.value,
                value=event.envelope(),
                headers={"event": event.name.value},
            )
        except Exception:  # noqa
            log.exception("Relay publish failed for %s", event.name.value)
