from app.core.config import settings
from app.platform.ports.event_bus import EventBusPort
from app.platform.adapters.bus_noop import NoopEventBus
from app.platform.adapters.bus_redis import RedisEventBus

EVENT_BUS_PROVIDERS = {
    "noop": NoopEventBus,
    "redis": RedisEventBus,
}

class ProviderRegistry:
    """Process-wide adapters chosen from settings, built on first use."""

    _event_bus: EventBusPort | None = None

    @classmethod
    def event_bus(cls) -> EventBusPort:
        if cls._event_bus is None:
            name = (settings.EVENT_BUS_PROVIDER or "noop").lower()
            try:
                factory = EVENT_BUS_PROVIDERS[name]
            except KeyError:
                raise RuntimeError(f"Unknown EVENT_BUS_PROVIDER: {name}")
            cls._event_bus = factory()
        return cls._event_bus

    @classmethod
    async def close(cls) -> None:
        bus, cls._event_bus = cls._event_bus, None
        if bus is not None:
            await bus.close()

registry = ProviderRegistry()
