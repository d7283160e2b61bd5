import json
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from app.core.config import settings
from app.modules.events.catalog import Event, EventName
from app.modules.events.relay import EventRelay
from app.platform.adapters.bus_noop import NoopEventBus
from app.platform.adapters.bus_redis import DEFAULT_STREAM, RedisEventBus
from app.platform.ports.event_bus import EventBusPort
from app.platform.provider_registry import ProviderRegistry


@pytest_asyncio.fixture
async def providers():
    await ProviderRegistry.close()
    yield ProviderRegistry
    await ProviderRegistry.close()


class TestProviderRegistry:

    @pytest.mark.asyncio
    async def test_noop_by_default(self, providers, monkeypatch):
        monkeypatch.setattr(settings, "EVENT_BUS_PROVIDER", "noop")
        bus = providers.event_bus()
        assert isinstance(bus, NoopEventBus)
        assert isinstance(bus, EventBusPort)
        assert providers.event_bus() is bus

    @pytest.mark.asyncio
    async def test_unknown_provider_fails_loudly(self, providers, monkeypatch):
        monkeypatch.setattr(settings, "EVENT_BUS_PROVIDER", "carrier-pigeon")
        with pytest.raises(RuntimeError, match="carrier-pigeon"):
            providers.event_bus()

    @pytest.mark.asyncio
    async def test_redis_requires_url(self, providers, monkeypatch):
        monkeypatch.setattr(settings, "EVENT_BUS_PROVIDER", "redis")
        monkeypatch.setattr(settings, "REDIS_URL", None)
        with pytest.raises(RuntimeError, match="REDIS_URL"):
            providers.event_bus()


class TestRedisEventBus:

    @pytest.mark.asyncio
    async def test_relay_appends_one_stream_entry_per_event(self):
        client = AsyncMock()
        client.xadd.return_value = "1700000000000-0"
        bus = RedisEventBus(client=client, maxlen=50)
        event = Event(name=EventName.TEMPLATE_DELETED, data={"id": 4})

        await EventRelay(bus).handle(event)

        client.xadd.assert_awaited_once()
        stream, fields = client.xadd.await_args.args
        assert stream == DEFAULT_STREAM
        assert fields["event"] == "template.deleted"
        assert json.loads(fields["payload"]) == event.envelope()
        assert client.xadd.await_args.kwargs == {"maxlen": 50, "approximate": True}

    @pytest.mark.asyncio
    async def test_close_releases_client(self):
        client = AsyncMock()
        await RedisEventBus(client=client, stream="custom").close()
        client.aclose.assert_awaited_once()


class TestNoopEventBus:

    @pytest.mark.asyncio
    async def test_counts_envelopes(self):
        bus = NoopEventBus()
        await EventRelay(bus).handle(Event(name=EventName.USER_CREATED, data={}))
        assert bus.published == 1
