"""Tests for webhook fan-out: stream broadcast, subscriber resolution and delivery."""

import asyncio
import json
import httpx
import pytest
from unittest.mock import AsyncMock

from app.modules.events.catalog import Event, EventName
from app.modules.webhooks.dispatcher import WebhookDispatcher
from app.modules.webhooks.signing import EVENT_HEADER, SIGNATURE_HEADER, sign


@pytest.fixture
def dispatcher(registry, streams, transport):
    return WebhookDispatcher(registry, streams, client=transport.client(), timeout_seconds=1.0)


def category_created(**data) -> Event:
    return Event(name=EventName.CATEGORY_CREATED, data=data or {"id": 1, "name": "Invoices"})


class TestDelivery:

    @pytest.mark.asyncio
    async def test_one_post_per_matching_active_subscription(self, dispatcher, registry, owner, transport):
        await registry.register(owner.id, "https://a.test/hook", ["category.created"])
        await registry.register(owner.id, "https://b.test/hook", ["category.created", "template.created"])
        await registry.register(owner.id, "https://c.test/hook", ["template.created"])
        inactive = await registry.register(owner.id, "https://d.test/hook", ["category.created"])
        await registry.update(inactive.id, active=False)

        results = await dispatcher.handle(category_created())

        assert len(results) == 2
        assert len(transport.to("https://a.test/hook")) == 1
        assert len(transport.to("https://b.test/hook")) == 1
        assert transport.to("https://c.test/hook") == []
        assert transport.to("https://d.test/hook") == []

    @pytest.mark.asyncio
    async def test_no_subscribers_means_no_posts(self, dispatcher, transport):
        assert await dispatcher.handle(category_created()) == []
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_headers_and_signed_body(self, dispatcher, registry, owner, transport):
        await registry.register(owner.id, "https://x.test/hook", ["category.created"], "s3cret")
        event = category_created(id=1, name="Invoices")

        await dispatcher.handle(event)

        [request] = transport.requests
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"
        assert request.headers[EVENT_HEADER] == "category.created"
        assert request.headers[SIGNATURE_HEADER] == sign("s3cret", request.content)
        assert request.content == event.to_json()

        payload = json.loads(request.content)
        assert payload["event"] == "category.created"
        assert payload["data"] == {"id": 1, "name": "Invoices"}
        assert payload["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_unsigned_when_no_secret(self, dispatcher, registry, owner, transport):
        await registry.register(owner.id, "https://x.test/hook", ["category.created"])

        await dispatcher.handle(category_created())

        assert SIGNATURE_HEADER not in transport.requests[0].headers


class TestFailureIsolation:

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_affect_others(self, dispatcher, registry, owner, transport):
        transport.statuses["https://a.test/hook"] = 500
        await registry.register(owner.id, "https://a.test/hook", ["category.created"])
        await registry.register(owner.id, "https://b.test/hook", ["category.created"])

        results = await dispatcher.handle(category_created())

        by_url = {r.url: r for r in results}
        assert by_url["https://a.test/hook"].ok is False
        assert by_url["https://a.test/hook"].status_code == 500
        assert by_url["https://b.test/hook"].ok is True
        assert len(transport.to("https://a.test/hook")) == 1
        assert len(transport.to("https://b.test/hook")) == 1

    @pytest.mark.asyncio
    async def test_network_errors_are_caught(self, dispatcher, registry, owner, transport):
        transport.errors["https://down.test/hook"] = httpx.ConnectError("connection refused")
        transport.errors["https://slow.test/hook"] = httpx.ReadTimeout("timed out")
        await registry.register(owner.id, "https://down.test/hook", ["category.created"])
        await registry.register(owner.id, "https://slow.test/hook", ["category.created"])
        await registry.register(owner.id, "https://ok.test/hook", ["category.created"])

        results = await dispatcher.handle(category_created())

        assert sorted((r.url, r.ok) for r in results) == [
            ("https://down.test/hook", False),
            ("https://ok.test/hook", True),
            ("https://slow.test/hook", False),
        ]
        assert all(r.error for r in results if not r.ok)

    @pytest.mark.asyncio
    async def test_no_retry_after_failure(self, dispatcher, registry, owner, transport):
        transport.statuses["https://a.test/hook"] = 503
        await registry.register(owner.id, "https://a.test/hook", ["category.created"])

        await dispatcher.handle(category_created())

        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_registry_failure_still_reaches_streams(self, streams, transport):
        registry = AsyncMock()
        registry.list_active_subscribers_for.side_effect = RuntimeError("db gone")
        dispatcher = WebhookDispatcher(registry, streams, client=transport.client())
        conn = streams.open(1)

        assert await dispatcher.handle(category_created()) == []
        assert conn._queue.qsize() == 1
        assert transport.requests == []


class TestStreamFanOut:

    @pytest.mark.asyncio
    async def test_stream_frame_is_written_before_subscribers_resolve(self, streams, transport):
        conn = streams.open(1)
        registry = AsyncMock()
        queued_at_lookup = []

        async def resolve(name):
            queued_at_lookup.append(conn._queue.qsize())
            return []

        registry.list_active_subscribers_for.side_effect = resolve
        dispatcher = WebhookDispatcher(registry, streams, client=transport.client())
        event = category_created()

        await dispatcher.handle(event)

        assert queued_at_lookup == [1]
        assert conn._queue.get_nowait() == f"data: {event.to_json().decode()}\n\n"

    @pytest.mark.asyncio
    async def test_stream_frame_matches_webhook_body(self, dispatcher, registry, owner, streams, transport):
        conn = streams.open(1)
        await registry.register(owner.id, "https://x.test/hook", ["category.created"])

        await dispatcher.handle(category_created())

        frame = conn._queue.get_nowait()
        assert frame == f"data: {transport.requests[0].content.decode()}\n\n"

    @pytest.mark.asyncio
    async def test_disconnected_stream_is_not_written(self, dispatcher, streams):
        gone = streams.open(1)
        kept = streams.open(2)
        streams.remove(gone)

        await dispatcher.handle(category_created())

        assert kept._queue.qsize() == 1
        # only the close sentinel
        assert gone._queue.get_nowait() is None
        assert gone._queue.empty()


class TestConcurrentRemoval:

    @pytest.mark.asyncio
    async def test_delete_during_dispatch_lets_in_flight_delivery_finish(self, registry, streams, owner):
        started = asyncio.Event()
        release = asyncio.Event()
        seen = []

        async def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            started.set()
            await release.wait()
            return httpx.Response(200)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        dispatcher = WebhookDispatcher(registry, streams, client=client, timeout_seconds=1.0)
        hook = await registry.register(owner.id, "https://x.test/hook", ["category.created"])

        task = asyncio.create_task(dispatcher.handle(category_created()))
        await asyncio.wait_for(started.wait(), timeout=1)
        await registry.remove(hook.id)
        release.set()
        results = await asyncio.wait_for(task, timeout=1)

        assert [r.ok for r in results] == [True]
        assert seen == ["https://x.test/hook"]

        # the next event no longer reaches the deleted subscription
        assert await dispatcher.handle(category_created()) == []
        await client.aclose()


class TestClientOwnership:

    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self, registry, streams, transport):
        client = transport.client()
        dispatcher = WebhookDispatcher(registry, streams, client=client)
        await dispatcher.aclose()
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_own_client_is_closed(self, registry, streams):
        dispatcher = WebhookDispatcher(registry, streams)
        await dispatcher.aclose()
        assert dispatcher.client.is_closed
