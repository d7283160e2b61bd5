import asyncio
import logging
import time
from dataclasses import dataclass

import httpx

from app.modules.events.catalog import Event
from app.modules.webhooks.models import WebhookSubscription
from app.modules.webhooks.registry import WebhookRegistry
from app.modules.webhooks.signing import delivery_headers
from app.modules.webhooks.streams import StreamManager, data_frame

log = logging.getLogger("webhooks.dispatcher")

class DeliveryFailure(Exception):
    """A single webhook delivery did not succeed. Always caught by the dispatcher."""

@dataclass
class DeliveryResult:
    webhook_id: int
    url: str
    event: str
    ok: bool
    status_code: int | None = None
    error: str | None = None
    elapsed_ms: float = 0.0

class WebhookDispatcher:
    """Fans one event out to admin streams and to every matching webhook.

    Best effort, at most once: each delivery is attempted a single time with a
    bounded timeout, and no failure escapes ``handle``.
    """

    def __init__(
        self,
        registry: WebhookRegistry,
        streams: StreamManager,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ):
        self.registry = registry
        self.streams = streams
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def handle(self, event: Event) -> list[DeliveryResult]:
        body = event.to_json()
        name = event.name.value

        # 1. admin streams first
        sent = self.streams.broadcast(data_frame(body))
        log.info("Webhook event: %s, stream clients: %d", name, sent)

        # 2. resolve subscribers fresh for this event
        try:
            subscribers = await self.registry.list_active_subscribers_for(event.name)
        except Exception:  # noqa
            log.exception("Could not resolve webhooks for %s", name)
            return []
        if not subscribers:
            log.debug("No webhooks registered for event: %s", name)
            return []

        # 3. deliver concurrently and wait for all of them to settle
        results = await asyncio.gather(*(self.deliver(w, event, body) for w in subscribers))
        failed = sum(1 for r in results if not r.ok)
        if failed:
            log.warning("Event %s: %d of %d webhook deliveries failed", name, failed, len(results))
        return list(results)

    async def deliver(self, webhook: WebhookSubscription, event: Event, body: bytes) -> DeliveryResult:
        name = event.name.value
        headers = delivery_headers(name, body, webhook.secret)
        started = time.perf_counter()
        status_code = None
        try:
            response = await self.client.post(webhook.url, content=body, headers=headers, timeout=self.timeout_seconds)
            status_code = response.status_code
            if not response.is_success:
                raise DeliveryFailure(f"HTTP {response.status_code}: {response.reason_phrase}")
        except Exception as ex:  # noqa
            error = str(ex) or ex.__class__.__name__
            log.error("Failed to deliver webhook to %s for event %s: %s", webhook.url, name, error)
            return DeliveryResult(webhook.id, webhook.url, name, False, status_code, error, _elapsed_ms(started))
        log.info("Webhook delivered successfully to %s for event %s", webhook.url, name)
        return DeliveryResult(webhook.id, webhook.url, name, True, status_code, None, _elapsed_ms(started))

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
