import json
import logging
from redis.asyncio import Redis, from_url as redis_from_url
from app.platform.ports.event_bus import EventBusPort
from app.core.config import settings

log = logging.getLogger("bus.redis")

DEFAULT_STREAM = "templatehub.events"

class RedisEventBus(EventBusPort):
    """Appends every envelope to a capped Redis stream.

    Stream entries carry the event name in ``event`` so consumers can filter
    with XREAD without decoding ``payload``.
    """

    def __init__(self, client: Redis | None = None, stream: str | None = None, maxlen: int | None = None):
        if client is None:
            if not settings.REDIS_URL:
                raise RuntimeError("REDIS_URL not configured")
            client = redis_from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        self.redis = client
        self.stream = stream or settings.REDIS_STREAM or DEFAULT_STREAM
        self.maxlen = maxlen or settings.REDIS_STREAM_MAXLEN

    async def publish(self, topic: str, key: str, value: dict, headers: dict | None = None) -> str | None:
        fields = {
            "topic": topic,
            "event": key,
            "payload": json.dumps(value, separators=(",", ":"), default=str),
            "headers": json.dumps(headers or {}),
        }
        entry_id = await self.redis.xadd(self.stream, fields, maxlen=self.maxlen, approximate=True)
        log.debug("[REDIS BUS] XADD %s %s -> %s", self.stream, key, entry_id)
        return entry_id

    async def close(self) -> None:
        await self.redis.aclose()
