import logging
from typing import Iterable, Sequence
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import NotFoundError, ValidationError
from app.modules.events.catalog import EventName
from app.modules.webhooks.models import WebhookSubscription
from app.modules.webhooks.repository import WebhookRepository

log = logging.getLogger("webhooks.registry")

_http_url = TypeAdapter(AnyHttpUrl)

def validate_url(url: str) -> str:
    url = (url or "").strip()
    try:
        _http_url.validate_python(url)
    except PydanticValidationError:
        raise ValidationError("url must be an absolute http(s) URL")
    return url

def validate_events(events: Iterable[str] | None) -> list[str]:
    names: list[str] = []
    for raw in events or []:
        try:
            name = EventName(raw).value
        except ValueError:
            raise ValidationError(f"Unknown event: {raw}")
        if name not in names:
            names.append(name)
    if not names:
        raise ValidationError("events must contain at least one event name")
    return names

class WebhookRegistry:
    """Durable store of webhook subscriptions.

    Every call opens its own session so the registry can be used both from
    request handlers and from the dispatcher, outside any request. Access
    control is the caller's job.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def register(self, owner_id: int, url: str, events: Iterable[str], secret: str | None = None) -> WebhookSubscription:
        # validate before opening a session so a bad request never writes
        url = validate_url(url)
        names = validate_events(events)
        async with self.session_factory() as s:
            obj = await WebhookRepository(s).create(owner_id=owner_id, url=url, events=names, secret=secret or None, active=True)
            await s.commit()
        log.info("Webhook %s registered by user %s for %s", obj.id, owner_id, ",".join(names))
        return obj

    async def get(self, webhook_id: int) -> WebhookSubscription:
        async with self.session_factory() as s:
            obj = await WebhookRepository(s).get(webhook_id)
        if not obj:
            raise NotFoundError("Webhook not found")
        return obj

    async def list_for_owner(self, owner_id: int) -> Sequence[WebhookSubscription]:
        async with self.session_factory() as s:
            return await WebhookRepository(s).list(owner_id=owner_id)

    async def list_all(self) -> Sequence[WebhookSubscription]:
        async with self.session_factory() as s:
            return await WebhookRepository(s).list()

    async def list_active_subscribers_for(self, event_name: EventName | str) -> list[WebhookSubscription]:
        # no caching: updates and deletes apply to the very next dispatch
        async with self.session_factory() as s:
            return await WebhookRepository(s).list_active_for_event(EventName(event_name).value)

    async def update(self, webhook_id: int, *, url: str | None = None, events: Iterable[str] | None = None, active: bool | None = None) -> WebhookSubscription:
        data: dict = {"active": active}
        if url is not None:
            data["url"] = validate_url(url)
        if events is not None:
            data["events"] = validate_events(events)
        async with self.session_factory() as s:
            repo = WebhookRepository(s)
            obj = await repo.get(webhook_id)
            if not obj:
                raise NotFoundError("Webhook not found")
            obj = await repo.update_fields(obj, **data)
            await s.commit()
        return obj

    async def remove(self, webhook_id: int) -> None:
        async with self.session_factory() as s:
            repo = WebhookRepository(s)
            obj = await repo.get(webhook_id)
            if not obj:
                raise NotFoundError("Webhook not found")
            await repo.delete(obj)
            await s.commit()
        log.info("Webhook %s removed", webhook_id)
