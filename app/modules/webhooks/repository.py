from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.modules.webhooks.models import WebhookSubscription

class WebhookRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> WebhookSubscription:
        obj = WebhookSubscription(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, webhook_id: int) -> WebhookSubscription | None:
        return await self.session.get(WebhookSubscription, webhook_id)

    async def list(self, *, owner_id: int | None = None) -> Sequence[WebhookSubscription]:
        q = select(WebhookSubscription)
        if owner_id is not None:
            q = q.where(WebhookSubscription.owner_id == owner_id)
        res = await self.session.execute(q.order_by(WebhookSubscription.created_at.desc(), WebhookSubscription.id.desc()))
        return res.scalars().all()

    async def list_active_for_event(self, event_name: str) -> Sequence[WebhookSubscription]:
        # event names live in a JSON list; membership is checked in python to stay portable across backends
        res = await self.session.execute(select(WebhookSubscription).where(WebhookSubscription.active.is_(True)))
        return [w for w in res.scalars().all() if w.wants(event_name)]

    async def update_fields(self, obj: WebhookSubscription, **data) -> WebhookSubscription:
        for k, v in data.items():
            if v is not None:
                setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def delete(self, obj: WebhookSubscription) -> None:
        await self.session.delete(obj)
        await self.session.flush()
