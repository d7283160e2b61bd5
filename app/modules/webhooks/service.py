from app.core.errors import ForbiddenError
from app.core.security import Principal
from app.modules.webhooks.models import WebhookSubscription
from app.modules.webhooks.registry import WebhookRegistry
from app.modules.webhooks.schemas import WebhookCreate, WebhookUpdate

class WebhookService:
    """Ownership rules on top of the registry: users manage their own, SUPERADMIN manages all."""

    def __init__(self, registry: WebhookRegistry):
        self.registry = registry

    async def create(self, payload: WebhookCreate, principal: Principal) -> WebhookSubscription:
        return await self.registry.register(principal.user_id, payload.url, payload.events, payload.secret)

    async def list_mine(self, principal: Principal):
        return await self.registry.list_for_owner(principal.user_id)

    async def list_all(self):
        return await self.registry.list_all()

    async def get(self, webhook_id: int, principal: Principal, action: str = "view") -> WebhookSubscription:
        obj = await self.registry.get(webhook_id)
        if obj.owner_id != principal.user_id and not principal.is_superadmin:
            raise ForbiddenError(f"You can only {action} your own webhooks")
        return obj

    async def update(self, webhook_id: int, payload: WebhookUpdate, principal: Principal) -> WebhookSubscription:
        await self.get(webhook_id, principal, "update")
        return await self.registry.update(webhook_id, **payload.model_dump(exclude_unset=True))

    async def remove(self, webhook_id: int, principal: Principal) -> None:
        await self.get(webhook_id, principal, "delete")
        await self.registry.remove(webhook_id)
