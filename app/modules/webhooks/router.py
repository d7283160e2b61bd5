from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.api.deps import get_stream_manager, get_webhook_registry
from app.core.config import settings
from app.core.db import get_session_factory
from app.core.errors import UnauthorizedError
from app.core.security import get_principal, principal_from_token, require_roles, Principal
from app.modules.users.models import Role
from app.modules.webhooks.registry import WebhookRegistry
from app.modules.webhooks.schemas import WebhookCreate, WebhookUpdate, WebhookOut
from app.modules.webhooks.service import WebhookService
from app.modules.webhooks.streams import StreamManager

router = APIRouter()

def svc(registry: WebhookRegistry = Depends(get_webhook_registry)) -> WebhookService:
    return WebhookService(registry)

# ---- Admin live stream ----

async def stream_principal(
    token: str | None = Query(default=None),
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> Principal:
    # EventSource cannot send headers, so the bearer token arrives as a query parameter
    if not token:
        raise UnauthorizedError("Token required")
    try:
        async with factory() as s:
            principal = await principal_from_token(token, s)
    except UnauthorizedError:
        raise UnauthorizedError("Invalid token")
    if not principal.is_superadmin:
        raise UnauthorizedError("SUPERADMIN only")
    return principal

@router.get("/webhooks/events/stream")
async def stream_events(principal: Principal = Depends(stream_principal), streams: StreamManager = Depends(get_stream_manager)):
    conn = streams.open(principal.user_id)

    async def event_stream():
        try:
            async for frame in conn.frames(settings.SSE_HEARTBEAT_SECONDS):
                yield frame
        finally:
            # runs on client disconnect (generator cancelled) as well as on shutdown
            streams.remove(conn)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "Access-Control-Allow-Origin": "*",
            "X-Accel-Buffering": "no",
        },
    )

# ---- Subscriptions ----

@router.post("/webhooks", response_model=WebhookOut, status_code=201)
async def create_webhook(payload: WebhookCreate, principal: Principal = Depends(get_principal), service: WebhookService = Depends(svc)):
    return WebhookOut.from_model(await service.create(payload, principal))

@router.get("/webhooks/my-webhooks", response_model=list[WebhookOut])
async def my_webhooks(principal: Principal = Depends(get_principal), service: WebhookService = Depends(svc)):
    return [WebhookOut.from_model(w) for w in await service.list_mine(principal)]

@router.get("/webhooks/all", response_model=list[WebhookOut], dependencies=[Depends(require_roles(Role.SUPERADMIN))])
async def all_webhooks(service: WebhookService = Depends(svc)):
    return [WebhookOut.from_model(w) for w in await service.list_all()]

@router.get("/webhooks/{webhook_id}", response_model=WebhookOut)
async def get_webhook(webhook_id: int, principal: Principal = Depends(get_principal), service: WebhookService = Depends(svc)):
    return WebhookOut.from_model(await service.get(webhook_id, principal))

@router.patch("/webhooks/{webhook_id}", response_model=WebhookOut)
async def update_webhook(webhook_id: int, payload: WebhookUpdate, principal: Principal = Depends(get_principal), service: WebhookService = Depends(svc)):
    return WebhookOut.from_model(await service.update(webhook_id, payload, principal))

@router.delete("/webhooks/{webhook_id}")
async def delete_webhook(webhook_id: int, principal: Principal = Depends(get_principal), service: WebhookService = Depends(svc)):
    await service.remove(webhook_id, principal)
    return {"message": "Webhook deleted successfully"}
