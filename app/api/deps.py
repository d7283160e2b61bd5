from fastapi import Request
from app.modules.events.bus import EventBus
from app.modules.webhooks.registry import WebhookRegistry
from app.modules.webhooks.streams import StreamManager

# Long-lived collaborators are built once at start-up and kept on app.state.

def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus

def get_stream_manager(request: Request) -> StreamManager:
    return request.app.state.streams

def get_webhook_registry(request: Request) -> WebhookRegistry:
    return request.app.state.webhook_registry
