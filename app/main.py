import time
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging, request_id_ctx
from app.core.db import SessionLocal, init_models
from app.core.errors import AppError
from app.api.router import api_router
from app.modules.events.bus import EventBus
from app.modules.events.relay import EventRelay
from app.modules.users.seed import ensure_superadmin
from app.modules.webhooks.dispatcher import WebhookDispatcher
from app.modules.webhooks.registry import WebhookRegistry
from app.modules.webhooks.streams import StreamManager
from app.platform.provider_registry import registry


setup_logging()
app = FastAPI(title=settings.APP_NAME)
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id_ctx.set(request.headers.get("x-request-id", "-"))
    start_time = time.time()

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    logger.info(
        f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {process_time:.2f}ms"
    )
    return response

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail, "statusCode": exc.status_code})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # same envelope as AppError; field errors are flattened into the message
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=422, content={"message": "; ".join(problems) or "Validation failed", "statusCode": 422})

@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error for request {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(status_code=409, content={"message": "Conflict with existing data", "statusCode": 409})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "An internal server error occurred."},
    )


def wire_events(target: FastAPI, session_factory=SessionLocal, http_client=None) -> EventBus:
    """Build the event pipeline and attach its long-lived parts to ``target.state``."""
    streams = StreamManager(max_pending=settings.SSE_MAX_PENDING_FRAMES)
    webhook_registry = WebhookRegistry(session_factory)
    dispatcher = WebhookDispatcher(
        webhook_registry,
        streams,
        client=http_client,
        timeout_seconds=settings.WEBHOOK_DELIVERY_TIMEOUT_SECONDS,
    )
    bus = EventBus(mode=settings.WEBHOOK_DELIVERY_MODE, queue_maxsize=settings.WEBHOOK_QUEUE_MAXSIZE)
    bus.subscribe(dispatcher.handle)
    bus.subscribe(EventRelay(registry.event_bus()).handle)

    target.state.streams = streams
    target.state.webhook_registry = webhook_registry
    target.state.dispatcher = dispatcher
    target.state.event_bus = bus
    return bus


@app.on_event("startup")
async def on_startup():
    await init_models()
    await ensure_superadmin(SessionLocal)
    bus = wire_events(app)
    bus.start()
    logger.info("Event pipeline ready (delivery mode=%s)", bus.mode)

@app.on_event("shutdown")
async def on_shutdown():
    bus = getattr(app.state, "event_bus", None)
    if bus:
        await bus.stop()
    streams = getattr(app.state, "streams", None)
    if streams:
        streams.close_all()
    dispatcher = getattr(app.state, "dispatcher", None)
    if dispatcher:
        await dispatcher.aclose()
    await registry.close()


app.include_router(api_router, prefix=settings.API_PREFIX)
