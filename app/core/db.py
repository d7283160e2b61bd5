from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool
from .config import settings
from .base import Base

def _engine_kwargs(dsn: str) -> dict:
    if dsn.startswith("sqlite"):
        # single shared connection so an in-memory database survives across sessions (local dev, tests)
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}

engine = create_async_engine(settings.POSTGRES_DSN, **_engine_kwargs(settings.POSTGRES_DSN))
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return SessionLocal

async def get_session(factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)):
    async with factory() as session:
        yield session

async def init_models():
    # In dev-only "create_all" mode tables are created on start-up; otherwise migrations own the schema.
    if settings.DB_MANAGE == "create_all":
        # make sure every model module is imported so its table is registered on Base.metadata
        import app.modules.users.models  # noqa: F401
        import app.modules.projects.models  # noqa: F401
        import app.modules.categories.models  # noqa: F401
        import app.modules.templates.models  # noqa: F401
        import app.modules.webhooks.models  # noqa: F401
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
