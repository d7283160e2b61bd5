import logging
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.core.config import settings
from app.core.security import hash_password
from app.modules.users.models import Role
from app.modules.users.repository import UserRepository

log = logging.getLogger(__name__)

async def ensure_superadmin(factory: async_sessionmaker[AsyncSession]) -> None:
    """Create the initial SUPERADMIN from settings unless one already exists."""
    if not settings.SUPERADMIN_ENABLED:
        log.info("SUPERADMIN creation is disabled; skipping")
        return
    if not settings.SUPERADMIN_EMAIL or not settings.SUPERADMIN_PASSWORD:
        raise RuntimeError("SUPERADMIN_EMAIL and SUPERADMIN_PASSWORD must be set when SUPERADMIN_ENABLED is true")

    async with factory() as session:
        repo = UserRepository(session)
        if await repo.first_superadmin():
            log.info("SUPERADMIN already exists; skipping creation")
            return
        await repo.create(
            email=settings.SUPERADMIN_EMAIL,
            password=hash_password(settings.SUPERADMIN_PASSWORD),
            role=Role.SUPERADMIN,
        )
        await session.commit()
        log.info("Initial SUPERADMIN %s created", settings.SUPERADMIN_EMAIL)
