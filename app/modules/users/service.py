from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ConflictError, NotFoundError
from app.core.security import hash_password
from app.modules.events.bus import EventBus
from app.modules.events.catalog import EventName
from app.modules.users.models import User, Role
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import UserCreate, UserUpdate, UserOut, UserPage

def snapshot(user: User) -> dict:
    return UserOut.model_validate(user).model_dump(mode="json")

class UserService:
    def __init__(self, session: AsyncSession, bus: EventBus):
        self.session = session
        self.bus = bus
        self.users = UserRepository(session)

    async def create(self, payload: UserCreate) -> User:
        if await self.users.exists(payload.email):
            raise ConflictError("Email already in use")
        obj = await self.users.create(
            email=payload.email,
            password=hash_password(payload.password),
            role=payload.role or Role.USER,
        )
        await self.session.commit()
        await self.bus.emit(EventName.USER_CREATED, snapshot(obj))
        return obj

    async def list(self, page: int = 1, limit: int = 10) -> UserPage:
        page, limit = max(page, 1), min(max(limit, 1), 100)
        items = await self.users.list(limit=limit, offset=(page - 1) * limit)
        total = await self.users.count()
        return UserPage(items=[UserOut.model_validate(u) for u in items], total=total, page=page, limit=limit)

    async def get(self, user_id: int) -> User:
        obj = await self.users.get(user_id)
        if not obj:
            raise NotFoundError("User not found")
        return obj

    async def update(self, user_id: int, payload: UserUpdate) -> User:
        obj = await self.get(user_id)
        if obj.role == Role.SUPERADMIN:
            raise ConflictError("Cannot modify SUPERADMIN user")
        data = payload.model_dump(exclude_unset=True)
        if data.get("email") and data["email"] != obj.email and await self.users.exists(data["email"]):
            raise ConflictError("Email already in use")
        if data.get("password"):
            data["password"] = hash_password(data["password"])
        obj = await self.users.update_fields(obj, **data)
        await self.session.commit()
        await self.bus.emit(EventName.USER_UPDATED, snapshot(obj))
        return obj

    async def remove(self, user_id: int) -> User:
        obj = await self.get(user_id)
        if obj.role == Role.SUPERADMIN:
            raise ConflictError("Cannot delete SUPERADMIN user")
        data = snapshot(obj)
        await self.users.delete(obj)
        await self.session.commit()
        await self.bus.emit(EventName.USER_DELETED, data)
        return obj
