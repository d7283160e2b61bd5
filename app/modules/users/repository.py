from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.modules.users.models import User, Role

class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> User:
        obj = User(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        res = await self.session.execute(select(User).where(User.email == email))
        return res.scalar_one_or_none()

    async def exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def list(self, *, limit: int = 10, offset: int = 0) -> Sequence[User]:
        q = select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit).offset(offset)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def count(self) -> int:
        res = await self.session.execute(select(func.count()).select_from(User))
        return res.scalar_one()

    async def first_superadmin(self) -> User | None:
        res = await self.session.execute(select(User).where(User.role == Role.SUPERADMIN).limit(1))
        return res.scalar_one_or_none()

    async def update_fields(self, obj: User, **data) -> User:
        for k, v in data.items():
            if v is not None:
                setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def delete(self, obj: User) -> None:
        await self.session.delete(obj)
        await self.session.flush()
