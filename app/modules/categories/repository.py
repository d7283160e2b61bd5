from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.modules.categories.models import Category

class CategoryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Category:
        obj = Category(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, category_id: int) -> Category | None:
        return await self.session.get(Category, category_id)

    async def get_by_name(self, name: str, project_id: int) -> Category | None:
        res = await self.session.execute(select(Category).where(Category.name == name, Category.project_id == project_id))
        return res.scalar_one_or_none()

    async def list(self, *, created_by_id: int | None = None) -> Sequence[Category]:
        q = select(Category)
        if created_by_id is not None:
            q = q.where(Category.created_by_id == created_by_id)
        res = await self.session.execute(q.order_by(Category.created_at.desc(), Category.id.desc()))
        return res.scalars().all()

    async def update_fields(self, obj: Category, **data) -> Category:
        for k, v in data.items():
            if v is not None:
                setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def delete(self, obj: Category) -> None:
        await self.session.delete(obj)
        await self.session.flush()
