from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.modules.categories.models import Category
from app.modules.templates.models import Template

class TemplateRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Template:
        obj = Template(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, template_id: int) -> Template | None:
        return await self.session.get(Template, template_id)

    async def get_by_name(self, name: str, category_id: int) -> Template | None:
        res = await self.session.execute(select(Template).where(Template.name == name, Template.category_id == category_id))
        return res.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> Sequence[Template]:
        q = (
            select(Template)
            .join(Category, Category.id == Template.category_id)
            .where(Category.created_by_id == user_id)
            .order_by(Template.created_at.desc(), Template.id.desc())
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def update_fields(self, obj: Template, **data) -> Template:
        for k, v in data.items():
            if v is not None:
                setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def delete(self, obj: Template) -> None:
        await self.session.delete(obj)
        await self.session.flush()
