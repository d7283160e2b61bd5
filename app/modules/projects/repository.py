from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.modules.projects.models import Project
from app.modules.users.models import User

class ProjectRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Project:
        obj = Project(**data, members=[])
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, project_id: int) -> Project | None:
        return await self.session.get(Project, project_id)

    async def get_by_title(self, title: str) -> Project | None:
        res = await self.session.execute(select(Project).where(Project.title == title))
        return res.scalar_one_or_none()

    async def list(self) -> Sequence[Project]:
        res = await self.session.execute(select(Project).order_by(Project.created_at.desc(), Project.id.desc()))
        return res.scalars().all()

    async def update_fields(self, obj: Project, **data) -> Project:
        for k, v in data.items():
            if v is not None:
                setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def add_member(self, obj: Project, user: User) -> Project:
        obj.members.append(user)
        await self.session.flush()
        return obj

    async def remove_member(self, obj: Project, user: User) -> Project:
        obj.members = [u for u in obj.members if u.id != user.id]
        await self.session.flush()
        return obj

    async def delete(self, obj: Project) -> None:
        await self.session.delete(obj)
        await self.session.flush()
