from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ConflictError, NotFoundError
from app.modules.events.bus import EventBus
from app.modules.events.catalog import EventName
from app.modules.projects.models import Project
from app.modules.projects.repository import ProjectRepository
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectMember, ProjectOut
from app.modules.users.repository import UserRepository
from app.modules.users.models import User

def snapshot(project: Project) -> dict:
    return ProjectOut.model_validate(project).model_dump(mode="json")

class ProjectService:
    def __init__(self, session: AsyncSession, bus: EventBus):
        self.session = session
        self.bus = bus
        self.projects = ProjectRepository(session)
        self.users = UserRepository(session)

    async def create(self, payload: ProjectCreate, owner_id: int) -> Project:
        if await self.projects.get_by_title(payload.title):
            raise ConflictError("Project already in use")
        obj = await self.projects.create(title=payload.title, description=payload.description, owner_id=owner_id)
        await self.session.commit()
        await self.bus.emit(EventName.PROJECT_CREATED, snapshot(obj))
        return obj

    async def list(self):
        return await self.projects.list()

    async def get(self, project_id: int) -> Project:
        obj = await self.projects.get(project_id)
        if not obj:
            raise NotFoundError("Project not found")
        return obj

    async def update(self, project_id: int, payload: ProjectUpdate) -> Project:
        obj = await self.get(project_id)
        if payload.title and payload.title != obj.title and await self.projects.get_by_title(payload.title):
            raise ConflictError("Project already in use")
        obj = await self.projects.update_fields(obj, **payload.model_dump(exclude_unset=True))
        await self.session.commit()
        await self.bus.emit(EventName.PROJECT_UPDATED, snapshot(obj))
        return obj

    async def remove(self, project_id: int) -> None:
        obj = await self.get(project_id)
        data = snapshot(obj)
        await self.projects.delete(obj)
        await self.session.commit()
        await self.bus.emit(EventName.PROJECT_DELETED, data)

    async def _member_target(self, project_id: int, payload: ProjectMember) -> tuple[Project, User]:
        user = await self.users.get_by_email(payload.email)
        if not user:
            raise NotFoundError("User not found")
        return await self.get(project_id), user

    async def add_user(self, project_id: int, payload: ProjectMember) -> Project:
        project, user = await self._member_target(project_id, payload)
        if any(u.id == user.id for u in project.members):
            raise ConflictError("User already in Project")
        project = await self.projects.add_member(project, user)
        await self.session.commit()
        await self.bus.emit(EventName.PROJECT_USER_ADDED, {"project_id": project.id, "user_id": user.id, "email": user.email})
        return project

    async def remove_user(self, project_id: int, payload: ProjectMember) -> Project:
        project, user = await self._member_target(project_id, payload)
        if not any(u.id == user.id for u in project.members):
            raise ConflictError("User is not part of this project")
        project = await self.projects.remove_member(project, user)
        await self.session.commit()
        await self.bus.emit(EventName.PROJECT_USER_REMOVED, {"project_id": project.id, "user_id": user.id, "email": user.email})
        return project
