from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.core.security import Principal
from app.modules.categories.models import Category
from app.modules.categories.repository import CategoryRepository
from app.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryOut
from app.modules.events.bus import EventBus
from app.modules.events.catalog import EventName
from app.modules.projects.repository import ProjectRepository

DUPLICATE_NAME = "This category name is not allowed. Please choose a different name."

def snapshot(category: Category) -> dict:
    return CategoryOut.model_validate(category).model_dump(mode="json")

class CategoryService:
    def __init__(self, session: AsyncSession, bus: EventBus):
        self.session = session
        self.bus = bus
        self.categories = CategoryRepository(session)
        self.projects = ProjectRepository(session)

    async def create(self, payload: CategoryCreate, principal: Principal) -> Category:
        project = await self.projects.get(payload.project_id)
        if not project:
            raise NotFoundError("Project not found")
        if not project.has_member(principal.user_id):
            raise ForbiddenError("You are not a member of this project")
        if await self.categories.get_by_name(payload.name, payload.project_id):
            raise ConflictError(DUPLICATE_NAME)
        obj = await self.categories.create(**payload.model_dump(), created_by_id=principal.user_id)
        await self.session.commit()
        await self.bus.emit(EventName.CATEGORY_CREATED, snapshot(obj))
        return obj

    async def list_all(self):
        return await self.categories.list()

    async def list_mine(self, principal: Principal):
        return await self.categories.list(created_by_id=principal.user_id)

    async def get(self, category_id: int, principal: Principal, action: str = "view") -> Category:
        obj = await self.categories.get(category_id)
        if not obj:
            raise NotFoundError("Category not found")
        if obj.created_by_id != principal.user_id and not principal.is_superadmin:
            raise ForbiddenError(f"You can only {action} your own categories")
        return obj

    async def update(self, category_id: int, payload: CategoryUpdate, principal: Principal) -> Category:
        obj = await self.get(category_id, principal, "update")
        if payload.name:
            existing = await self.categories.get_by_name(payload.name, obj.project_id)
            if existing and existing.id != obj.id:
                raise ConflictError(DUPLICATE_NAME)
        obj = await self.categories.update_fields(obj, **payload.model_dump(exclude_unset=True))
        await self.session.commit()
        await self.bus.emit(EventName.CATEGORY_UPDATED, snapshot(obj))
        return obj

    async def remove(self, category_id: int, principal: Principal) -> None:
        obj = await self.get(category_id, principal, "delete")
        data = snapshot(obj)
        await self.categories.delete(obj)
        await self.session.commit()
        await self.bus.emit(EventName.CATEGORY_DELETED, data)
