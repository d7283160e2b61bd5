from typing import Any
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.core.security import Principal
from app.modules.categories.repository import CategoryRepository
from app.modules.events.bus import EventBus
from app.modules.events.catalog import EventName
from app.modules.templates.models import Template
from app.modules.templates.repository import TemplateRepository
from app.modules.templates.schemas import TemplateCreate, TemplateUpdate, TemplateOut

DUPLICATE_NAME = "Template name already exists in this category"

def normalize_placeholders(raw: list[Any] | None) -> list[dict]:
    """Accept {"key", "value"} objects or [key, value] pairs; drop anything else."""
    out = []
    for p in raw or []:
        if isinstance(p, dict) and "key" in p and "value" in p:
            out.append({"key": str(p["key"]), "value": str(p["value"])})
        elif isinstance(p, (list, tuple)) and len(p) >= 2:
            out.append({"key": str(p[0]), "value": str(p[1])})
    return out

def snapshot(template: Template) -> dict:
    return TemplateOut.model_validate(template).model_dump(mode="json")

class TemplateService:
    def __init__(self, session: AsyncSession, bus: EventBus):
        self.session = session
        self.bus = bus
        self.templates = TemplateRepository(session)
        self.categories = CategoryRepository(session)

    async def _check_category(self, category_id: int, principal: Principal, action: str) -> None:
        category = await self.categories.get(category_id)
        if not category:
            raise NotFoundError("Category not found")
        if category.created_by_id != principal.user_id and not principal.is_superadmin:
            raise ForbiddenError(f"You can only {action} your own templates")

    async def create(self, payload: TemplateCreate, principal: Principal) -> Template:
        category = await self.categories.get(payload.category_id)
        if not category:
            raise NotFoundError("Category not found")
        if category.created_by_id != principal.user_id:
            raise ForbiddenError("You can only create templates in your own categories")
        if await self.templates.get_by_name(payload.name, payload.category_id):
            raise ConflictError(DUPLICATE_NAME)
        obj = await self.templates.create(
            name=payload.name,
            description=payload.description,
            content=payload.content or "",
            placeholders=normalize_placeholders(payload.placeholders),
            category_id=payload.category_id,
        )
        await self.session.commit()
        await self.bus.emit(EventName.TEMPLATE_CREATED, snapshot(obj))
        return obj

    async def list_mine(self, principal: Principal):
        return await self.templates.list_for_user(principal.user_id)

    async def get(self, template_id: int, principal: Principal, action: str = "view") -> Template:
        obj = await self.templates.get(template_id)
        if not obj:
            raise NotFoundError("Template not found")
        await self._check_category(obj.category_id, principal, action)
        return obj

    async def update(self, template_id: int, payload: TemplateUpdate, principal: Principal) -> Template:
        obj = await self.get(template_id, principal, "update")
        if payload.name:
            existing = await self.templates.get_by_name(payload.name, obj.category_id)
            if existing and existing.id != obj.id:
                raise ConflictError(DUPLICATE_NAME)
        data = payload.model_dump(exclude_unset=True)
        if "placeholders" in data:
            data["placeholders"] = normalize_placeholders(data["placeholders"])
        obj = await self.templates.update_fields(obj, **data)
        await self.session.commit()
        await self.bus.emit(EventName.TEMPLATE_UPDATED, snapshot(obj))
        return obj

    async def remove(self, template_id: int, principal: Principal) -> None:
        obj = await self.get(template_id, principal, "delete")
        data = snapshot(obj)
        await self.templates.delete(obj)
        await self.session.commit()
        await self.bus.emit(EventName.TEMPLATE_DELETED, data)
