from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import get_event_bus
from app.core.db import get_session
from app.core.security import get_principal, require_roles, Principal
from app.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryOut
from app.modules.categories.service import CategoryService
from app.modules.events.bus import EventBus
from app.modules.users.models import Role

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session), bus: EventBus = Depends(get_event_bus)) -> CategoryService:
    return CategoryService(session, bus)

@router.post("/categorie", response_model=CategoryOut, status_code=201)
async def create_category(payload: CategoryCreate, principal: Principal = Depends(get_principal), service: CategoryService = Depends(svc)):
    return await service.create(payload, principal)

@router.get("/categorie/my-categories", response_model=list[CategoryOut])
async def my_categories(principal: Principal = Depends(get_principal), service: CategoryService = Depends(svc)):
    return await service.list_mine(principal)

@router.get("/categorie/all", response_model=list[CategoryOut], dependencies=[Depends(require_roles(Role.SUPERADMIN))])
async def list_categories(service: CategoryService = Depends(svc)):
    return await service.list_all()

@router.get("/categorie/{category_id}", response_model=CategoryOut)
async def get_category(category_id: int, principal: Principal = Depends(get_principal), service: CategoryService = Depends(svc)):
    return await service.get(category_id, principal)

@router.patch("/categorie/{category_id}", response_model=CategoryOut)
async def update_category(category_id: int, payload: CategoryUpdate, principal: Principal = Depends(get_principal), service: CategoryService = Depends(svc)):
    return await service.update(category_id, payload, principal)

@router.delete("/categorie/{category_id}")
async def delete_category(category_id: int, principal: Principal = Depends(get_principal), service: CategoryService = Depends(svc)):
    await service.remove(category_id, principal)
    return {"message": "Category deleted successfully"}
