from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import get_event_bus
from app.core.db import get_session
from app.core.security import require_roles
from app.modules.events.bus import EventBus
from app.modules.users.models import Role
from app.modules.users.schemas import UserCreate, UserUpdate, UserOut, UserPage
from app.modules.users.service import UserService

router = APIRouter(dependencies=[Depends(require_roles(Role.SUPERADMIN))])

def svc(session: AsyncSession = Depends(get_session), bus: EventBus = Depends(get_event_bus)) -> UserService:
    return UserService(session, bus)

@router.post("/user", response_model=UserOut, status_code=201)
async def create_user(payload: UserCreate, service: UserService = Depends(svc)):
    return await service.create(payload)

@router.get("/user", response_model=UserPage)
async def list_users(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100), service: UserService = Depends(svc)):
    return await service.list(page, limit)

@router.get("/user/{user_id}", response_model=UserOut)
async def get_user(user_id: int, service: UserService = Depends(svc)):
    return await service.get(user_id)

@router.patch("/user/{user_id}", response_model=UserOut)
async def update_user(user_id: int, payload: UserUpdate, service: UserService = Depends(svc)):
    return await service.update(user_id, payload)

@router.delete("/user/{user_id}")
async def delete_user(user_id: int, service: UserService = Depends(svc)):
    await service.remove(user_id)
    return {"message": "User deleted successfully"}
