from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import get_event_bus
from app.core.db import get_session
from app.core.security import require_roles, Principal
from app.modules.events.bus import EventBus
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectMember, ProjectOut
from app.modules.projects.service import ProjectService
from app.modules.users.models import Role

router = APIRouter()
superadmin = require_roles(Role.SUPERADMIN)

def svc(session: AsyncSession = Depends(get_session), bus: EventBus = Depends(get_event_bus)) -> ProjectService:
    return ProjectService(session, bus)

@router.post("/project", response_model=ProjectOut, status_code=201)
async def create_project(payload: ProjectCreate, principal: Principal = Depends(superadmin), service: ProjectService = Depends(svc)):
    return await service.create(payload, principal.user_id)

@router.get("/project", response_model=list[ProjectOut], dependencies=[Depends(superadmin)])
async def list_projects(service: ProjectService = Depends(svc)):
    return await service.list()

@router.patch("/project/{project_id}", response_model=ProjectOut, dependencies=[Depends(superadmin)])
async def update_project(project_id: int, payload: ProjectUpdate, service: ProjectService = Depends(svc)):
    return await service.update(project_id, payload)

@router.delete("/project/{project_id}", dependencies=[Depends(superadmin)])
async def delete_project(project_id: int, service: ProjectService = Depends(svc)):
    await service.remove(project_id)
    return {"message": "Project deleted successfully"}

@router.post("/project/{project_id}/add-user", response_model=ProjectOut, dependencies=[Depends(superadmin)])
async def add_user_to_project(project_id: int, payload: ProjectMember, service: ProjectService = Depends(svc)):
    return await service.add_user(project_id, payload)

@router.delete("/project/{project_id}/delete-user", response_model=ProjectOut, dependencies=[Depends(superadmin)])
async def remove_user_from_project(project_id: int, payload: ProjectMember, service: ProjectService = Depends(svc)):
    return await service.remove_user(project_id, payload)
