from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import get_event_bus
from app.core.db import get_session
from app.core.security import get_principal, Principal
from app.modules.events.bus import EventBus
from app.modules.templates.schemas import TemplateCreate, TemplateUpdate, TemplateOut
from app.modules.templates.service import TemplateService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session), bus: EventBus = Depends(get_event_bus)) -> TemplateService:
    return TemplateService(session, bus)

@router.post("/template", response_model=TemplateOut, status_code=201)
async def create_template(payload: TemplateCreate, principal: Principal = Depends(get_principal), service: TemplateService = Depends(svc)):
    return await service.create(payload, principal)

@router.get("/template/my-templates", response_model=list[TemplateOut])
async def my_templates(principal: Principal = Depends(get_principal), service: TemplateService = Depends(svc)):
    return await service.list_mine(principal)

@router.get("/template/{template_id}", response_model=TemplateOut)
async def get_template(template_id: int, principal: Principal = Depends(get_principal), service: TemplateService = Depends(svc)):
    return await service.get(template_id, principal)

@router.patch("/template/{template_id}", response_model=TemplateOut)
async def update_template(template_id: int, payload: TemplateUpdate, principal: Principal = Depends(get_principal), service: TemplateService = Depends(svc)):
    return await service.update(template_id, payload, principal)

@router.delete("/template/{template_id}")
async def delete_template(template_id: int, principal: Principal = Depends(get_principal), service: TemplateService = Depends(svc)):
    await service.remove(template_id, principal)
    return {"message": "Template deleted successfully"}
