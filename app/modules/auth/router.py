from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.modules.auth.schemas import LoginRequest, TokenOut
from app.modules.auth.service import AuthService

router = APIRouter()

@router.post("/auth/login", response_model=TokenOut)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_session)):
    return await AuthService(session).login(payload)
