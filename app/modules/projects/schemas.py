from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from app.modules.users.schemas import UserOut

class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=25)
    description: str = ""

class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=25)
    description: str | None = None

class ProjectMember(BaseModel):
    email: EmailStr

class ProjectOut(BaseModel):
    id: int
    title: str
    description: str
    owner_id: int
    created_at: datetime
    members: list[UserOut] = []

    class Config:
        from_attributes = True
