from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from app.modules.users.models import Role

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=20)
    role: Role | None = None

class UserUpdate(BaseModel):
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=20)

class UserOut(BaseModel):
    id: int
    email: str
    role: Role
    created_at: datetime

    class Config:
        from_attributes = True

class UserPage(BaseModel):
    items: list[UserOut]
    total: int
    page: int
    limit: int
