from datetime import datetime
from pydantic import BaseModel, Field

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    project_id: int

class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)

class CategoryOut(BaseModel):
    id: int
    name: str
    description: str | None
    project_id: int
    created_by_id: int
    created_at: datetime

    class Config:
        from_attributes = True
