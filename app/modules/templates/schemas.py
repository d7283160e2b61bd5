from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field

class Placeholder(BaseModel):
    key: str
    value: str

class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    content: str = ""
    # loose on input; normalized to Placeholder pairs by the service
    placeholders: list[Any] | None = None
    category_id: int

class TemplateUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    content: str | None = None
    placeholders: list[Any] | None = None

class TemplateOut(BaseModel):
    id: int
    name: str
    description: str | None
    content: str
    placeholders: list[Placeholder]
    category_id: int
    created_at: datetime

    class Config:
        from_attributes = True
