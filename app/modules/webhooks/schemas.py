from datetime import datetime
from pydantic import BaseModel, Field
from app.modules.events.catalog import EventName

class WebhookCreate(BaseModel):
    url: str = Field(..., max_length=2048)
    events: list[str]
    secret: str | None = Field(default=None, max_length=255)

class WebhookUpdate(BaseModel):
    url: str | None = Field(default=None, max_length=2048)
    events: list[str] | None = None
    active: bool | None = None

class WebhookOut(BaseModel):
    id: int
    url: str
    events: list[EventName]
    active: bool
    owner_id: int
    has_secret: bool = False
    created_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, obj) -> "WebhookOut":
        out = cls.model_validate(obj)
        out.has_secret = bool(obj.secret)
        return out
