import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger("events.catalog")

class EventName(str, Enum):
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    PROJECT_CREATED = "project.created"
    PROJECT_UPDATED = "project.updated"
    PROJECT_DELETED = "project.deleted"
    PROJECT_USER_ADDED = "project.user_added"
    PROJECT_USER_REMOVED = "project.user_removed"
    CATEGORY_CREATED = "category.created"
    CATEGORY_UPDATED = "category.updated"
    CATEGORY_DELETED = "category.deleted"
    TEMPLATE_CREATED = "template.created"
    TEMPLATE_UPDATED = "template.updated"
    TEMPLATE_DELETED = "template.deleted"

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

class Event(BaseModel):
    """One emission of a domain event. Transient, never persisted."""
    model_config = ConfigDict(frozen=True)

    name: EventName
    timestamp: str = Field(default_factory=_now_iso)
    data: Any = None

    def envelope(self) -> dict:
        return {"event": self.name.value, "timestamp": self.timestamp, "data": self.data}

    def to_json(self) -> bytes:
        # serialized once per event; the same bytes are streamed, posted and signed
        return json.dumps(self.envelope(), separators=(",", ":"), ensure_ascii=False, default=self._coerce).encode("utf-8")

    def _coerce(self, value: Any) -> str:
        log.warning("Event %s carries non-JSON %s; sent as its string form", self.name.value, type(value).__name__)
        return str(value)
