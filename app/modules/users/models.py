from enum import Enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Enum as SAEnum
from app.core.base import Base, TimestampedMixin

class Role(str, Enum):
    USER = "USER"
    SUPERADMIN = "SUPERADMIN"

class User(Base, TimestampedMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))  # bcrypt hash
    role: Mapped[Role] = mapped_column(SAEnum(Role, native_enum=False, length=16), default=Role.USER)
