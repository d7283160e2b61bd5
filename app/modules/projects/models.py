from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, ForeignKey, Table, Column, Integer
from app.core.base import Base, TimestampedMixin
from app.modules.users.models import User

project_members = Table(
    "project_members",
    Base.metadata,
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Project(Base, TimestampedMixin):
    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(25), unique=True)
    description: Mapped[str] = mapped_column(Text, default="")
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    # selectin so membership is loaded eagerly; async sessions cannot lazy-load
    members: Mapped[list[User]] = relationship(secondary=project_members, lazy="selectin")

    def has_member(self, user_id: int) -> bool:
        return self.owner_id == user_id or any(u.id == user_id for u in self.members)
