from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, ForeignKey, UniqueConstraint
from app.core.base import Base, TimestampedMixin

class Template(Base, TimestampedMixin):
    __tablename__ = "templates"

    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, default="")
    placeholders: Mapped[list] = mapped_column(JSON, default=list)  # [{"key": ..., "value": ...}]
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"), index=True)
    __table_args__ = (UniqueConstraint("name", "category_id", name="uq_template_name_category"),)
