import uuid

from sqlalchemy import Boolean, JSON, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

class MenuItem(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "menu_items"
    restaurant_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    ingredients: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    available_for_sale: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
