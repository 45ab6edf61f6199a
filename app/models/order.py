import uuid

from sqlalchemy import Boolean, JSON, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

class Order(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "orders"
    restaurant_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    items: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    total_price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    delivered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    address: Mapped[str | None] = mapped_column(String(400), nullable=True)
