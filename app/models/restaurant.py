from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

CONFIRM_STATUS_PENDING = "none"
CONFIRM_STATUS_APPROVED = "true"
CONFIRM_STATUS_REJECTED = "false"

class Restaurant(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "restaurants"
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(String(400), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    confirm_status: Mapped[str] = mapped_column(String(8), nullable=False, index=True, default=CONFIRM_STATUS_PENDING)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
