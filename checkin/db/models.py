# checkin/db/models.py
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, DateTime, JSON
from datetime import datetime, timezone
import enum
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class CredentialStatus(str, enum.Enum):
    active = "active"
    used = "used"
    # Declarado pero ningún flujo actual lo produce (no hay barrido por tiempo)
    expired = "expired"


class Registration(Base):
    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    qr_code_set_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    registration_data: Mapped[dict] = mapped_column(JSON, default=dict)

    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    # UNIQUE: respaldo de la comprobación de unicidad al emitir
    check_in_token: Mapped[str | None] = mapped_column(String(64), unique=True, index=True, nullable=True)
    token_status: Mapped[str] = mapped_column(String(16), index=True, default=CredentialStatus.active.value)

    # Ambos a la vez o ninguno
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    checked_in_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
