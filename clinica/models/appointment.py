from __future__ import annotations

import datetime as dt
import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinica.db.base_class import Base
from clinica.models.client import new_id

ROOMS: tuple[int, ...] = (1, 2, 3, 4)

# início de cada slot de 1h (intervalo de almoço 12h-14h)
TIME_SLOTS: tuple[str, ...] = (
    "08:00",
    "09:00",
    "10:00",
    "11:00",
    "14:00",
    "15:00",
    "16:00",
    "17:00",
    "18:00",
    "19:00",
    "20:00",
)


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "agendado"
    DONE = "realizado"
    CHANGED = "alterado"
    CANCELLED = "cancelado"


class PaymentMethod(str, enum.Enum):
    CASH = "dinheiro"
    PIX = "pix"
    CARD = "cartao"


# cores da grade da agenda
STATUS_BG: dict[AppointmentStatus, str] = {
    AppointmentStatus.SCHEDULED: "#cfe5ff",
    AppointmentStatus.DONE: "#b7f7cc",
    AppointmentStatus.CHANGED: "#ffe08a",
    AppointmentStatus.CANCELLED: "#ffb3b8",
}

# status que entram no fechamento financeiro do mês
FINANCE_STATUSES = (
    AppointmentStatus.DONE,
    AppointmentStatus.CHANGED,
    AppointmentStatus.CANCELLED,
)


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    room: Mapped[int] = mapped_column(Integer, nullable=False)

    # None = sala sublocada, sem cliente; não é FK para sobreviver à exclusão do cliente
    client_id: Mapped[str | None] = mapped_column(String(32), index=True)
    client_name: Mapped[str] = mapped_column(String(160), nullable=False, default="")
    professional_id: Mapped[str] = mapped_column(
        ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False
    )
    professional_name: Mapped[str] = mapped_column(
        String(120), nullable=False, default=""
    )

    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method_enum"),
        nullable=False,
        default=PaymentMethod.CASH,
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(AppointmentStatus, name="appointment_status_enum"),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )
    received_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    transfer_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    finance_posted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    uses_client_package: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    uses_professional_advance: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: dt.datetime.now(tz=dt.UTC),
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: dt.datetime.now(tz=dt.UTC),
        onupdate=lambda: dt.datetime.now(tz=dt.UTC),
    )

    professional = relationship("Professional")

    __table_args__ = (
        UniqueConstraint("date", "time", "room", name="uq_appt_slot_room"),
        UniqueConstraint("date", "time", "professional_id", name="uq_appt_slot_prof"),
        # NULLs são distintos: slots sem cliente não colidem entre si
        UniqueConstraint("date", "time", "client_id", name="uq_appt_slot_client"),
        CheckConstraint("room BETWEEN 1 AND 4", name="ck_appt_room"),
        Index("ix_appt_professional_id", "professional_id"),
        Index("ix_appt_date", "date"),
    )
