from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field, field_validator

from clinica.models.appointment import (
    ROOMS,
    TIME_SLOTS,
    Appointment,
    AppointmentStatus,
    PaymentMethod,
)
from clinica.schemas.clients import ClientOut
from clinica.schemas.professionals import ProfessionalOut


class CellIn(BaseModel):
    id: str | None = Field(None, description="Informe para alterar; vazio cria um novo")
    date: dt.date
    time: str = Field(..., description="HH:MM de um dos horários da grade")
    room: int
    professional_id: str = Field(..., min_length=1)
    client_id: str = Field("", description='"" = sala sublocada, sem cliente')
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    uses_client_package: bool = False
    uses_professional_advance: bool = False

    @field_validator("time")
    @classmethod
    def _time_in_grid(cls, v: str) -> str:
        hhmm = (v or "")[:5]
        if hhmm not in TIME_SLOTS:
            raise ValueError(f"horário fora da grade: {v}")
        return hhmm

    @field_validator("room")
    @classmethod
    def _room_exists(cls, v: int) -> int:
        if v not in ROOMS:
            raise ValueError(f"sala inexistente: {v}")
        return v

    @field_validator("id", mode="before")
    @classmethod
    def _blank_id(cls, v):
        return v or None

    @field_validator("client_id", mode="before")
    @classmethod
    def _no_client(cls, v):
        return v or ""


class AppointmentOut(BaseModel):
    id: str
    date: dt.date
    time: str
    room: int
    client_id: str
    client_name: str
    professional_id: str
    professional_name: str
    payment_method: PaymentMethod
    status: AppointmentStatus
    received_value: float
    transfer_value: float
    finance_posted: bool
    uses_client_package: bool
    uses_professional_advance: bool


def to_out(a: Appointment) -> AppointmentOut:
    return AppointmentOut(
        id=a.id,
        date=a.date,
        time=a.time,
        room=a.room,
        client_id=a.client_id or "",  # NULL no banco = "" na API
        client_name=a.client_name or "",
        professional_id=a.professional_id,
        professional_name=a.professional_name or "",
        payment_method=a.payment_method,
        status=a.status,
        received_value=float(a.received_value or 0),
        transfer_value=float(a.transfer_value or 0),
        finance_posted=bool(a.finance_posted),
        uses_client_package=bool(a.uses_client_package),
        uses_professional_advance=bool(a.uses_professional_advance),
    )


class SaveCellOut(BaseModel):
    saved: bool
    created: bool
    appointment: AppointmentOut | None = None
    warnings: list[str] = []


class GridCellOut(BaseModel):
    room: int
    visible: bool
    color: str
    appointment: AppointmentOut | None = None  # None = livre (ou oculto)


class GridRowOut(BaseModel):
    day: dt.date
    time: str
    cells: list[GridCellOut]


class GridDayTotalsOut(BaseModel):
    day: dt.date
    by_room: dict[int, int]


class GridOut(BaseModel):
    anchor: dt.date
    mode: str
    days: list[dt.date]
    rooms: list[int]
    time_slots: list[str]
    rows: list[GridRowOut]  # dia x horário, cada uma com uma célula por sala
    totals: list[GridDayTotalsOut]
    window_total: int


class AgendaSnapshotOut(BaseModel):
    clients: list[ClientOut]
    professionals: list[ProfessionalOut]
    appointments: list[AppointmentOut]


class MonthCountersOut(BaseModel):
    month: str
    realized: int
    scheduled_ahead: int
