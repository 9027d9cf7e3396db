from __future__ import annotations

from pydantic import BaseModel, Field

from clinica.schemas.agenda import AppointmentOut


class FinancePostIn(BaseModel):
    received_value: float = Field(..., ge=0)
    transfer_value: float = Field(0, ge=0, description="Repasse ao profissional")


class ProfessionalTotalsOut(BaseModel):
    professional_id: str
    name: str
    total: float
    transfer: float
    clinic: float


class FinanceSummaryOut(BaseModel):
    month: str  # YYYY-MM
    total_received: float
    total_transfer: float
    clinic_result: float
    by_payment: dict[str, float]
    by_professional: list[ProfessionalTotalsOut]
    appointments: list[AppointmentOut]


class ClientGroupOut(BaseModel):
    client_id: str
    name: str
    received: float
    transfer: float
    clinic: float
    pending: bool  # algum atendimento ainda não lançado
    appointments: list[AppointmentOut]


class MyFinanceOut(BaseModel):
    month: str
    total_received: float
    total_transfer: float
    clinic_result: float
    clients: list[ClientGroupOut]
