from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, constr


class ClientIn(BaseModel):
    name: constr(min_length=1, max_length=160)
    cpf: str = Field(..., description="Só dígitos são considerados (11)")
    whats: str = Field(..., description="DDD + número, 10 ou 11 dígitos")
    email: str | None = None
    birth_date: dt.date | None = None
    phones: str | None = None
    address: str | None = None
    city: str | None = None
    notes: str | None = None
    package_balance: int = Field(0, description="Saldo de pacote; negativo vira 0")
    professional_id: str | None = None


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    cpf: str | None = None
    whats: str | None = None
    email: str | None = None
    birth_date: dt.date | None = None
    phones: str | None = None
    address: str | None = None
    city: str | None = None
    notes: str | None = None
    package_balance: int
    professional_id: str | None = None


class ClientDeletedOut(BaseModel):
    id: str
    appointments_removed: int


class BalanceOut(BaseModel):
    id: str
    balance: int
