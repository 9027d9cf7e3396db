"""Painel do profissional: agenda própria, contadores do mês e clientes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from clinica.models.appointment import AppointmentStatus
from clinica.models.client import Client
from clinica.models.professional import Professional
from clinica.services.slot_validator import SlotRow
from clinica.utils.tz import now_local, slot_start_local
from clinica.utils.week import month_bounds, month_key


@dataclass(frozen=True)
class MonthCounters:
    month: str
    realized: int
    scheduled_ahead: int


def month_counters(
    appointments: Iterable[SlotRow],
    professional_id: str,
    anchor: date,
    now: datetime | None = None,
) -> MonthCounters:
    """
    Realizados no mês do `anchor` e agendados ainda por vir nesse mesmo mês,
    só do profissional informado.
    """
    key = month_key(anchor)
    first, last = month_bounds(key)
    now = now or now_local()
    realized = ahead = 0
    for a in appointments:
        if a.professional_id != professional_id or not (first <= a.date <= last):
            continue
        if a.status == AppointmentStatus.DONE:
            realized += 1
        elif a.status == AppointmentStatus.SCHEDULED:
            if slot_start_local(a.date, a.time, now.tzinfo) >= now:
                ahead += 1
    return MonthCounters(month=key, realized=realized, scheduled_ahead=ahead)


def my_clients(db: Session, prof: Professional) -> list[Client]:
    """Clientes associados ao profissional ou atribuídos a ele."""
    stmt = (
        select(Client)
        .where(
            or_(
                Client.professional_id == prof.id,
                Client.id.in_([c.id for c in prof.associated_clients]),
            )
        )
        .order_by(Client.name)
    )
    return list(db.scalars(stmt))

