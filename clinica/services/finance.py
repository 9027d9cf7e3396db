from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinica.audit.helpers import Actor, record_audit
from clinica.core.errors import InvalidInput, NotFound, RemoteError
from clinica.core.logging import get_logger
from clinica.models.appointment import FINANCE_STATUSES, Appointment
from clinica.models.professional import Professional
from clinica.utils.week import month_bounds

log = get_logger(__name__)


@dataclass
class ProfessionalTotals:
    name: str
    total: float = 0.0
    transfer: float = 0.0
    clinic: float = 0.0


@dataclass
class ClientGroup:
    client_id: str
    name: str
    rows: list[Appointment] = field(default_factory=list)
    received: float = 0.0
    transfer: float = 0.0

    @property
    def clinic(self) -> float:
        return self.received - self.transfer

    @property
    def pending(self) -> bool:
        return any(not a.finance_posted for a in self.rows)


@dataclass
class FinanceSummary:
    month: str
    rows: list[Appointment]
    total_received: float = 0.0
    total_transfer: float = 0.0
    by_payment: dict[str, float] = field(default_factory=dict)
    by_professional: dict[str, ProfessionalTotals] = field(default_factory=dict)

    @property
    def clinic_result(self) -> float:
        return self.total_received - self.total_transfer


def month_rows(
    db: Session, key: str, professional_id: str | None = None
) -> list[Appointment]:
    """Agendamentos do mês com status financeiro, só de profissionais existentes."""
    first, last = month_bounds(key)
    stmt = (
        select(Appointment)
        .join(Professional, Professional.id == Appointment.professional_id)
        .where(
            Appointment.date >= first,
            Appointment.date <= last,
            Appointment.status.in_(FINANCE_STATUSES),
        )
        .order_by(Appointment.date, Appointment.time)
    )
    if professional_id:
        stmt = stmt.where(Appointment.professional_id == professional_id)
    return list(db.scalars(stmt))


def month_summary(
    db: Session, key: str, professional_id: str | None = None
) -> FinanceSummary:
    rows = month_rows(db, key, professional_id)
    names = dict(db.execute(select(Professional.id, Professional.name)).all())
    summary = FinanceSummary(month=key, rows=rows)
    by_payment: dict[str, float] = defaultdict(float)

    for a in rows:
        received = float(a.received_value or 0)
        transfer = float(a.transfer_value or 0)
        summary.total_received += received
        summary.total_transfer += transfer
        by_payment[a.payment_method.value] += received

        totals = summary.by_professional.get(a.professional_id)
        if totals is None:
            name = names.get(a.professional_id) or a.professional_name or "Profissional"
            totals = summary.by_professional[a.professional_id] = ProfessionalTotals(name)
        totals.total += received
        totals.transfer += transfer
        totals.clinic += received - transfer

    summary.by_payment = dict(by_payment)
    return summary


def group_by_client(rows: list[Appointment]) -> list[ClientGroup]:
    groups: dict[str, ClientGroup] = {}
    for a in rows:
        key = a.client_id or ""
        g = groups.get(key)
        if g is None:
            g = groups[key] = ClientGroup(client_id=key, name=a.client_name or "Cliente")
        g.rows.append(a)
        g.received += float(a.received_value or 0)
        g.transfer += float(a.transfer_value or 0)
    return sorted(groups.values(), key=lambda g: g.name.lower())


def post_finance(
    db: Session, appointment_id: str, received: float, transfer: float, actor: Actor
) -> Appointment:
    """Lança os valores do atendimento e trava como conferido (financePosted)."""
    if received < 0 or transfer < 0:
        raise InvalidInput("Valores não podem ser negativos.")
    ap = db.get(Appointment, appointment_id)
    if ap is None:
        raise NotFound("Agendamento")
    ap.received_value = received
    ap.transfer_value = transfer
    ap.finance_posted = True
    record_audit(
        db, actor=actor, action="FINANCE_POST", entity="appointment", entity_id=ap.id
    )
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("finance.post.failed", appointment_id=appointment_id, exc_info=True)
        raise RemoteError() from exc
    db.refresh(ap)
    log.info(
        "finance.posted",
        appointment_id=ap.id,
        received=received,
        transfer=transfer,
    )
    return ap
