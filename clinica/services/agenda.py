"""Editor de células da agenda: criar, alterar e excluir agendamentos.

Ordem de uma gravação: saldos (leitura fresca) → conflitos (leitura fresca)
→ uma única transação com agendamento + contador público + baixa de saldo +
audit log. Nada é gravado se qualquer verificação falhar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinica.audit.helpers import Actor, record_audit
from clinica.core.errors import (
    ConflictReason,
    InvalidInput,
    NotFound,
    RemoteError,
    SlotConflict,
)
from clinica.core.logging import get_logger
from clinica.models.appointment import (
    ROOMS,
    TIME_SLOTS,
    Appointment,
    AppointmentStatus,
    PaymentMethod,
)
from clinica.models.client import Client
from clinica.models.professional import Professional
from clinica.services import balance_ledger, realized_mirror
from clinica.services.slot_validator import (
    SlotCandidate,
    active_appointments,
    ensure_slot_free,
    orphan_slot_occupants,
)
from clinica.utils.week import current_month_key
from clinica.utils.tz import clinic_tz

log = get_logger(__name__)


@dataclass
class CellInput:
    date: date
    time: str
    room: int
    professional_id: str
    client_id: str = ""
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    uses_client_package: bool = False
    uses_professional_advance: bool = False
    id: str | None = None


VANISHED_MESSAGE = "Este agendamento foi excluído por outro usuário."


@dataclass
class SaveResult:
    # None quando o agendamento editado já tinha sido excluído (nada foi gravado)
    appointment: Appointment | None
    created: bool
    warnings: list[str] = field(default_factory=list)

    @property
    def saved(self) -> bool:
        return self.appointment is not None


@dataclass
class AgendaSnapshot:
    clients: list[Client]
    professionals: list[Professional]
    appointments: list[Appointment]


def _conflict_from_integrity(exc: IntegrityError) -> ConflictReason | None:
    # Postgres cita o nome da constraint; SQLite lista as colunas
    msg = str(exc.orig).lower()
    if "uq_appt_slot_room" in msg or "appointments.room" in msg:
        return "room"
    if "uq_appt_slot_prof" in msg or "appointments.professional_id" in msg:
        return "professional"
    if "uq_appt_slot_client" in msg or "appointments.client_id" in msg:
        return "client"
    return None


def _raise_integrity(db: Session, exc: IntegrityError) -> None:
    db.rollback()
    reason = _conflict_from_integrity(exc)
    if reason:
        # outra pessoa gravou o mesmo slot entre a checagem e a escrita
        log.warning("agenda.cell.race_lost", conflict=reason)
        raise SlotConflict(reason) from exc
    raise exc


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        _raise_integrity(db, exc)
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("agenda.commit.failed", exc_info=True)
        raise RemoteError() from exc


def _validate_shape(data: CellInput) -> None:
    if data.time[:5] not in TIME_SLOTS:
        raise InvalidInput(f"Horário inválido: {data.time}")
    if data.room not in ROOMS:
        raise InvalidInput(f"Sala inválida: {data.room}")
    if data.date.weekday() == 6:
        raise InvalidInput("A clínica não atende aos domingos.")


def _release_orphans(
    db: Session, candidate: SlotCandidate, ignore_id: str | None, actor: Actor
) -> None:
    # invisíveis para a checagem de conflito, mas ainda presos às constraints do slot
    orphans = orphan_slot_occupants(db, candidate, ignore_id)
    if not orphans:
        return
    for o in orphans:
        if db.get(Professional, o.professional_id) is not None:
            realized_mirror.on_delete(db, o)
        db.delete(o)
        record_audit(
            db, actor=actor, action="DELETE", entity="appointment", entity_id=o.id
        )
        log.info("agenda.cell.orphan_released", appointment_id=o.id)
    db.flush()


def save_cell(db: Session, data: CellInput, actor: Actor) -> SaveResult:
    _validate_shape(data)
    hhmm = data.time[:5]

    if data.id and db.get(Appointment, data.id) is None:
        # editado aqui, excluído por outra pessoa: vira exclusão (no-op)
        log.info("agenda.cell.edit_vanished", appointment_id=data.id)
        return SaveResult(appointment=None, created=False, warnings=[VANISHED_MESSAGE])

    prof = db.get(Professional, data.professional_id)
    if prof is None:
        raise NotFound("Profissional")
    client = None
    if data.client_id:
        client = db.get(Client, data.client_id)
        if client is None:
            raise NotFound("Cliente")

    balance_ledger.ensure_can_consume(
        db,
        client_id=data.client_id,
        professional_id=data.professional_id,
        uses_package=data.uses_client_package,
        uses_advance=data.uses_professional_advance,
    )
    candidate = SlotCandidate(
        date=data.date,
        time=hhmm,
        room=data.room,
        professional_id=data.professional_id,
        client_id=data.client_id,
    )
    ensure_slot_free(db, candidate, ignore_id=data.id)

    fields = dict(
        date=data.date,
        time=hhmm,
        room=data.room,
        client_id=data.client_id or None,
        client_name=client.name if client else "",
        professional_id=prof.id,
        professional_name=prof.name,
        payment_method=data.payment_method,
        status=data.status,
        uses_client_package=data.uses_client_package,
        uses_professional_advance=data.uses_professional_advance,
    )

    try:
        _release_orphans(db, candidate, data.id, actor)
        if data.id:
            ap = db.get(Appointment, data.id)
            before = realized_mirror.fact_of(ap)
            for key, value in fields.items():
                setattr(ap, key, value)
            db.flush()
            realized_mirror.on_update(db, before, ap)
            created = False
        else:
            ap = Appointment(
                **fields,
                received_value=0.0,
                transfer_value=0.0,
                finance_posted=False,
            )
            db.add(ap)
            db.flush()
            realized_mirror.on_create(db, ap)
            created = True

        warnings = balance_ledger.apply_completion_side_effects(db, ap)
        record_audit(
            db,
            actor=actor,
            action="CREATE" if created else "UPDATE",
            entity="appointment",
            entity_id=ap.id,
        )
    except IntegrityError as exc:
        _raise_integrity(db, exc)

    _commit(db)
    db.refresh(ap)
    log.info(
        "agenda.cell.saved",
        appointment_id=ap.id,
        created=created,
        date=ap.date.isoformat(),
        time=ap.time,
        room=ap.room,
        status=ap.status.value,
        warnings=len(warnings),
    )
    return SaveResult(appointment=ap, created=created, warnings=warnings)


def delete_cell(db: Session, appointment_id: str, actor: Actor) -> bool:
    """Exclui o agendamento. Se já não existir, não faz nada (retorna False)."""
    ap = db.get(Appointment, appointment_id)
    if ap is None:
        log.info("agenda.cell.delete_missing", appointment_id=appointment_id)
        return False
    realized_mirror.on_delete(db, ap)
    db.delete(ap)
    record_audit(
        db, actor=actor, action="DELETE", entity="appointment", entity_id=appointment_id
    )
    _commit(db)
    log.info("agenda.cell.deleted", appointment_id=appointment_id)
    return True


def live_ids(db: Session) -> tuple[list[str], list[str]]:
    prof_ids = list(db.scalars(select(Professional.id)))
    client_ids = list(db.scalars(select(Client.id)))
    return prof_ids, client_ids


def list_appointments(
    db: Session,
    *,
    professional_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    newest_first: bool = False,
    limit: int | None = None,
) -> list[Appointment]:
    """Agendamentos com vínculos ativos, opcionalmente filtrados."""
    stmt = select(Appointment)
    if professional_id:
        stmt = stmt.where(Appointment.professional_id == professional_id)
    if date_from:
        stmt = stmt.where(Appointment.date >= date_from)
    if date_to:
        stmt = stmt.where(Appointment.date <= date_to)
    if newest_first:
        stmt = stmt.order_by(Appointment.date.desc(), Appointment.time.desc())
    else:
        stmt = stmt.order_by(Appointment.date.asc(), Appointment.time.asc())
    if limit:
        stmt = stmt.limit(limit)
    prof_ids, client_ids = live_ids(db)
    return active_appointments(db.scalars(stmt), prof_ids, client_ids)


def resync_current_month(db: Session) -> dict[str, int] | None:
    """Auto-correção do contador público do mês vigente; falhas só geram log."""
    key = current_month_key(clinic_tz())
    try:
        prof_ids = list(db.scalars(select(Professional.id)))
        counts = realized_mirror.resync_month(db, key, prof_ids)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.warning("mirror.resync.failed", month=key, exc_info=True)
        return None
    return counts


def load_snapshot(db: Session, limit: int) -> AgendaSnapshot:
    """Carga inicial do painel do admin (inclui a auto-correção do contador)."""
    resync_current_month(db)
    clients = list(db.scalars(select(Client).order_by(Client.name)))
    professionals = list(db.scalars(select(Professional).order_by(Professional.name)))
    appointments = list_appointments(db, newest_first=True, limit=limit)
    return AgendaSnapshot(
        clients=clients, professionals=professionals, appointments=appointments
    )
