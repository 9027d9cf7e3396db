"""Contador público de atendimentos realizados por profissional/mês.

A página inicial não pode ler a coleção de agendamentos (dados de clientes),
então mantemos aqui só o número de "realizados" por mês. Toda mudança é um
incremento relativo na mesma transação do agendamento; `resync_month`
recalcula o mês inteiro do zero para corrigir desvios.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import NamedTuple

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from clinica.core.logging import get_logger
from clinica.models.appointment import Appointment, AppointmentStatus
from clinica.models.professional import ProfessionalMonthlyRealized
from clinica.utils.week import month_bounds, month_key

log = get_logger(__name__)


class RealizedFact(NamedTuple):
    professional_id: str
    month_key: str
    done: bool


def fact_of(appointment: Appointment) -> RealizedFact:
    return RealizedFact(
        appointment.professional_id,
        month_key(appointment.date),
        appointment.status == AppointmentStatus.DONE,
    )


def _upsert(db: Session, professional_id: str, key: str, insert_value: int, on_conflict):
    """INSERT ... ON CONFLICT DO UPDATE (Postgres/SQLite); senão UPDATE e depois INSERT."""
    table = ProfessionalMonthlyRealized
    dialect = db.get_bind().dialect.name
    if dialect in ("postgresql", "sqlite"):
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = (
            insert(table)
            .values(professional_id=professional_id, month_key=key, realized=insert_value)
            .on_conflict_do_update(
                index_elements=["professional_id", "month_key"],
                set_={"realized": on_conflict},
            )
        )
        db.execute(stmt)
        return
    updated = db.execute(
        update(table)
        .where(table.professional_id == professional_id, table.month_key == key)
        .values(realized=on_conflict)
        .execution_options(synchronize_session=False)
    )
    if not updated.rowcount:
        db.add(table(professional_id=professional_id, month_key=key, realized=insert_value))
        db.flush()


def increment(db: Session, professional_id: str, key: str, delta: int) -> None:
    """realized = realized + delta (relativo); cria a linha se ainda não existir."""
    if not professional_id or not key or not delta:
        return
    _upsert(
        db, professional_id, key, delta, ProfessionalMonthlyRealized.realized + delta
    )


def set_absolute(db: Session, professional_id: str, key: str, value: int) -> None:
    _upsert(db, professional_id, key, value, value)


def on_create(db: Session, appointment: Appointment) -> None:
    fact = fact_of(appointment)
    if fact.done:
        increment(db, fact.professional_id, fact.month_key, +1)


def on_update(db: Session, before: RealizedFact | None, after: Appointment) -> None:
    """
    Move uma unidade "realizada" entre baldes quando (profissional, mês, realizado)
    muda: cobre troca de status, de profissional e de data de uma vez.
    """
    new = fact_of(after)
    if before == new:
        return
    if before is not None and before.done:
        increment(db, before.professional_id, before.month_key, -1)
    if new.done:
        increment(db, new.professional_id, new.month_key, +1)


def on_delete(db: Session, appointment: Appointment) -> None:
    fact = fact_of(appointment)
    if fact.done:
        increment(db, fact.professional_id, fact.month_key, -1)


def count_realized(db: Session, key: str) -> Counter[str]:
    first, last = month_bounds(key)
    rows = db.execute(
        select(Appointment.professional_id, func.count(Appointment.id))
        .where(
            Appointment.status == AppointmentStatus.DONE,
            Appointment.date >= first,
            Appointment.date <= last,
        )
        .group_by(Appointment.professional_id)
    ).all()
    return Counter({pid: int(n) for pid, n in rows})


def resync_month(
    db: Session, key: str, professional_ids: Iterable[str]
) -> dict[str, int]:
    """Recalcula do zero o mês `key` e sobrescreve o contador de cada profissional."""
    counts = count_realized(db, key)
    result: dict[str, int] = {}
    for pid in professional_ids:
        result[pid] = counts.get(pid, 0)
        set_absolute(db, pid, key, result[pid])
    log.info("mirror.resync", month=key, professionals=len(result))
    return result


def realized_counts(db: Session, professional_id: str) -> dict[str, int]:
    rows = db.execute(
        select(
            ProfessionalMonthlyRealized.month_key, ProfessionalMonthlyRealized.realized
        ).where(ProfessionalMonthlyRealized.professional_id == professional_id)
    ).all()
    return {k: int(n) for k, n in rows}


def realized_in_month(db: Session, professional_id: str, key: str) -> int:
    value = db.scalar(
        select(ProfessionalMonthlyRealized.realized).where(
            ProfessionalMonthlyRealized.professional_id == professional_id,
            ProfessionalMonthlyRealized.month_key == key,
        )
    )
    return int(value or 0)
