from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinica.core.errors import ConflictReason, SlotConflict
from clinica.models.appointment import Appointment, AppointmentStatus
from clinica.models.client import Client
from clinica.models.professional import Professional


class SlotRow(Protocol):
    id: str
    date: date
    time: str
    room: int
    professional_id: str
    client_id: str | None
    status: AppointmentStatus


@dataclass(frozen=True)
class SlotCandidate:
    date: date
    time: str
    room: int
    professional_id: str
    client_id: str = ""  # "" = sala sem cliente (sublocação)


def _same_slot(a: SlotRow, c: SlotCandidate) -> bool:
    return a.date == c.date and a.time[:5] == c.time[:5]


def active_appointments(
    appointments: Iterable[SlotRow],
    professional_ids: Iterable[str],
    client_ids: Iterable[str],
) -> list[SlotRow]:
    """Somente agendamentos cujos vínculos ainda existem ("" sempre vale)."""
    profs = set(professional_ids)
    clients = {"", *client_ids}
    return [
        a
        for a in appointments
        if a.professional_id in profs and (a.client_id or "") in clients
    ]


def validate_slot(
    candidate: SlotCandidate,
    existing: Iterable[SlotRow],
    ignore_id: str | None = None,
) -> tuple[bool, ConflictReason | None]:
    """
    Confere sala, profissional e cliente (nessa ordem) no mesmo dia/horário.
    `existing` já deve estar filtrado por `active_appointments`.
    Retorna (True, None) ou (False, motivo do primeiro conflito).
    """
    same_slot = [
        a for a in existing if _same_slot(a, candidate) and (not ignore_id or a.id != ignore_id)
    ]
    if any(a.room == candidate.room for a in same_slot):
        return False, "room"
    if candidate.professional_id and any(
        a.professional_id == candidate.professional_id for a in same_slot
    ):
        return False, "professional"
    if candidate.client_id and any(
        (a.client_id or "") == candidate.client_id for a in same_slot
    ):
        return False, "client"
    return True, None


def _slot_rows(db: Session, d: date, hhmm: str) -> list[Appointment]:
    return list(
        db.scalars(
            select(Appointment).where(Appointment.date == d, Appointment.time == hhmm)
        )
    )


def _active_among(db: Session, rows: list[Appointment]) -> list[Appointment]:
    if not rows:
        return rows
    prof_ids = db.scalars(
        select(Professional.id).where(
            Professional.id.in_(sorted({r.professional_id for r in rows}))
        )
    ).all()
    client_ids = db.scalars(
        select(Client.id).where(
            Client.id.in_(sorted({r.client_id for r in rows if r.client_id}))
        )
    ).all()
    return active_appointments(rows, prof_ids, client_ids)


def load_slot_occupants(db: Session, d: date, hhmm: str) -> list[Appointment]:
    """Lê do banco (não do cache local) os agendamentos ativos do dia/horário."""
    return _active_among(db, _slot_rows(db, d, hhmm))


def orphan_slot_occupants(
    db: Session, candidate: SlotCandidate, ignore_id: str | None = None
) -> list[Appointment]:
    """
    Agendamentos do slot com profissional ou cliente já excluído que ainda
    ocupariam as constraints únicas do candidato (sala, profissional ou cliente).
    """
    rows = _slot_rows(db, candidate.date, candidate.time[:5])
    active = {a.id for a in _active_among(db, rows)}
    return [
        a
        for a in rows
        if a.id not in active
        and a.id != ignore_id
        and (
            a.room == candidate.room
            or a.professional_id == candidate.professional_id
            or (candidate.client_id and a.client_id == candidate.client_id)
        )
    ]


def ensure_slot_free(
    db: Session, candidate: SlotCandidate, ignore_id: str | None = None
) -> None:
    ok, reason = validate_slot(
        candidate, load_slot_occupants(db, candidate.date, candidate.time), ignore_id
    )
    if not ok:
        raise SlotConflict(reason)
