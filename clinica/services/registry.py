"""Cadastros de clientes e profissionais.

Exclusões limpam os agendamentos na mesma transação para manter o contador
público de realizados coerente.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, replace
from datetime import date

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinica.audit.helpers import Actor, record_audit
from clinica.core.errors import DuplicateRecord, InvalidInput, NotFound, RemoteError
from clinica.core.logging import get_logger
from clinica.models.appointment import Appointment
from clinica.models.client import Client
from clinica.models.professional import (
    Professional,
    ProfessionalMonthlyRealized,
    ProfessionalPublic,
)
from clinica.services import realized_mirror

log = get_logger(__name__)

_NON_DIGITS = re.compile(r"\D+")
_SPACES = re.compile(r"\s+")


# ---------- normalização ----------


def only_digits(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def normalize_name(value: str | None) -> str:
    """Minúsculas, sem acentos e com espaços colapsados (para achar duplicados)."""
    text = unicodedata.normalize("NFD", value or "")
    text = "".join(c for c in text if not unicodedata.combining(c))
    return _SPACES.sub(" ", text).strip().lower()


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


@dataclass
class ClientData:
    name: str
    cpf: str | None = None
    whats: str | None = None
    email: str | None = None
    birth_date: date | None = None
    phones: str | None = None
    address: str | None = None
    city: str | None = None
    notes: str | None = None
    package_balance: int = 0
    professional_id: str | None = None


@dataclass
class ProfessionalData:
    name: str
    email: str | None = None
    specialty: str | None = None
    phone: str | None = None
    photo_url: str | None = None
    is_active: bool = True
    advance_balance: int = 0
    user_id: int | None = None


def sanitize_client(data: ClientData) -> ClientData:
    name = _SPACES.sub(" ", (data.name or "").strip())
    if not name:
        raise InvalidInput("Informe o nome do cliente.")

    cpf = only_digits(data.cpf)
    if len(cpf) != 11:
        raise InvalidInput("CPF deve ter 11 dígitos.")

    whats = only_digits(data.whats)
    if len(whats) not in (10, 11):
        raise InvalidInput("WhatsApp deve ter 10 ou 11 dígitos (com DDD).")

    email = (data.email or "").strip().lower() or None
    if email and "@" not in email:
        raise InvalidInput("E-mail inválido.")

    return replace(
        data,
        name=name,
        cpf=cpf,
        whats=whats,
        email=email,
        phones=_clean(data.phones),
        address=_clean(data.address),
        city=_clean(data.city),
        notes=_clean(data.notes),
        package_balance=max(0, int(data.package_balance or 0)),
        professional_id=data.professional_id or None,
    )


def find_duplicate_client(
    db: Session, data: ClientData, exclude_id: str | None = None
) -> tuple[str, Client] | None:
    """Primeiro cadastro que colide por cpf, email, whats ou nome+nascimento."""
    checks = [("cpf", Client.cpf, data.cpf), ("email", Client.email, data.email)]
    checks.append(("whats", Client.whats, data.whats))
    for label, column, value in checks:
        if not value:
            continue
        stmt = select(Client).where(column == value)
        if exclude_id:
            stmt = stmt.where(Client.id != exclude_id)
        found = db.scalars(stmt.limit(1)).first()
        if found:
            return label, found

    if data.birth_date:
        stmt = select(Client).where(Client.birth_date == data.birth_date)
        if exclude_id:
            stmt = stmt.where(Client.id != exclude_id)
        wanted = normalize_name(data.name)
        for c in db.scalars(stmt):
            if normalize_name(c.name) == wanted:
                return "nome e data de nascimento", c
    return None


def _commit(db: Session, event: str, **ctx) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log.error(f"{event}.failed", exc_info=True, **ctx)
        raise RemoteError() from exc


# ---------- clientes ----------


def list_clients(db: Session, q: str | None = None) -> list[Client]:
    stmt = select(Client).order_by(Client.name)
    if q:
        like = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(Client.name.ilike(like), Client.cpf.ilike(like), Client.whats.ilike(like))
        )
    return list(db.scalars(stmt))


def get_client(db: Session, client_id: str) -> Client:
    c = db.get(Client, client_id)
    if c is None:
        raise NotFound("Cliente")
    return c


def _link_to_professional(
    db: Session, client: Client, old_professional_id: str | None
) -> None:
    """Mantém a lista de clientes associados do profissional em dia."""
    if old_professional_id and old_professional_id != client.professional_id:
        old = db.get(Professional, old_professional_id)
        if old is not None and client in old.associated_clients:
            old.associated_clients.remove(client)
    if client.professional_id:
        prof = db.get(Professional, client.professional_id)
        if prof is None:
            raise NotFound("Profissional")
        if client not in prof.associated_clients:
            prof.associated_clients.append(client)


def create_client(db: Session, data: ClientData, actor: Actor) -> Client:
    data = sanitize_client(data)
    dup = find_duplicate_client(db, data)
    if dup:
        label, existing = dup
        raise DuplicateRecord(label, existing.id)

    c = Client(**vars(data))
    db.add(c)
    db.flush()
    _link_to_professional(db, c, None)
    record_audit(db, actor=actor, action="CREATE", entity="client", entity_id=c.id)
    _commit(db, "registry.client.create")
    db.refresh(c)
    log.info("registry.client.created", client_id=c.id)
    return c


def update_client(db: Session, client_id: str, data: ClientData, actor: Actor) -> Client:
    c = get_client(db, client_id)
    data = sanitize_client(data)
    dup = find_duplicate_client(db, data, exclude_id=client_id)
    if dup:
        label, existing = dup
        raise DuplicateRecord(label, existing.id)

    old_professional_id = c.professional_id
    for key, value in vars(data).items():
        setattr(c, key, value)
    _link_to_professional(db, c, old_professional_id)

    # nome denormalizado nos agendamentos
    db.execute(
        update(Appointment)
        .where(Appointment.client_id == c.id)
        .values(client_name=c.name)
        .execution_options(synchronize_session=False)
    )
    record_audit(db, actor=actor, action="UPDATE", entity="client", entity_id=c.id)
    _commit(db, "registry.client.update", client_id=c.id)
    db.refresh(c)
    log.info("registry.client.updated", client_id=c.id)
    return c


def delete_client(db: Session, client_id: str, actor: Actor) -> int:
    """Exclui o cliente e os agendamentos dele. Retorna quantos agendamentos saíram."""
    c = get_client(db, client_id)
    appointments = list(db.scalars(select(Appointment).where(Appointment.client_id == c.id)))
    for ap in appointments:
        realized_mirror.on_delete(db, ap)
        db.delete(ap)

    for prof in db.scalars(
        select(Professional).where(Professional.associated_clients.any(Client.id == c.id))
    ):
        prof.associated_clients.remove(c)

    db.delete(c)
    record_audit(db, actor=actor, action="DELETE", entity="client", entity_id=client_id)
    _commit(db, "registry.client.delete", client_id=client_id)
    log.info(
        "registry.client.deleted", client_id=client_id, appointments=len(appointments)
    )
    return len(appointments)


# ---------- profissionais ----------


def list_professionals(db: Session, include_inactive: bool = True) -> list[Professional]:
    stmt = select(Professional).order_by(Professional.name)
    if not include_inactive:
        stmt = stmt.where(Professional.is_active.is_(True))
    return list(db.scalars(stmt))


def get_professional(db: Session, professional_id: str) -> Professional:
    p = db.get(Professional, professional_id)
    if p is None:
        raise NotFound("Profissional")
    return p


def upsert_public(db: Session, prof: Professional) -> ProfessionalPublic:
    """Espelho público (nome, especialidade, foto, ativo); os contadores ficam."""
    pub = db.get(ProfessionalPublic, prof.id)
    if pub is None:
        pub = ProfessionalPublic(professional_id=prof.id, name=prof.name)
        db.add(pub)
    pub.name = prof.name
    pub.specialty = prof.specialty
    pub.photo_url = prof.photo_url
    pub.active = prof.is_active
    return pub


def _sanitize_professional(data: ProfessionalData) -> ProfessionalData:
    name = _SPACES.sub(" ", (data.name or "").strip())
    if not name:
        raise InvalidInput("Informe o nome do profissional.")
    return replace(
        data,
        name=name,
        email=(data.email or "").strip().lower() or None,
        specialty=_clean(data.specialty),
        phone=_clean(data.phone),
        photo_url=_clean(data.photo_url),
        advance_balance=max(0, int(data.advance_balance or 0)),
    )


def _check_user_link(db: Session, user_id: int | None, professional_id: str | None) -> None:
    if user_id is None:
        return
    stmt = select(Professional.id).where(Professional.user_id == user_id)
    if professional_id:
        stmt = stmt.where(Professional.id != professional_id)
    other = db.scalar(stmt)
    if other:
        raise DuplicateRecord(
            "usuário", other, "Este usuário já está vinculado a outro profissional."
        )


def create_professional(db: Session, data: ProfessionalData, actor: Actor) -> Professional:
    data = _sanitize_professional(data)
    _check_user_link(db, data.user_id, None)
    p = Professional(**vars(data))
    db.add(p)
    db.flush()
    upsert_public(db, p)
    record_audit(db, actor=actor, action="CREATE", entity="professional", entity_id=p.id)
    _commit(db, "registry.professional.create")
    db.refresh(p)
    log.info("registry.professional.created", professional_id=p.id)
    return p


def update_professional(
    db: Session, professional_id: str, data: ProfessionalData, actor: Actor
) -> Professional:
    p = get_professional(db, professional_id)
    data = _sanitize_professional(data)
    _check_user_link(db, data.user_id, p.id)
    for key, value in vars(data).items():
        setattr(p, key, value)
    db.execute(
        update(Appointment)
        .where(Appointment.professional_id == p.id)
        .values(professional_name=p.name)
        .execution_options(synchronize_session=False)
    )
    upsert_public(db, p)
    record_audit(db, actor=actor, action="UPDATE", entity="professional", entity_id=p.id)
    _commit(db, "registry.professional.update", professional_id=p.id)
    db.refresh(p)
    log.info("registry.professional.updated", professional_id=p.id)
    return p


def set_associated_clients(
    db: Session, professional_id: str, client_ids: list[str], actor: Actor
) -> Professional:
    p = get_professional(db, professional_id)
    clients = []
    for cid in dict.fromkeys(client_ids):
        clients.append(get_client(db, cid))
    p.associated_clients = clients
    record_audit(
        db, actor=actor, action="UPDATE_CLIENTS", entity="professional", entity_id=p.id
    )
    _commit(db, "registry.professional.clients", professional_id=p.id)
    db.refresh(p)
    return p


def delete_professional(db: Session, professional_id: str, actor: Actor) -> int:
    """Exclui o profissional, os agendamentos, o espelho público e os contadores."""
    p = get_professional(db, professional_id)
    removed = db.execute(
        delete(Appointment)
        .where(Appointment.professional_id == p.id)
        .execution_options(synchronize_session="fetch")
    ).rowcount
    db.execute(
        delete(ProfessionalMonthlyRealized).where(
            ProfessionalMonthlyRealized.professional_id == p.id
        )
    )
    db.execute(delete(ProfessionalPublic).where(ProfessionalPublic.professional_id == p.id))
    db.execute(
        update(Client)
        .where(Client.professional_id == p.id)
        .values(professional_id=None)
        .execution_options(synchronize_session="fetch")
    )
    p.associated_clients = []
    db.delete(p)
    record_audit(
        db, actor=actor, action="DELETE", entity="professional", entity_id=professional_id
    )
    _commit(db, "registry.professional.delete", professional_id=professional_id)
    log.info(
        "registry.professional.deleted",
        professional_id=professional_id,
        appointments=removed,
    )
    return int(removed or 0)
