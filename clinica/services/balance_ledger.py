"""Saldos de crédito: pacote do cliente e antecipados do profissional.

Os dois saldos são inteiros >= 0. A baixa acontece apenas quando um
agendamento que usa o crédito é salvo como "realizado"; voltar o status ou
excluir o agendamento NÃO devolve o crédito.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import InstrumentedAttribute, Session

from clinica.core.errors import NoBalance, RemoteError
from clinica.core.logging import get_logger
from clinica.models.appointment import Appointment, AppointmentStatus
from clinica.models.client import Client
from clinica.models.professional import Professional

log = get_logger(__name__)


def _read_balance(
    db: Session, column: InstrumentedAttribute, entity_id: str, cached: int | None
) -> int:
    fallback = max(0, int(cached or 0))
    if not entity_id:
        return 0
    try:
        value = db.scalar(select(column).where(column.class_.id == entity_id))
    except SQLAlchemyError as exc:
        log.warning("ledger.balance.read_failed", entity_id=entity_id, error=str(exc))
        return fallback
    if value is None:
        return fallback
    return max(0, int(value))


def get_client_package_balance(
    db: Session, client_id: str, cached: int | None = None
) -> int:
    """Saldo de pacote; se a leitura falhar usa o valor em cache (ou 0)."""
    return _read_balance(db, Client.package_balance, client_id, cached)


def get_professional_advance_balance(
    db: Session, professional_id: str, cached: int | None = None
) -> int:
    return _read_balance(db, Professional.advance_balance, professional_id, cached)


def can_consume_package(db: Session, client_id: str) -> bool:
    return get_client_package_balance(db, client_id) > 0


def can_consume_advance(db: Session, professional_id: str) -> bool:
    return get_professional_advance_balance(db, professional_id) > 0


def _fresh_balance(db: Session, column: InstrumentedAttribute, entity_id: str) -> int:
    try:
        value = db.scalar(select(column).where(column.class_.id == entity_id))
    except SQLAlchemyError as exc:
        log.error("ledger.balance.check_failed", entity_id=entity_id, exc_info=True)
        raise RemoteError("Erro ao verificar saldo. Tente novamente.") from exc
    return max(0, int(value or 0))


def ensure_can_consume(
    db: Session,
    *,
    client_id: str,
    professional_id: str,
    uses_package: bool,
    uses_advance: bool,
) -> None:
    """
    Bloqueia a gravação quando o crédito marcado já está zerado.
    Lê o saldo direto do banco, não do cache da tela.
    """
    if uses_package:
        if not client_id:
            raise NoBalance("package", "Para usar 'Pacote', selecione um cliente.")
        if _fresh_balance(db, Client.package_balance, client_id) <= 0:
            raise NoBalance("package")
    if uses_advance:
        if _fresh_balance(db, Professional.advance_balance, professional_id) <= 0:
            raise NoBalance("advance")


def _decrement(db: Session, column: InstrumentedAttribute, entity_id: str) -> int | None:
    """Baixa 1 unidade com piso em 0. Retorna o novo saldo ou None se nada mudou."""
    model = column.class_
    result = db.execute(
        update(model)
        .where(model.id == entity_id, column > 0)
        .values({column.key: column - 1})
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        return None
    return int(db.scalar(select(column).where(model.id == entity_id)) or 0)


def apply_completion_side_effects(db: Session, appointment: Appointment) -> list[str]:
    """
    Baixa os créditos de um agendamento salvo como realizado.
    Roda dentro da transação do chamador. Devolve avisos para o usuário
    quando algum saldo chega a zero.
    """
    warnings: list[str] = []
    if appointment.status != AppointmentStatus.DONE:
        return warnings

    if appointment.uses_client_package and appointment.client_id:
        left = _decrement(db, Client.package_balance, appointment.client_id)
        log.info(
            "ledger.package.consumed",
            client_id=appointment.client_id,
            appointment_id=appointment.id,
            balance=left,
        )
        if left == 0:
            name = appointment.client_name or "Cliente"
            warnings.append(f'Aviso: o cliente "{name}" ficou sem saldo de pacote.')

    if appointment.uses_professional_advance:
        left = _decrement(db, Professional.advance_balance, appointment.professional_id)
        log.info(
            "ledger.advance.consumed",
            professional_id=appointment.professional_id,
            appointment_id=appointment.id,
            balance=left,
        )
        if left == 0:
            name = appointment.professional_name or "Profissional"
            warnings.append(
                f'Aviso: o profissional "{name}" ficou sem saldo de antecipados.'
            )

    return warnings
