from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinica.core.logging import get_logger
from clinica.models.professional import ProfessionalMonthlyRealized, ProfessionalPublic

log = get_logger(__name__)


@dataclass(frozen=True)
class PublicCard:
    professional_id: str
    name: str
    specialty: str | None
    photo_url: str | None
    realized: int


def month_cards(db: Session, key: str) -> tuple[list[PublicCard], int]:
    """
    Profissionais ativos do espelho público com os realizados do mês `key`.
    Lê só as tabelas públicas; se a leitura falhar devolve lista vazia.
    """
    try:
        rows = db.execute(
            select(ProfessionalPublic, ProfessionalMonthlyRealized.realized)
            .outerjoin(
                ProfessionalMonthlyRealized,
                (ProfessionalMonthlyRealized.professional_id
                 == ProfessionalPublic.professional_id)
                & (ProfessionalMonthlyRealized.month_key == key),
            )
            .where(ProfessionalPublic.active.is_(True))
            .order_by(ProfessionalPublic.name)
        ).all()
    except SQLAlchemyError:
        log.warning("public.stats.read_failed", month=key, exc_info=True)
        return [], 0

    cards = [
        PublicCard(
            professional_id=pub.professional_id,
            name=pub.name,
            specialty=pub.specialty,
            photo_url=pub.photo_url,
            realized=max(0, int(realized or 0)),
        )
        for pub, realized in rows
    ]
    return cards, sum(c.realized for c in cards)
