from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinica.db import get_db
from clinica.schemas.public import PublicProfessionalOut, PublicStatsOut
from clinica.services.public_stats import month_cards
from clinica.utils.tz import clinic_tz
from clinica.utils.week import current_month_key

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/stats", response_model=PublicStatsOut)
def stats(db: Session = Depends(get_db)):
    """Página inicial: lê só o espelho público, sem dados de clientes."""
    key = current_month_key(clinic_tz())
    cards, total = month_cards(db, key)
    return PublicStatsOut(
        month=key,
        professionals=[
            PublicProfessionalOut(
                id=c.professional_id,
                name=c.name,
                specialty=c.specialty,
                photo_url=c.photo_url,
                realized_this_month=c.realized,
            )
            for c in cards
        ],
        total_realized=total,
    )
