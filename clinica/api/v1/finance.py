from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from clinica.audit.helpers import Actor
from clinica.db import get_db
from clinica.deps import get_actor, require_roles
from clinica.models.user import Role, User
from clinica.schemas.agenda import AppointmentOut, to_out
from clinica.schemas.finance import (
    FinancePostIn,
    FinanceSummaryOut,
    ProfessionalTotalsOut,
)
from clinica.services import finance
from clinica.utils.tz import clinic_tz
from clinica.utils.week import current_month_key, parse_month_key

router = APIRouter(prefix="/admin/finance", tags=["finance"])

AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]


def resolve_month(month: str | None) -> str:
    """Mês pedido (YYYY-MM) ou o mês corrente da clínica."""
    if not month:
        return current_month_key(clinic_tz())
    try:
        parse_month_key(month)
    except ValueError as exc:
        raise HTTPException(422, str(exc)) from exc
    return month


@router.get("", response_model=FinanceSummaryOut)
def summary(
    current_user: AdminUser,
    month: str | None = Query(None, description="YYYY-MM; padrão: mês corrente"),
    professional_id: str | None = Query(None),
    db: Session = Depends(get_db),
):
    s = finance.month_summary(db, resolve_month(month), professional_id)
    return FinanceSummaryOut(
        month=s.month,
        total_received=s.total_received,
        total_transfer=s.total_transfer,
        clinic_result=s.clinic_result,
        by_payment=s.by_payment,
        by_professional=[
            ProfessionalTotalsOut(
                professional_id=pid,
                name=t.name,
                total=t.total,
                transfer=t.transfer,
                clinic=t.clinic,
            )
            for pid, t in sorted(
                s.by_professional.items(), key=lambda kv: kv[1].name.lower()
            )
        ],
        appointments=[to_out(a) for a in s.rows],
    )


@router.put("/appointments/{appointment_id}", response_model=AppointmentOut)
def post_values(
    appointment_id: str,
    payload: FinancePostIn,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    ap = finance.post_finance(
        db, appointment_id, payload.received_value, payload.transfer_value, actor
    )
    return to_out(ap)
