"""Painel do profissional logado (somente leitura)."""

from datetime import date
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clinica.api.v1.finance import resolve_month
from clinica.api.v1.grid_view import professional_painter, render_grid
from clinica.db import get_db
from clinica.deps import current_professional
from clinica.models.professional import Professional
from clinica.schemas.agenda import GridOut, MonthCountersOut, to_out
from clinica.schemas.clients import ClientOut
from clinica.schemas.finance import ClientGroupOut, MyFinanceOut
from clinica.services import agenda, finance, panel
from clinica.services.grid import project_window
from clinica.utils.week import month_bounds, month_key, window_days

router = APIRouter(prefix="/me", tags=["professional-panel"])

Me = Annotated[Professional, Depends(current_professional)]


@router.get("/agenda/grid", response_model=GridOut)
def my_grid(
    me: Me,
    anchor: date = Query(...),
    mode: Literal["week", "day"] = Query("week"),
    client_id: str | None = Query(None, description="Filtra os meus pelo cliente"),
    db: Session = Depends(get_db),
):
    # a grade mostra toda a ocupação das salas; os de outros aparecem como "ocupado"
    days = window_days(anchor, mode)
    rows = agenda.list_appointments(db, date_from=days[0], date_to=days[-1])
    g = project_window(rows, anchor, mode, professional_id=me.id)
    return render_grid(g, anchor, mode, professional_painter(me.id, client_id or None))


@router.get("/agenda/counters", response_model=MonthCountersOut)
def my_counters(
    me: Me,
    anchor: date = Query(..., description="Dia de referência do mês"),
    db: Session = Depends(get_db),
):
    first, last = month_bounds(month_key(anchor))
    rows = agenda.list_appointments(
        db, professional_id=me.id, date_from=first, date_to=last
    )
    c = panel.month_counters(rows, me.id, anchor)
    return MonthCountersOut(
        month=c.month, realized=c.realized, scheduled_ahead=c.scheduled_ahead
    )


@router.get("/clients", response_model=list[ClientOut])
def my_clients(me: Me, db: Session = Depends(get_db)):
    return [ClientOut.model_validate(c) for c in panel.my_clients(db, me)]


@router.get("/finance", response_model=MyFinanceOut)
def my_finance(
    me: Me,
    month: str | None = Query(None, description="YYYY-MM; padrão: mês corrente"),
    db: Session = Depends(get_db),
):
    key = resolve_month(month)
    s = finance.month_summary(db, key, professional_id=me.id)
    return MyFinanceOut(
        month=key,
        total_received=s.total_received,
        total_transfer=s.total_transfer,
        clinic_result=s.clinic_result,
        clients=[
            ClientGroupOut(
                client_id=g.client_id,
                name=g.name,
                received=g.received,
                transfer=g.transfer,
                clinic=g.clinic,
                pending=g.pending,
                appointments=[to_out(a) for a in g.rows],
            )
            for g in finance.group_by_client(s.rows)
        ],
    )
