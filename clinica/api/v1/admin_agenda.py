from datetime import date
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from clinica.api.v1.grid_view import admin_painter, render_grid
from clinica.audit.helpers import Actor
from clinica.core.settings import settings
from clinica.db import get_db
from clinica.deps import get_actor, require_roles
from clinica.models.user import Role, User
from clinica.schemas.agenda import (
    AgendaSnapshotOut,
    AppointmentOut,
    CellIn,
    GridOut,
    SaveCellOut,
    to_out,
)
from clinica.schemas.clients import ClientOut
from clinica.schemas.professionals import ProfessionalOut
from clinica.services import agenda
from clinica.services.grid import project_window
from clinica.utils.week import window_days

router = APIRouter(prefix="/admin/agenda", tags=["admin-agenda"])

AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]


@router.get("", response_model=AgendaSnapshotOut)
def bootstrap(current_user: AdminUser, db: Session = Depends(get_db)):
    """Carga inicial: clientes, profissionais e agendamentos mais recentes."""
    snap = agenda.load_snapshot(db, limit=settings.AGENDA_LOAD_LIMIT)
    return AgendaSnapshotOut(
        clients=[ClientOut.model_validate(c) for c in snap.clients],
        professionals=[ProfessionalOut.model_validate(p) for p in snap.professionals],
        appointments=[to_out(a) for a in snap.appointments],
    )


@router.get("/appointments", response_model=list[AppointmentOut])
def list_appointments(
    current_user: AdminUser,
    professional_id: str | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    db: Session = Depends(get_db),
):
    rows = agenda.list_appointments(
        db, professional_id=professional_id, date_from=date_from, date_to=date_to
    )
    return [to_out(a) for a in rows]


@router.get("/grid", response_model=GridOut)
def grid(
    current_user: AdminUser,
    anchor: date = Query(..., description="Qualquer dia da semana desejada"),
    mode: Literal["week", "day"] = Query("week"),
    professional_id: str | None = Query(None, description="Filtro de profissional"),
    db: Session = Depends(get_db),
):
    days = window_days(anchor, mode)
    rows = agenda.list_appointments(db, date_from=days[0], date_to=days[-1])
    g = project_window(rows, anchor, mode, professional_id=professional_id or None)
    return render_grid(g, anchor, mode, admin_painter(professional_id or None))


@router.post("/cells", response_model=SaveCellOut)
def save_cell(
    payload: CellIn,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    result = agenda.save_cell(db, agenda.CellInput(**payload.model_dump()), actor)
    return SaveCellOut(
        saved=result.saved,
        created=result.created,
        appointment=to_out(result.appointment) if result.appointment else None,
        warnings=result.warnings,
    )


@router.delete("/cells/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cell(
    appointment_id: str,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    agenda.delete_cell(db, appointment_id, actor)
    return
