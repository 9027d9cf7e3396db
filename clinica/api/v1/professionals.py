from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clinica.audit.helpers import Actor
from clinica.db import get_db
from clinica.deps import get_actor, require_roles
from clinica.models.user import Role, User
from clinica.schemas.clients import BalanceOut, ClientOut
from clinica.schemas.professionals import (
    AssociatedClientsIn,
    ProfessionalDeletedOut,
    ProfessionalIn,
    ProfessionalOut,
)
from clinica.services import balance_ledger, registry

router = APIRouter(prefix="/admin/professionals", tags=["professionals"])

AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]


def _data(payload: ProfessionalIn) -> registry.ProfessionalData:
    data = payload.model_dump()
    data["is_active"] = bool(data["is_active"]) if data["is_active"] is not None else True
    return registry.ProfessionalData(**data)


@router.get("", response_model=list[ProfessionalOut])
def list_professionals(
    current_user: AdminUser,
    include_inactive: bool = Query(True),
    db: Session = Depends(get_db),
):
    rows = registry.list_professionals(db, include_inactive=include_inactive)
    return [ProfessionalOut.model_validate(p) for p in rows]


@router.post("", response_model=ProfessionalOut, status_code=201)
def create_professional(
    payload: ProfessionalIn,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    p = registry.create_professional(db, _data(payload), actor)
    return ProfessionalOut.model_validate(p)


@router.get("/{professional_id}", response_model=ProfessionalOut)
def get_professional(
    professional_id: str, current_user: AdminUser, db: Session = Depends(get_db)
):
    return ProfessionalOut.model_validate(registry.get_professional(db, professional_id))


@router.put("/{professional_id}", response_model=ProfessionalOut)
def update_professional(
    professional_id: str,
    payload: ProfessionalIn,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    p = registry.update_professional(db, professional_id, _data(payload), actor)
    return ProfessionalOut.model_validate(p)


@router.delete("/{professional_id}", response_model=ProfessionalDeletedOut)
def delete_professional(
    professional_id: str,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    removed = registry.delete_professional(db, professional_id, actor)
    return ProfessionalDeletedOut(id=professional_id, appointments_removed=removed)


@router.get("/{professional_id}/clients", response_model=list[ClientOut])
def associated_clients(
    professional_id: str, current_user: AdminUser, db: Session = Depends(get_db)
):
    p = registry.get_professional(db, professional_id)
    return [ClientOut.model_validate(c) for c in p.associated_clients]


@router.put("/{professional_id}/clients", response_model=list[ClientOut])
def set_associated_clients(
    professional_id: str,
    payload: AssociatedClientsIn,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    p = registry.set_associated_clients(db, professional_id, payload.client_ids, actor)
    return [ClientOut.model_validate(c) for c in p.associated_clients]


@router.get("/{professional_id}/advance-balance", response_model=BalanceOut)
def advance_balance(
    professional_id: str, current_user: AdminUser, db: Session = Depends(get_db)
):
    return BalanceOut(
        id=professional_id,
        balance=balance_ledger.get_professional_advance_balance(db, professional_id),
    )
