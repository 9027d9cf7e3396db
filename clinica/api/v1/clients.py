from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clinica.audit.helpers import Actor
from clinica.db import get_db
from clinica.deps import get_actor, require_roles
from clinica.models.user import Role, User
from clinica.schemas.clients import BalanceOut, ClientDeletedOut, ClientIn, ClientOut
from clinica.services import balance_ledger, registry

router = APIRouter(prefix="/admin/clients", tags=["clients"])

AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]


def _data(payload: ClientIn) -> registry.ClientData:
    return registry.ClientData(**payload.model_dump())


@router.get("", response_model=list[ClientOut])
def list_clients(
    current_user: AdminUser,
    q: str | None = Query(None, description="Busca por nome/CPF/WhatsApp (contém)"),
    db: Session = Depends(get_db),
):
    return [ClientOut.model_validate(c) for c in registry.list_clients(db, q)]


@router.post("", response_model=ClientOut, status_code=201)
def create_client(
    payload: ClientIn,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    c = registry.create_client(db, _data(payload), actor)
    return ClientOut.model_validate(c)


@router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: str, current_user: AdminUser, db: Session = Depends(get_db)):
    return ClientOut.model_validate(registry.get_client(db, client_id))


@router.put("/{client_id}", response_model=ClientOut)
def update_client(
    client_id: str,
    payload: ClientIn,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    c = registry.update_client(db, client_id, _data(payload), actor)
    return ClientOut.model_validate(c)


@router.delete("/{client_id}", response_model=ClientDeletedOut)
def delete_client(
    client_id: str,
    current_user: AdminUser,
    actor: Annotated[Actor, Depends(get_actor)],
    db: Session = Depends(get_db),
):
    removed = registry.delete_client(db, client_id, actor)
    return ClientDeletedOut(id=client_id, appointments_removed=removed)


@router.get("/{client_id}/package-balance", response_model=BalanceOut)
def package_balance(
    client_id: str, current_user: AdminUser, db: Session = Depends(get_db)
):
    # cadastro inexistente ou falha de leitura: 0
    return BalanceOut(
        id=client_id, balance=balance_ledger.get_client_package_balance(db, client_id)
    )
