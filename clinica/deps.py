from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from clinica.audit.helpers import Actor, actor_from_request
from clinica.core.logging import set_user_id
from clinica.core.security import decode_token
from clinica.db import get_db
from clinica.models.professional import Professional
from clinica.models.user import Role, User


def _extract_token_from_request(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1]
    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:  # noqa: B008
    token = _extract_token_from_request(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado"
        )

    try:
        payload = decode_token(token, expected_type="access")
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado",
        ) from exc

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token malformado"
        )

    user: User | None = db.get(User, int(user_id))
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário inativo ou inexistente",
        )

    # o middleware de telemetria lê daqui para o log de request.end
    request.state.user_id = user.id
    set_user_id(str(user.id))
    return user


def require_roles(*allowed: Role) -> Callable[[Request, Session], User]:
    def wrapper(request: Request, db: Session = Depends(get_db)) -> User:  # noqa: B008
        user = get_current_user(request, db)
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Sem permissão"
            )
        return user

    return wrapper


def current_professional(
    user: User = Depends(require_roles(Role.PROFESSIONAL)),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> Professional:
    """Cadastro de profissional vinculado ao usuário logado."""
    prof = db.scalar(select(Professional).where(Professional.user_id == user.id))
    if prof is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Usuário sem cadastro de profissional vinculado",
        )
    return prof


def get_actor(
    request: Request,
    user: User = Depends(get_current_user),  # noqa: B008
) -> Actor:
    return actor_from_request(request, user.id)
