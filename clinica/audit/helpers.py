from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from fastapi import Request
from sqlalchemy.orm import Session

from clinica.models.audit_log import AuditLog


@dataclass(frozen=True)
class Actor:
    """Quem fez a alteração (vai para o audit log)."""

    user_id: int | None = None
    ip: str | None = None


def get_client_ip(request: Request) -> str | None:
    # Respeita proxy (Railway/Render) → 1º IP do X-Forwarded-For
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    xri = request.headers.get("x-real-ip")
    if xri:
        return xri.strip()
    return request.client.host if request.client else None


def actor_from_request(request: Request, user_id: int | None) -> Actor:
    return Actor(user_id=user_id, ip=get_client_ip(request))


def record_audit(
    db: Session,
    *,
    actor: Actor,
    action: str,
    entity: str,
    entity_id: str | None,
) -> None:
    """Inclui o log na MESMA transação do CRUD (commit fica com o chamador)."""
    log = AuditLog(
        user_id=actor.user_id,
        action=action,
        entity=entity,
        entity_id=entity_id,
        timestamp_utc=datetime.now(UTC),
        ip=actor.ip,
    )
    db.add(log)
