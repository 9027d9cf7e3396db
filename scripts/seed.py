# scripts/seed.py
"""
Popula um banco de desenvolvimento: usuário admin, profissionais (um deles com
usuário PROFESSIONAL), clientes e uma semana de agendamentos.

Os agendamentos passam pelo mesmo serviço da API (saldo, conflitos, contador
público), então o resultado é igual ao de cadastros feitos pela tela.

Uso:  DATABASE_URL=sqlite:///./dev.db python -m scripts.seed
"""

from __future__ import annotations

import os
from datetime import timedelta

from sqlalchemy import select

import clinica.db.base  # noqa: F401
from clinica.audit.helpers import Actor
from clinica.core.errors import AgendaError
from clinica.core.logging import configure_logging, get_logger
from clinica.core.security import create_access_token
from clinica.db import SessionLocal, engine
from clinica.db.base_class import Base
from clinica.models.appointment import AppointmentStatus, PaymentMethod
from clinica.models.user import Role, User
from clinica.services import agenda, registry
from clinica.utils.tz import clinic_tz
from clinica.utils.week import monday_of_week, today_local

log = get_logger("seed")

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
PRO_EMAIL = os.getenv("SEED_PRO_EMAIL", "ana@example.com")

PROFESSIONALS_DATA = [
    {"name": "Dra. Ana Souza", "specialty": "Psicologia", "advance_balance": 4},
    {"name": "Dr. Bruno Lima", "specialty": "Fonoaudiologia", "advance_balance": 0},
    {"name": "Dra. Carla Dias", "specialty": "Terapia Ocupacional", "advance_balance": 2},
]

CLIENTS_DATA = [
    {"name": "Alice Lima", "cpf": "11122233344", "whats": "11987654321", "package_balance": 3},
    {"name": "Bruno Alves", "cpf": "22233344455", "whats": "11987654322", "package_balance": 0},
    {"name": "Clara Dias", "cpf": "33344455566", "whats": "1134567890", "package_balance": 1},
    {"name": "Diego Nogueira", "cpf": "44455566677", "whats": "21998765432", "package_balance": 5},
]


def get_or_create_user(db, *, email: str, name: str, role: Role) -> User:
    user = db.scalar(select(User).where(User.email == email))
    if user:
        return user
    user = User(email=email, name=name, role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def main() -> None:
    configure_logging(json=False, level="INFO")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        admin = get_or_create_user(db, email=ADMIN_EMAIL, name="Administração", role=Role.ADMIN)
        pro_user = get_or_create_user(
            db, email=PRO_EMAIL, name="Dra. Ana Souza", role=Role.PROFESSIONAL
        )
        actor = Actor(user_id=admin.id, ip="127.0.0.1")

        if registry.list_professionals(db):
            log.info("seed.skip", reason="banco já populado")
        else:
            profs = []
            for i, data in enumerate(PROFESSIONALS_DATA):
                user_id = pro_user.id if i == 0 else None
                profs.append(
                    registry.create_professional(
                        db, registry.ProfessionalData(**data, user_id=user_id), actor
                    )
                )
            clients = [
                registry.create_client(
                    db,
                    registry.ClientData(**data, professional_id=profs[i % len(profs)].id),
                    actor,
                )
                for i, data in enumerate(CLIENTS_DATA)
            ]

            monday = monday_of_week(today_local(clinic_tz()))
            plan = [
                (0, "08:00", 1, 0, 0, AppointmentStatus.DONE),
                (0, "09:00", 2, 1, 1, AppointmentStatus.SCHEDULED),
                (1, "14:00", 1, 2, 2, AppointmentStatus.CHANGED),
                (2, "10:00", 3, 0, 3, AppointmentStatus.SCHEDULED),
                (3, "16:00", 4, 1, None, AppointmentStatus.SCHEDULED),  # sublocação
                (4, "18:00", 2, 2, 0, AppointmentStatus.CANCELLED),
            ]
            for day, hhmm, room, p_idx, c_idx, status in plan:
                try:
                    agenda.save_cell(
                        db,
                        agenda.CellInput(
                            date=monday + timedelta(days=day),
                            time=hhmm,
                            room=room,
                            professional_id=profs[p_idx].id,
                            client_id=clients[c_idx].id if c_idx is not None else "",
                            payment_method=PaymentMethod.PIX,
                            status=status,
                        ),
                        actor,
                    )
                except AgendaError as exc:
                    log.warning("seed.cell.skipped", reason=exc.message)

        print("ADMIN token:", create_access_token(str(admin.id)))
        print("PROFESSIONAL token:", create_access_token(str(pro_user.id)))
    finally:
        db.close()


if __name__ == "__main__":
    main()
