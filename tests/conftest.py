import os
import sys

# Add the project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# settings exige DATABASE_URL na importação
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import clinica.db.base  # noqa: F401
from clinica.audit.helpers import Actor
from clinica.core.security import create_access_token
from clinica.db.base_class import Base
from clinica.models.appointment import Appointment, AppointmentStatus, PaymentMethod
from clinica.models.client import Client
from clinica.models.professional import Professional, ProfessionalPublic
from clinica.models.user import Role, User

# segunda-feira fixa para os cenários da agenda
MONDAY = date(2030, 3, 4)


@pytest.fixture
def engine():
    """Banco SQLite em memória, recriado a cada teste."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def TestingSessionLocal(engine):
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )


@pytest.fixture
def override_get_db(TestingSessionLocal):
    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    return _override_get_db


@pytest.fixture
def db_session(TestingSessionLocal):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(override_get_db):
    """TestClient com a dependência de banco apontando para o SQLite do teste."""
    from fastapi.testclient import TestClient

    from clinica.db import get_db
    from clinica.main import app

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def actor():
    return Actor(user_id=None, ip="127.0.0.1")


def _user(db, email: str, role: Role, name: str) -> User:
    user = User(name=name, email=email, role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _user(db_session, "admin@example.com", Role.ADMIN, "Admin")


@pytest.fixture
def pro_user(db_session):
    return _user(db_session, "ana@example.com", Role.PROFESSIONAL, "Ana")


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_access_token(str(admin_user.id))}"}


@pytest.fixture
def pro_headers(pro_user):
    return {"Authorization": f"Bearer {create_access_token(str(pro_user.id))}"}


def make_professional(db, name: str, advance_balance: int = 0, **kw) -> Professional:
    p = Professional(name=name, advance_balance=advance_balance, **kw)
    db.add(p)
    db.flush()
    db.add(
        ProfessionalPublic(
            professional_id=p.id,
            name=p.name,
            specialty=p.specialty,
            photo_url=p.photo_url,
            active=p.is_active if p.is_active is not None else True,
        )
    )
    db.commit()
    db.refresh(p)
    return p


def make_client(db, name: str, package_balance: int = 0, **kw) -> Client:
    c = Client(name=name, package_balance=package_balance, **kw)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def make_appointment(db, *, professional, d, hhmm="08:00", room=1, client=None, **kw):
    ap = Appointment(
        date=d,
        time=hhmm,
        room=room,
        professional_id=professional.id,
        professional_name=professional.name,
        client_id=client.id if client else None,
        client_name=client.name if client else "",
        payment_method=kw.pop("payment_method", PaymentMethod.CASH),
        status=kw.pop("status", AppointmentStatus.SCHEDULED),
        **kw,
    )
    db.add(ap)
    db.commit()
    db.refresh(ap)
    return ap


@pytest.fixture
def prof_a(db_session, pro_user):
    """Profissional vinculado ao usuário PROFESSIONAL."""
    return make_professional(
        db_session, "Ana Souza", advance_balance=1, specialty="Psicologia", user_id=pro_user.id
    )


@pytest.fixture
def prof_b(db_session):
    return make_professional(db_session, "Bruno Lima", specialty="Fonoaudiologia")


@pytest.fixture
def client_x(db_session):
    return make_client(
        db_session, "Xavier Costa", package_balance=1, cpf="11122233344", whats="11987654321"
    )


@pytest.fixture
def client_y(db_session):
    return make_client(
        db_session, "Yara Melo", package_balance=0, cpf="55566677788", whats="2134567890"
    )
