from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinica.db.base_class import Base
from clinica.models.client import new_id

professional_clients = Table(
    "professional_clients",
    Base.metadata,
    Column(
        "professional_id",
        ForeignKey("professionals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("client_id", ForeignKey("clients.id", ondelete="CASCADE"), primary_key=True),
)


class Professional(Base):
    __tablename__ = "professionals"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320))
    specialty: Mapped[str | None] = mapped_column(String(120))
    phone: Mapped[str | None] = mapped_column(String(40))
    photo_url: Mapped[str | None] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # saldo de sessões antecipadas (sublocação de sala)
    advance_balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        unique=True,
        index=True,
        nullable=True,
    )

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        onupdate=lambda: dt.datetime.now(tz=dt.UTC),
        nullable=False,
    )

    user = relationship("User", back_populates="professional")
    associated_clients = relationship(
        "Client", secondary=professional_clients, order_by="Client.name"
    )

    __table_args__ = (
        CheckConstraint("advance_balance >= 0", name="ck_prof_advance_nonneg"),
    )


class ProfessionalPublic(Base):
    """Espelho público do profissional (lido pela página inicial)."""

    __tablename__ = "professional_public"

    professional_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    specialty: Mapped[str | None] = mapped_column(String(120))
    photo_url: Mapped[str | None] = mapped_column(String(500))
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: dt.datetime.now(tz=dt.UTC),
        onupdate=lambda: dt.datetime.now(tz=dt.UTC),
        nullable=False,
    )


class ProfessionalMonthlyRealized(Base):
    """Contador público de atendimentos realizados por profissional/mês."""

    __tablename__ = "professional_monthly_realized"

    professional_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    month_key: Mapped[str] = mapped_column(String(7), primary_key=True)  # YYYY-MM
    realized: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
