"""initial agenda schema

Revision ID: 5b1e0c7a9d21
Revises:
Create Date: 2026-10-19 10:12:44.503118

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op
from clinica.models.audit_log import PortableINET

# revision identifiers, used by Alembic.
revision: str = "5b1e0c7a9d21"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade():
    # 1) Enums (nomes dos membros, como o SQLAlchemy grava)
    role_enum = sa.Enum("ADMIN", "PROFESSIONAL", name="role_enum")
    payment_enum = sa.Enum("CASH", "PIX", "CARD", name="payment_method_enum")
    status_enum = sa.Enum(
        "SCHEDULED", "DONE", "CHANGED", "CANCELLED", name="appointment_status_enum"
    )

    # 2) users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", role_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # 3) professionals (antes de clients por causa da FK)
    op.create_table(
        "professionals",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("specialty", sa.String(length=120), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("advance_balance", sa.Integer(), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("advance_balance >= 0", name="ck_prof_advance_nonneg"),
    )
    op.create_index(
        "ix_professionals_user_id", "professionals", ["user_id"], unique=True
    )

    # 4) clients
    op.create_table(
        "clients",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("cpf", sa.String(length=11), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("whats", sa.String(length=11), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("phones", sa.String(length=120), nullable=True),
        sa.Column("address", sa.String(length=240), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("package_balance", sa.Integer(), nullable=False),
        sa.Column(
            "professional_id",
            sa.String(length=32),
            sa.ForeignKey("professionals.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("package_balance >= 0", name="ck_client_package_nonneg"),
    )
    op.create_index("ix_clients_cpf", "clients", ["cpf"])
    op.create_index("ix_clients_email", "clients", ["email"])
    op.create_index("ix_clients_whats", "clients", ["whats"])
    op.create_index("ix_clients_birth_date", "clients", ["birth_date"])
    op.create_index("ix_clients_professional_id", "clients", ["professional_id"])

    # 5) associação profissional <-> clientes
    op.create_table(
        "professional_clients",
        sa.Column(
            "professional_id",
            sa.String(length=32),
            sa.ForeignKey("professionals.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "client_id",
            sa.String(length=32),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # 6) espelho público + contadores mensais
    op.create_table(
        "professional_public",
        sa.Column("professional_id", sa.String(length=32), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("specialty", sa.String(length=120), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "professional_monthly_realized",
        sa.Column("professional_id", sa.String(length=32), primary_key=True),
        sa.Column("month_key", sa.String(length=7), primary_key=True),
        sa.Column("realized", sa.Integer(), nullable=False),
    )

    # 7) appointments
    op.create_table(
        "appointments",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=5), nullable=False),
        sa.Column("room", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.String(length=32), nullable=True),
        sa.Column("client_name", sa.String(length=160), nullable=False),
        sa.Column(
            "professional_id",
            sa.String(length=32),
            sa.ForeignKey("professionals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("professional_name", sa.String(length=120), nullable=False),
        sa.Column("payment_method", payment_enum, nullable=False),
        sa.Column("status", status_enum, nullable=False),
        sa.Column("received_value", sa.Float(), nullable=False),
        sa.Column("transfer_value", sa.Float(), nullable=False),
        sa.Column("finance_posted", sa.Boolean(), nullable=False),
        sa.Column("uses_client_package", sa.Boolean(), nullable=False),
        sa.Column("uses_professional_advance", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("date", "time", "room", name="uq_appt_slot_room"),
        sa.UniqueConstraint(
            "date", "time", "professional_id", name="uq_appt_slot_prof"
        ),
        sa.UniqueConstraint("date", "time", "client_id", name="uq_appt_slot_client"),
        sa.CheckConstraint("room BETWEEN 1 AND 4", name="ck_appt_room"),
    )
    op.create_index("ix_appointments_client_id", "appointments", ["client_id"])
    op.create_index("ix_appt_professional_id", "appointments", ["professional_id"])
    op.create_index("ix_appt_date", "appointments", ["date"])

    # 8) audit_logs
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=32), nullable=True),
        sa.Column("timestamp_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ip", PortableINET(), nullable=True),
    )
    op.create_index("ix_audit_timestamp_utc", "audit_logs", ["timestamp_utc"])
    op.create_index("ix_audit_user_id", "audit_logs", ["user_id"])


def downgrade():
    bind = op.get_bind()

    op.drop_index("ix_audit_user_id", table_name="audit_logs")
    op.drop_index("ix_audit_timestamp_utc", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_appt_date", table_name="appointments")
    op.drop_index("ix_appt_professional_id", table_name="appointments")
    op.drop_index("ix_appointments_client_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_table("professional_monthly_realized")
    op.drop_table("professional_public")
    op.drop_table("professional_clients")

    for name in (
        "ix_clients_professional_id",
        "ix_clients_birth_date",
        "ix_clients_whats",
        "ix_clients_email",
        "ix_clients_cpf",
    ):
        op.drop_index(name, table_name="clients")
    op.drop_table("clients")

    op.drop_index("ix_professionals_user_id", table_name="professionals")
    op.drop_table("professionals")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    if bind.dialect.name == "postgresql":
        for enum_name in ("appointment_status_enum", "payment_method_enum", "role_enum"):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
