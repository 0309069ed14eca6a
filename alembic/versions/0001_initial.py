"""initial ledger schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="pilot"),
        sa.Column("codigo", sa.String(length=20), nullable=True),
        sa.Column("tarifa_hora", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)
    op.create_unique_constraint("uq_users_codigo", "users", ["codigo"])

    op.create_table(
        "aircraft",
        sa.Column("matricula", sa.String(length=20), primary_key=True),
        sa.Column("modelo", sa.String(length=80), nullable=False, server_default=""),
        sa.Column("hobbs_actual", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("tach_actual", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "components",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("aircraft_id", sa.String(length=20), sa.ForeignKey("aircraft.matricula"), nullable=False),
        sa.Column("tipo", sa.String(length=12), nullable=False),
        sa.Column("horas_acumuladas", sa.Numeric(10, 1), nullable=True),
        sa.Column("limite_tbo", sa.Numeric(10, 1), nullable=True),
        sa.UniqueConstraint("aircraft_id", "tipo", name="uq_component_aircraft_tipo"),
    )
    op.create_index("ix_components_aircraft_id", "components", ["aircraft_id"])

    op.create_table(
        "flight_submissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("piloto_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("aircraft_id", sa.String(length=20), sa.ForeignKey("aircraft.matricula"), nullable=False),
        sa.Column("estado", sa.String(length=30), nullable=False, server_default="PENDIENTE"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("fecha_vuelo", sa.DateTime(), nullable=True),
        sa.Column("hobbs_final", sa.Numeric(10, 2), nullable=True),
        sa.Column("tach_final", sa.Numeric(10, 2), nullable=True),
        sa.Column("copiloto", sa.String(length=200), nullable=True),
        sa.Column("detalle", sa.Text(), nullable=True),
        sa.Column("ruta", sa.String(length=200), nullable=True),
        sa.Column("cliente", sa.String(length=20), nullable=True),
        sa.Column("rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("instructor_rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("flight_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_flight_submissions_piloto_id", "flight_submissions", ["piloto_id"])
    op.create_index("ix_flight_submissions_aircraft_id", "flight_submissions", ["aircraft_id"])
    op.create_index("ix_flight_submissions_estado", "flight_submissions", ["estado"])
    op.create_index("ix_flight_submissions_flight_id", "flight_submissions", ["flight_id"])

    op.create_table(
        "flights",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("fecha", sa.DateTime(), nullable=False),
        sa.Column("hobbs_inicio", sa.Numeric(10, 2), nullable=False),
        sa.Column("hobbs_fin", sa.Numeric(10, 2), nullable=False),
        sa.Column("tach_inicio", sa.Numeric(10, 2), nullable=False),
        sa.Column("tach_fin", sa.Numeric(10, 2), nullable=False),
        sa.Column("diff_hobbs", sa.Numeric(10, 2), nullable=False),
        sa.Column("diff_tach", sa.Numeric(10, 2), nullable=False),
        sa.Column("costo", sa.Numeric(14, 2), nullable=False),
        sa.Column("tarifa", sa.Numeric(12, 2), nullable=False),
        sa.Column("instructor_rate", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("airframe_hours", sa.Numeric(10, 1), nullable=True),
        sa.Column("engine_hours", sa.Numeric(10, 1), nullable=True),
        sa.Column("propeller_hours", sa.Numeric(10, 1), nullable=True),
        sa.Column("cliente", sa.String(length=20), nullable=True),
        sa.Column("copiloto", sa.String(length=200), nullable=True),
        sa.Column("detalle", sa.Text(), nullable=True),
        sa.Column("ruta", sa.String(length=200), nullable=True),
        sa.Column("piloto_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("aircraft_id", sa.String(length=20), sa.ForeignKey("aircraft.matricula"), nullable=False),
        sa.Column("submission_id", sa.Integer(), sa.ForeignKey("flight_submissions.id"), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_flights_fecha", "flights", ["fecha"])
    op.create_index("ix_flights_piloto_id", "flights", ["piloto_id"])
    op.create_index("ix_flights_aircraft_id", "flights", ["aircraft_id"])

    op.create_table(
        "deposits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("fecha", sa.DateTime(), nullable=False),
        sa.Column("monto", sa.Numeric(14, 2), nullable=False),
        sa.Column("detalle", sa.Text(), nullable=True),
        sa.Column("estado", sa.String(length=20), nullable=False, server_default="PENDIENTE"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_deposits_user_id", "deposits", ["user_id"])
    op.create_index("ix_deposits_estado", "deposits", ["estado"])

    op.create_table(
        "fuel_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("fecha", sa.DateTime(), nullable=False),
        sa.Column("litros", sa.Numeric(10, 2), nullable=False),
        sa.Column("monto", sa.Numeric(14, 2), nullable=False),
        sa.Column("detalle", sa.Text(), nullable=True),
        sa.Column("estado", sa.String(length=20), nullable=False, server_default="PENDIENTE"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_fuel_logs_user_id", "fuel_logs", ["user_id"])
    op.create_index("ix_fuel_logs_fecha", "fuel_logs", ["fecha"])
    op.create_index("ix_fuel_logs_estado", "fuel_logs", ["estado"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("monto", sa.Numeric(14, 2), nullable=False),
        sa.Column("tipo", sa.String(length=20), nullable=False),
        sa.Column("flight_id", sa.Integer(), sa.ForeignKey("flights.id"), nullable=True),
        sa.Column("deposit_id", sa.Integer(), nullable=True),
        sa.Column("fuel_log_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_tipo", "transactions", ["tipo"])
    op.create_index("ix_transactions_flight_id", "transactions", ["flight_id"])
    op.create_index("ix_transactions_deposit_id", "transactions", ["deposit_id"])
    op.create_index("ix_transactions_fuel_log_id", "transactions", ["fuel_log_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor", sa.String(length=320), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_actor", "audit_logs", ["actor"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])

    op.create_table(
        "email_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("to_email", sa.String(length=320), nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="queued"),
        sa.Column("related_ref", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("next_attempt_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_email_logs_to_email", "email_logs", ["to_email"])


def downgrade() -> None:
    for table in (
        "email_logs", "audit_logs", "transactions", "fuel_logs", "deposits",
        "flights", "flight_submissions", "components", "aircraft", "users",
    ):
        op.drop_table(table)
