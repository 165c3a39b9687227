"""initial salesup schema: users, daily entries, snapshots, invitations

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f1c2a9d7b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # -----------------------------------------------------
    # 1) users
    # -----------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(32), nullable=False, server_default="agent"),
        sa.Column("invited_by_user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("magic_code", sa.String(64), nullable=True),
        sa.Column("magic_code_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("daily_reminders", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("weekly_reports", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("goal_alerts", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_invited_by_user_id", "users", ["invited_by_user_id"])

    # -----------------------------------------------------
    # 2) daily_entries (one per agent per day)
    # -----------------------------------------------------
    op.create_table(
        "daily_entries",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("agent_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("contracts_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("upgrades_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_upgrade_value", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("insurance_packages", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("agent_id", "date", name="uq_daily_entries_agent_date"),
    )
    op.create_index("ix_daily_entries_agent_id", "daily_entries", ["agent_id"])
    op.create_index("ix_daily_entries_date", "daily_entries", ["date"])

    # -----------------------------------------------------
    # 3) performance_snapshots (upserted per agent + period)
    # -----------------------------------------------------
    op.create_table(
        "performance_snapshots",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("agent_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("period", sa.String(16), nullable=False, server_default="monthly"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_contracts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_upgrades", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_revenue", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("insurance_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("upgrade_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("average_upgrade_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("revenue_per_contract", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("consistency_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("performance_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("agent_id", "period", name="uq_performance_snapshots_agent_period"),
    )
    op.create_index("ix_performance_snapshots_agent_id", "performance_snapshots", ["agent_id"])

    # -----------------------------------------------------
    # 4) invitations
    # -----------------------------------------------------
    op.create_table(
        "invitations",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("invited_by_user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("invited_by_name", sa.String(200), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("accepted_user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_invitations_email", "invitations", ["email"])
    op.create_index("ix_invitations_token", "invitations", ["token"], unique=True)
    op.create_index("ix_invitations_status", "invitations", ["status"])
    op.create_index("ix_invitations_invited_by_user_id", "invitations", ["invited_by_user_id"])


def downgrade() -> None:
    op.drop_table("invitations")
    op.drop_table("performance_snapshots")
    op.drop_table("daily_entries")
    op.drop_table("users")
