from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("balance", sa.Float(), nullable=False, server_default="0"),
        sa.Column("amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("pnl", sa.Float(), nullable=False, server_default="0"),
        sa.Column("daily_gain", sa.Float(), nullable=False, server_default="0"),
        sa.Column("amount_to_target", sa.Float(), nullable=False, server_default="0"),
        sa.Column("milestone", sa.String(length=256), nullable=False, server_default=""),
        sa.Column("milestone_value", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_ledger_entries_date", "ledger_entries", ["date"], unique=False)

    op.create_table(
        "goals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("level", sa.String(length=64), nullable=False),
        sa.Column("start_balance", sa.Float(), nullable=False),
        sa.Column("target_balance", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="Not Started"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_goals_position", "goals", ["position"], unique=False)

    op.create_table(
        "tracker_summary",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("latest_balance", sa.Float(), nullable=False, server_default="0"),
        sa.Column("target_status", sa.String(length=64), nullable=False),
        sa.Column("current_target", sa.Float(), nullable=False, server_default="0"),
        sa.Column("start_for_target", sa.Float(), nullable=False, server_default="0"),
        sa.Column("progress_to_target", sa.Float(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )

def downgrade():
    op.drop_table("tracker_summary")

    op.drop_index("ix_goals_position", table_name="goals")
    op.drop_table("goals")

    op.drop_index("ix_ledger_entries_date", table_name="ledger_entries")
    op.drop_table("ledger_entries")
