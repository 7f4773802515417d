"""initial

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


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("USER", "RESELLER", "ADMIN", name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role_active", "users", ["role", "is_active"], unique=False)

    op.create_table(
        "wallets",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("balance", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("is_locked", sa.Boolean, nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_wallets_user_id", "wallets", ["user_id"], unique=False)

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("wallet_id", sa.Integer, sa.ForeignKey("wallets.id"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Numeric(14, 4), nullable=False),
        sa.Column("balance_after", sa.Numeric(14, 4), nullable=False),
        sa.Column("entry_type", sa.Enum("CREDIT", "DEBIT", name="ledgertype"), nullable=False),
        sa.Column("reference", sa.String(64), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("metadata", sa.JSON, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_wallet_transactions_wallet_id_type", "wallet_transactions", ["wallet_id", "entry_type"], unique=False)
    op.create_index("ix_wallet_transactions_user_created", "wallet_transactions", ["user_id", "created_at"], unique=False)
    op.create_index("ix_wallet_transactions_reference", "wallet_transactions", ["reference"], unique=False)

    op.create_table(
        "markup_rules",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("kind", sa.Enum("MARKUP", "VOLUME_TIER", name="rulekind"), nullable=False, server_default="MARKUP"),
        sa.Column("markup_type", sa.Enum("PERCENTAGE", "FIXED_AMOUNT", "TIERED", name="markuptype"), nullable=False),
        sa.Column("markup_value", sa.Numeric(14, 4), nullable=False),
        sa.Column("min_volume", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_volume", sa.Integer, nullable=True),
        sa.Column("country_code", sa.String(8), nullable=True),
        sa.Column("sms_type", sa.String(32), nullable=True),
        sa.Column("priority", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_markup_rules_user_name", "markup_rules", ["user_id", "name"], unique=True)
    op.create_index("ix_markup_rules_user_active", "markup_rules", ["user_id", "is_active"], unique=False)
    op.create_index("ix_markup_rules_priority", "markup_rules", ["priority"], unique=False)

    op.create_table(
        "profit_transactions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("transaction_id", sa.String(64), nullable=False),
        sa.Column("transaction_type", sa.String(32), nullable=False),
        sa.Column("base_cost", sa.Numeric(14, 4), nullable=False),
        sa.Column("client_charge", sa.Numeric(14, 4), nullable=False),
        sa.Column("profit", sa.Numeric(14, 4), nullable=False),
        sa.Column("markup_applied", sa.Numeric(14, 4), nullable=False),
        sa.Column("volume", sa.Integer, nullable=False),
        sa.Column("country_code", sa.String(8), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_profit_transactions_user_created", "profit_transactions", ["user_id", "created_at"], unique=False)
    op.create_index("ix_profit_transactions_type", "profit_transactions", ["transaction_type"], unique=False)

    op.create_table(
        "user_pricing_tiers",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column(
            "tier",
            sa.Enum("BASIC", "STANDARD", "PREMIUM", "ENTERPRISE", "CUSTOM", name="pricingtier"),
            nullable=False,
            server_default="BASIC",
        ),
        sa.Column("custom_pricing", sa.JSON, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "billing_configs",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("auto_recharge", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("auto_recharge_amount", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("auto_recharge_threshold", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "sms_logs",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sender_id", sa.String(16), nullable=True),
        sa.Column("recipients", sa.JSON, nullable=False),
        sa.Column("cost", sa.Numeric(14, 4), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_sms_logs_user_sent", "sms_logs", ["user_id", "sent_at"], unique=False)


def downgrade():
    op.drop_table("sms_logs")
    op.drop_table("billing_configs")
    op.drop_table("user_pricing_tiers")
    op.drop_table("profit_transactions")
    op.drop_table("markup_rules")
    op.drop_table("wallet_transactions")
    op.drop_table("wallets")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS pricingtier")
    op.execute("DROP TYPE IF EXISTS markuptype")
    op.execute("DROP TYPE IF EXISTS rulekind")
    op.execute("DROP TYPE IF EXISTS ledgertype")
    op.execute("DROP TYPE IF EXISTS userrole")
