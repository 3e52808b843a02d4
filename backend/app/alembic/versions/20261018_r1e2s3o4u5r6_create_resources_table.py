"""create resources table

Revision ID: r1e2s3o4u5r6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "r1e2s3o4u5r6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "resources",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("external_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("subscription_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_pre_paid", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_prorated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("activation_timestamps", sa.JSON(), nullable=False),
        sa.Column("deactivation_timestamps", sa.JSON(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_resources_id", "resources", ["id"])
    op.create_index("ix_resources_external_id", "resources", ["external_id"])
    op.create_index("ix_resources_subscription_id", "resources", ["subscription_id"])


def downgrade() -> None:
    op.drop_index("ix_resources_subscription_id", table_name="resources")
    op.drop_index("ix_resources_external_id", table_name="resources")
    op.drop_index("ix_resources_id", table_name="resources")
    op.drop_table("resources")
