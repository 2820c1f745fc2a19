"""Initial inventory schema.

- users, user_roles
- sectors, machines
- inventory_items (case-insensitive unique name)
- machine_assignments
- usage_logs
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d7a9e2b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_user_roles"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE", name="fk_user_roles_user_id_users"),
        sa.UniqueConstraint("user_id", name="uq_user_roles_user_id"),
        sa.CheckConstraint("role IN ('admin', 'editor', 'user')", name="ck_user_roles_role_valid"),
    )

    op.create_table(
        "sectors",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_sectors"),
    )

    op.create_table(
        "machines",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("sector_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_machines"),
        sa.ForeignKeyConstraint(["sector_id"], ["sectors.id"], ondelete="CASCADE", name="fk_machines_sector_id_sectors"),
    )
    op.create_index("ix_machines_sector_id", "machines", ["sector_id"])

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), server_default="other", nullable=False),
        sa.Column("stock", sa.Integer(), server_default="0", nullable=False),
        sa.Column("threshold", sa.Integer(), server_default="2", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_inventory_items"),
        sa.CheckConstraint("stock >= 0", name="ck_inventory_items_stock_non_negative"),
        sa.CheckConstraint("threshold >= 0", name="ck_inventory_items_threshold_non_negative"),
    )
    op.create_index(
        "uq_inventory_items_name_lower",
        "inventory_items",
        [sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "machine_assignments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("machine_id", sa.Uuid(), nullable=False),
        sa.Column("sector_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("usage_description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_machine_assignments"),
        sa.ForeignKeyConstraint(["item_id"], ["inventory_items.id"], ondelete="CASCADE", name="fk_machine_assignments_item_id_inventory_items"),
        sa.ForeignKeyConstraint(["machine_id"], ["machines.id"], ondelete="CASCADE", name="fk_machine_assignments_machine_id_machines"),
        sa.ForeignKeyConstraint(["sector_id"], ["sectors.id"], ondelete="CASCADE", name="fk_machine_assignments_sector_id_sectors"),
        sa.UniqueConstraint("item_id", "machine_id", name="uq_machine_assignments_item_machine"),
        sa.CheckConstraint("quantity > 0", name="ck_machine_assignments_quantity_positive"),
    )
    op.create_index("ix_machine_assignments_item_id", "machine_assignments", ["item_id"])
    op.create_index("ix_machine_assignments_machine_id", "machine_assignments", ["machine_id"])
    op.create_index("ix_machine_assignments_sector_id", "machine_assignments", ["sector_id"])

    op.create_table(
        "usage_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=True),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("sector_id", sa.Uuid(), nullable=True),
        sa.Column("machine_id", sa.Uuid(), nullable=True),
        sa.Column("general", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_usage_logs"),
        sa.ForeignKeyConstraint(["item_id"], ["inventory_items.id"], ondelete="SET NULL", name="fk_usage_logs_item_id_inventory_items"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL", name="fk_usage_logs_user_id_users"),
        sa.CheckConstraint("quantity > 0", name="ck_usage_logs_quantity_positive"),
    )
    op.create_index("ix_usage_logs_item_id", "usage_logs", ["item_id"])
    op.create_index("ix_usage_logs_used_at", "usage_logs", ["used_at"])
    op.create_index("ix_usage_logs_sector_id", "usage_logs", ["sector_id"])


def downgrade() -> None:
    op.drop_table("usage_logs")
    op.drop_table("machine_assignments")
    op.drop_index("uq_inventory_items_name_lower", table_name="inventory_items")
    op.drop_table("inventory_items")
    op.drop_table("machines")
    op.drop_table("sectors")
    op.drop_table("user_roles")
    op.drop_table("users")
