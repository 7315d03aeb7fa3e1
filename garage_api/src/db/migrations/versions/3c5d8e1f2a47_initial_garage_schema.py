"""Initial garage schema.

Tables:
- users
- refresh_tokens
- vehicles
- vehicle_energy_types
- energy_entries
- service_types
- service_records
- service_items
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c5d8e1f2a47"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NOW = sa.text("now()")


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("first_name", sa.String(64), nullable=False),
        sa.Column("last_name", sa.String(64), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("token", sa.String(200), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("session_duration_days", sa.Integer(), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("replaced_by_token", sa.String(200), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("device_name", sa.String(128), nullable=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_refresh_tokens"),
        sa.UniqueConstraint("token", name="uq_refresh_tokens_token"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_refresh_tokens_user_id_users"
        ),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("brand", sa.String(64), nullable=False),
        sa.Column("model", sa.String(64), nullable=False),
        sa.Column("engine_type", sa.String(32), nullable=False),
        sa.Column("manufactured_year", sa.Integer(), nullable=True),
        sa.Column("type", sa.String(32), nullable=True),
        sa.Column("vin", sa.String(17), nullable=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_vehicles"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="fk_vehicles_user_id_users"
        ),
    )
    op.create_index("ix_vehicles_user_id", "vehicles", ["user_id"])

    op.create_table(
        "vehicle_energy_types",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("vehicle_id", sa.Uuid(), nullable=False),
        sa.Column("energy_type", sa.String(32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_vehicle_energy_types"),
        sa.UniqueConstraint("vehicle_id", "energy_type", name="uq_vehicle_energy_types_vehicle_type"),
        sa.ForeignKeyConstraint(
            ["vehicle_id"], ["vehicles.id"], ondelete="CASCADE",
            name="fk_vehicle_energy_types_vehicle_id_vehicles",
        ),
    )
    op.create_index("ix_vehicle_energy_types_vehicle_id", "vehicle_energy_types", ["vehicle_id"])

    op.create_table(
        "energy_entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("mileage", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("energy_unit", sa.String(32), nullable=False),
        sa.Column("volume", sa.Numeric(12, 2), nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("price_per_unit", sa.Numeric(12, 3), nullable=True),
        sa.Column("vehicle_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_energy_entries"),
        sa.ForeignKeyConstraint(
            ["vehicle_id"], ["vehicles.id"], ondelete="CASCADE",
            name="fk_energy_entries_vehicle_id_vehicles",
        ),
    )
    op.create_index("ix_energy_entries_vehicle_id", "energy_entries", ["vehicle_id"])
    op.create_index("ix_energy_entries_date", "energy_entries", ["date"])

    op.create_table(
        "service_types",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_service_types"),
        sa.UniqueConstraint("name", name="uq_service_types_name"),
    )

    op.create_table(
        "service_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(64), nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("mileage", sa.Integer(), nullable=True),
        sa.Column("service_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("manual_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("type_id", sa.Uuid(), nullable=False),
        sa.Column("vehicle_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_service_records"),
        sa.ForeignKeyConstraint(
            ["type_id"], ["service_types.id"], ondelete="RESTRICT",
            name="fk_service_records_type_id_service_types",
        ),
        sa.ForeignKeyConstraint(
            ["vehicle_id"], ["vehicles.id"], ondelete="CASCADE",
            name="fk_service_records_vehicle_id_vehicles",
        ),
    )
    op.create_index("ix_service_records_vehicle_id", "service_records", ["vehicle_id"])
    op.create_index("ix_service_records_type_id", "service_records", ["type_id"])
    op.create_index("ix_service_records_service_date", "service_records", ["service_date"])

    op.create_table(
        "service_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 2), nullable=False),
        sa.Column("part_number", sa.String(64), nullable=True),
        sa.Column("notes", sa.String(300), nullable=True),
        sa.Column("service_record_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_service_items"),
        sa.ForeignKeyConstraint(
            ["service_record_id"], ["service_records.id"], ondelete="CASCADE",
            name="fk_service_items_service_record_id_service_records",
        ),
    )
    op.create_index("ix_service_items_service_record_id", "service_items", ["service_record_id"])


def downgrade() -> None:
    op.drop_table("service_items")
    op.drop_table("service_records")
    op.drop_table("service_types")
    op.drop_table("energy_entries")
    op.drop_table("vehicle_energy_types")
    op.drop_table("vehicles")
    op.drop_table("refresh_tokens")
    op.drop_table("users")
