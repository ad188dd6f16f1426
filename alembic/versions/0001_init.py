"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "regions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("country", sa.String(length=100), nullable=False, server_default="Saudi Arabia"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_regions_code", "regions", ["code"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=120), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=10), nullable=False, server_default="ENG"),
        sa.Column("region_id", sa.Integer(), sa.ForeignKey("regions.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("password_changed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_region_id", "users", ["region_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_uid", sa.String(length=40), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("region_id", sa.Integer(), sa.ForeignKey("regions.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("name", "region_id", name="uq_customers_name_region"),
    )
    op.create_index("ix_customers_customer_uid", "customers", ["customer_uid"], unique=True)
    op.create_index("ix_customers_region_id", "customers", ["region_id"])

    op.create_table(
        "spare_parts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("code", sa.String(length=60), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_spare_parts_code", "spare_parts", ["code"], unique=True)

    op.create_table(
        "sequence_counters",
        sa.Column("scope", sa.String(length=60), primary_key=True),
        sa.Column("day", sa.String(length=8), primary_key=True),
        sa.Column("value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "service_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("serial_report_number", sa.String(length=100), nullable=False),
        sa.Column("date", sa.String(length=40), nullable=False),
        sa.Column("time_in", sa.String(length=40), nullable=False),
        sa.Column("time_out", sa.String(length=40), nullable=False),
        sa.Column("quotation", sa.String(length=120), nullable=False),
        sa.Column("purchase_order", sa.String(length=120), nullable=False),
        sa.Column("inventory", sa.String(length=120), nullable=False),
        sa.Column("machine_type", sa.String(length=20), nullable=False),
        sa.Column("other_machine_type", sa.String(length=120), nullable=True),
        sa.Column("head_life", sa.String(length=60), nullable=True),
        sa.Column("power_on_time", sa.String(length=60), nullable=True),
        sa.Column("jet_running_time", sa.String(length=60), nullable=True),
        sa.Column("ink_type", sa.String(length=120), nullable=True),
        sa.Column("solvent_type", sa.String(length=120), nullable=True),
        sa.Column("service_due_date", sa.Date(), nullable=True),
        sa.Column("model", sa.String(length=120), nullable=False),
        sa.Column("serial_number", sa.String(length=120), nullable=False),
        sa.Column("service_type", sa.String(length=30), nullable=False),
        sa.Column("other_service_type", sa.String(length=120), nullable=True),
        sa.Column("unicode", sa.String(length=120), nullable=True),
        sa.Column("configuration_code", sa.String(length=120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("job_completed", sa.String(length=3), nullable=False),
        sa.Column("job_incomplete_reason", sa.Text(), nullable=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("region_id", sa.Integer(), sa.ForeignKey("regions.id"), nullable=False),
        sa.Column("engineer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("customer_phone_number", sa.String(length=40), nullable=False),
        sa.Column("customer_designation", sa.String(length=120), nullable=False),
        sa.Column("concern_name", sa.String(length=255), nullable=False),
        sa.Column("service_report_picture", sa.String(length=500), nullable=False),
        sa.Column("delivery_note_picture", sa.String(length=500), nullable=False),
        sa.Column("date_entered", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_service_reports_serial_report_number", "service_reports", ["serial_report_number"], unique=True
    )
    op.create_index("ix_service_reports_customer_id", "service_reports", ["customer_id"])
    op.create_index("ix_service_reports_region_id", "service_reports", ["region_id"])
    op.create_index("ix_service_reports_engineer_id", "service_reports", ["engineer_id"])

    op.create_table(
        "service_report_spares",
        sa.Column(
            "report_id",
            sa.Integer(),
            sa.ForeignKey("service_reports.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("spare_part_id", sa.Integer(), sa.ForeignKey("spare_parts.id"), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("service_report_spares")
    op.drop_index("ix_service_reports_engineer_id", table_name="service_reports")
    op.drop_index("ix_service_reports_region_id", table_name="service_reports")
    op.drop_index("ix_service_reports_customer_id", table_name="service_reports")
    op.drop_index("ix_service_reports_serial_report_number", table_name="service_reports")
    op.drop_table("service_reports")
    op.drop_table("sequence_counters")
    op.drop_index("ix_spare_parts_code", table_name="spare_parts")
    op.drop_table("spare_parts")
    op.drop_index("ix_customers_region_id", table_name="customers")
    op.drop_index("ix_customers_customer_uid", table_name="customers")
    op.drop_table("customers")
    op.drop_index("ix_users_region_id", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_regions_code", table_name="regions")
    op.drop_table("regions")
