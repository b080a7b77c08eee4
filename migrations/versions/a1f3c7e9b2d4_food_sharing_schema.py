"""food sharing schema

Revision ID: a1f3c7e9b2d4
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


revision = "a1f3c7e9b2d4"
down_revision = None
branch_labels = None
depends_on = None


OPEN_ONLY = sa.text("status != 'cancelled'")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=120), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("profile_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )

    op.create_table(
        "hotel_profiles",
        sa.Column("id", sa.String(length=36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("fssai_number", sa.String(length=40), nullable=True),
        sa.Column("contact_person", sa.String(length=120), nullable=True),
        sa.Column("business_type", sa.String(length=20), nullable=False, server_default="hotel"),
    )
    op.create_table(
        "ngo_profiles",
        sa.Column("id", sa.String(length=36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("registration_number", sa.String(length=60), nullable=True),
        sa.Column("contact_person", sa.String(length=120), nullable=True),
        sa.Column("beneficiary_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "volunteer_profiles",
        sa.Column("id", sa.String(length=36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("availability", sa.JSON(), nullable=False),
        sa.Column("training_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("active_area", sa.String(length=120), nullable=True),
    )
    op.create_table(
        "admin_profiles",
        sa.Column("id", sa.String(length=36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("permissions", sa.JSON(), nullable=False),
    )

    op.create_table(
        "food_listings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("hotel_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("hotel_name", sa.String(length=120), nullable=False),
        sa.Column("food_name", sa.String(length=150), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("quantity_unit", sa.String(length=30), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("preparation_time", sa.BigInteger(), nullable=False),
        sa.Column("expiry_time", sa.BigInteger(), nullable=False),
        sa.Column("fssai_number", sa.String(length=40), nullable=False),
        sa.Column("is_vegetarian", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_vegan", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("contains_nuts", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("contains_gluten", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("contains_dairy", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="available"),
        sa.Column("assigned_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("assigned_name", sa.String(length=120), nullable=True),
        sa.Column("assigned_role", sa.String(length=20), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index("ix_food_listings_hotel_id", "food_listings", ["hotel_id"])
    op.create_index("ix_food_listings_expiry_time", "food_listings", ["expiry_time"])
    op.create_index("ix_food_listings_status", "food_listings", ["status"])

    op.create_table(
        "food_collections",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("food_listing_id", sa.String(length=36), sa.ForeignKey("food_listings.id"), nullable=False),
        sa.Column("hotel_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("ngo_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("volunteer_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("pickup_time", sa.BigInteger(), nullable=False),
        sa.Column("delivery_time", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="scheduled"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("pickup_code", sa.String(length=6), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_food_collections_hotel_id", "food_collections", ["hotel_id"])
    op.create_index("ix_food_collections_ngo_id", "food_collections", ["ngo_id"])
    op.create_index("ix_food_collections_volunteer_id", "food_collections", ["volunteer_id"])
    op.create_index(
        "uq_food_collections_active_listing",
        "food_collections",
        ["food_listing_id"],
        unique=True,
        sqlite_where=OPEN_ONLY,
        postgresql_where=OPEN_ONLY,
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=150), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False, server_default="info"),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade():
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("uq_food_collections_active_listing", table_name="food_collections")
    op.drop_index("ix_food_collections_volunteer_id", table_name="food_collections")
    op.drop_index("ix_food_collections_ngo_id", table_name="food_collections")
    op.drop_index("ix_food_collections_hotel_id", table_name="food_collections")
    op.drop_table("food_collections")
    op.drop_index("ix_food_listings_status", table_name="food_listings")
    op.drop_index("ix_food_listings_expiry_time", table_name="food_listings")
    op.drop_index("ix_food_listings_hotel_id", table_name="food_listings")
    op.drop_table("food_listings")
    for table_name in ("admin_profiles", "volunteer_profiles", "ngo_profiles", "hotel_profiles", "users"):
        op.drop_table(table_name)
