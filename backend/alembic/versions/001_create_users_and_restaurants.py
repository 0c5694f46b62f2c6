"""Create users and restaurants tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `users` and `restaurants` tables, their enum types and
       the restaurant indexes.
How:   PostgreSQL-specific: native enums (user_role, venue_category,
       seating_type), TEXT[] for vibe, TIMESTAMP WITH TIME ZONE.

Rollback: downgrade() drops both tables and the enum types.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = postgresql.ENUM("admin", "user", name="user_role", create_type=False)
venue_category = postgresql.ENUM("Bar", "Restaurant", "Cafe", name="venue_category", create_type=False)
seating_type = postgresql.ENUM("Indoor", "Al Fresco", "Both", name="seating_type", create_type=False)


def upgrade() -> None:
    bind = op.get_bind()
    user_role.create(bind, checkfirst=True)
    venue_category.create(bind, checkfirst=True)
    seating_type.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash; never returned by the API",
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default=sa.text("'user'")),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "restaurants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", venue_category, nullable=False),
        sa.Column("price_range", sa.String(50), nullable=True),
        sa.Column(
            "vibe",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'"),
            comment="Ordered free-form tags",
        ),
        sa.Column("latitude", sa.Numeric(10, 8), nullable=False),
        sa.Column("longitude", sa.Numeric(11, 8), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("seating", seating_type, nullable=False),
        sa.Column("is_licensed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("has_shisha", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("google_place_id", sa.String(255), nullable=True),
        sa.Column("rating", sa.Numeric(3, 2), nullable=True),
        sa.Column("added_by", sa.Integer(), nullable=True),
        sa.Column("last_modified_by", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("google_place_id"),
        sa.ForeignKeyConstraint(["added_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["last_modified_by"], ["users.id"], ondelete="SET NULL"),
    )

    op.create_index("idx_restaurants_name", "restaurants", ["name"])
    op.create_index("idx_restaurants_category", "restaurants", ["category"])
    op.create_index("idx_google_place_id", "restaurants", ["google_place_id"])
    op.create_index("idx_restaurants_location", "restaurants", ["latitude", "longitude"])
    # Newest-first listing
    op.create_index(
        "idx_restaurants_created_at",
        "restaurants",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop both tables and the enum types. All directory data is lost."""
    op.drop_index("idx_restaurants_created_at", table_name="restaurants")
    op.drop_index("idx_restaurants_location", table_name="restaurants")
    op.drop_index("idx_google_place_id", table_name="restaurants")
    op.drop_index("idx_restaurants_category", table_name="restaurants")
    op.drop_index("idx_restaurants_name", table_name="restaurants")
    op.drop_table("restaurants")
    op.drop_table("users")

    bind = op.get_bind()
    seating_type.drop(bind, checkfirst=True)
    venue_category.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
