"""Initial schema: artworks, locations, exhibitions with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Artworks table
    op.create_table(
        "artworks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("artist", sa.String(255), nullable=False),
        sa.Column("detail_url", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # Locations table: ids are wall numbers and may be supplied explicitly
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("width", sa.Integer(), nullable=False),
        sa.Column("height", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("width > 0", name="check_location_width_positive"),
        sa.CheckConstraint("height > 0", name="check_location_height_positive"),
    )

    # Exhibitions table
    op.create_table(
        "exhibitions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "artwork_id",
            sa.Integer(),
            sa.ForeignKey("artworks.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "location_id",
            sa.Integer(),
            sa.ForeignKey("locations.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'scheduled'")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("start_date < end_date", name="check_exhibition_dates_ordered"),
        sa.CheckConstraint(
            "status IN ('scheduled', 'active', 'completed')", name="check_exhibition_status"
        ),
    )
    # The conflict query filters on location, then compares both dates.
    # Leading with location_id keeps each check to one wall's rows.
    op.create_index(
        "ix_exhibitions_location_dates", "exhibitions", ["location_id", "start_date", "end_date"]
    )
    # Deletion guard counts live exhibitions per artwork
    op.create_index("ix_exhibitions_artwork", "exhibitions", ["artwork_id"])
    op.create_index("ix_exhibitions_status", "exhibitions", ["status"])


def downgrade() -> None:
    op.drop_table("exhibitions")
    op.drop_table("locations")
    op.drop_table("artworks")
