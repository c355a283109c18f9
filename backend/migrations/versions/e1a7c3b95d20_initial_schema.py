"""Initial schema for ResQLink.

Revision ID: e1a7c3b95d20
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "e1a7c3b95d20"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # PostGIS is required for the geography expression index.
    op.execute(sa.text("CREATE EXTENSION IF NOT EXISTS postgis"))

    op.create_table(
        "incidents",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("severity", sa.String(length=10), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(length=300), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("verified", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("admin_notes", sa.String(length=1000), nullable=True),
        sa.Column("reporter_name", sa.String(length=100), nullable=False),
        sa.Column("reporter_phone", sa.String(length=30), nullable=True),
        sa.Column("reporter_email", sa.String(length=255), nullable=True),
        sa.Column("response_time_minutes", sa.Integer(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolution_time_minutes", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_incidents_longitude"),
        sa.CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_incidents_latitude"),
        if_not_exists=True,
    )

    # Proximity queries cast (longitude, latitude) to geography; index that expression.
    op.execute(
        sa.text(
            "CREATE INDEX IF NOT EXISTS idx_incidents_location ON incidents "
            "USING gist ((CAST(ST_SetSRID(ST_MakePoint(longitude, latitude), 4326) "
            "AS geography(POINT,4326))))"
        )
    )
    op.create_index(
        "idx_incidents_status_created",
        "incidents",
        ["status", sa.text("created_at DESC")],
        if_not_exists=True,
    )
    op.create_index(
        "idx_incidents_severity_category",
        "incidents",
        ["severity", "category"],
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_index("idx_incidents_severity_category", table_name="incidents", if_exists=True)
    op.drop_index("idx_incidents_status_created", table_name="incidents", if_exists=True)
    op.drop_index("idx_incidents_location", table_name="incidents", if_exists=True)
    op.drop_table("incidents", if_exists=True)
