"""add_overlap_exclusion_to_bookings

Revision ID: 7b1e4c2a9f30
Revises: 3e5d9b1c07a2
Create Date: 2026-10-02 16:48:05.771934

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7b1e4c2a9f30'
down_revision: Union[str, None] = '3e5d9b1c07a2'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # El índice único parcial solo cubre reservas con el mismo inicio.
    # En PostgreSQL la restricción de exclusión rechaza cualquier solape
    # entre reservas activas de la misma cancha.
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist;")

    op.execute("""
        ALTER TABLE bookings
        ADD CONSTRAINT excl_active_booking_overlap
        EXCLUDE USING gist (
            court_id WITH =,
            tsrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (status IN ('PENDING', 'CONFIRMED'));
    """)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute(
        "ALTER TABLE bookings DROP CONSTRAINT IF EXISTS excl_active_booking_overlap;"
    )
